"""Account roles and role-gated dependencies."""

from enum import Enum
from typing import Any, Callable

from fastapi import Depends

from rento.api.deps import get_current_active_user
from rento.core.exceptions import AuthorizationError
from rento.models.user import User


class UserRole(str, Enum):
    """User roles in the system."""

    OWNER = "owner"
    RENTER = "renter"


def require_role(*allowed_roles: UserRole) -> Callable[..., Any]:
    """Dependency to require specific roles."""

    async def role_checker(current_user: User = Depends(get_current_active_user)) -> User:
        if current_user.role not in {role.value for role in allowed_roles}:
            raise AuthorizationError(
                f"Role '{current_user.role}' is not authorized for this action"
            )
        return current_user

    return role_checker


# Convenience dependencies
require_owner = require_role(UserRole.OWNER)
require_renter = require_role(UserRole.RENTER)

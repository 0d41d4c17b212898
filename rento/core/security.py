"""Password hashing and the access/refresh tokens Rento hands to owners and renters.

Every token names the account (`sub`) and the side of the marketplace it
acts for (`role`). `get_current_user` checks the role claim against the
stored account, so a token never outlives a role change.
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from uuid import UUID

from jose import JWTError, jwt
from passlib.context import CryptContext

from rento.config import settings
from rento.core.exceptions import AuthenticationError

ACCESS = "access"
REFRESH = "refresh"

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


@dataclass(frozen=True)
class TokenClaims:
    """Decoded identity carried by a Rento token."""

    user_id: UUID
    role: str
    token_type: str


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_token(
    user_id: UUID,
    role: str,
    token_type: str = ACCESS,
    expires_delta: timedelta | None = None,
) -> str:
    """Sign a token for an account acting as `role`."""
    if expires_delta is None:
        if token_type == REFRESH:
            expires_delta = timedelta(days=settings.refresh_token_expire_days)
        else:
            expires_delta = timedelta(minutes=settings.access_token_expire_minutes)

    claims = {
        "sub": str(user_id),
        "role": role,
        "type": token_type,
        "exp": datetime.now(UTC) + expires_delta,
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def issue_tokens(user_id: UUID, role: str) -> dict[str, str]:
    """Access and refresh token pair returned by register, login and refresh."""
    return {
        "access_token": create_token(user_id, role, ACCESS),
        "refresh_token": create_token(user_id, role, REFRESH),
        "token_type": "bearer",
    }


def decode_token(token: str, token_type: str = ACCESS) -> TokenClaims:
    """Verify a token's signature, expiry and type.

    Raises:
        AuthenticationError: Bad signature, expired, wrong type, or missing
            account/role claims
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        raise AuthenticationError(f"Token validation failed: {e}")

    if payload.get("type") != token_type:
        raise AuthenticationError("Invalid token type")

    role = payload.get("role")
    try:
        user_id = UUID(payload.get("sub") or "")
    except ValueError:
        raise AuthenticationError("Invalid token payload")
    if not role:
        raise AuthenticationError("Invalid token payload")

    return TokenClaims(user_id=user_id, role=role, token_type=token_type)

"""API dependencies for authentication and common operations."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rento.core.exceptions import AuthenticationError, AuthorizationError, NotFoundError
from rento.core.security import ACCESS, decode_token
from rento.database import get_db
from rento.models.booking import Booking
from rento.models.user import User
from rento.models.vehicle import Vehicle

__all__ = [
    "get_db",
    "get_current_user",
    "get_current_active_user",
    "get_owned_vehicle",
    "get_accessible_booking",
]

# Security scheme
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Get the current authenticated user from JWT token."""
    if credentials is None:
        raise AuthenticationError("Access denied")

    claims = decode_token(credentials.credentials, ACCESS)

    result = await db.execute(select(User).where(User.id == claims.user_id))
    user = result.scalar_one_or_none()

    if not user:
        raise AuthenticationError("User not found")
    if user.role != claims.role:
        raise AuthenticationError("Token was issued for a different account role")

    return user


async def get_current_active_user(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Get current user and verify they are active."""
    if not current_user.is_active:
        raise AuthorizationError("User account is deactivated")
    return current_user


async def get_owned_vehicle(
    vehicle_id: UUID,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Vehicle:
    """Load a vehicle the current user owns."""
    result = await db.execute(
        select(Vehicle).where(Vehicle.id == vehicle_id, Vehicle.deleted_at.is_(None))
    )
    vehicle = result.scalar_one_or_none()
    if not vehicle:
        raise NotFoundError("Vehicle", str(vehicle_id))
    if vehicle.owner_id != current_user.id:
        raise AuthorizationError("Only the vehicle owner can perform this action")
    return vehicle


async def get_accessible_booking(
    booking_id: UUID,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Load a booking the current user rents or whose vehicle they own."""
    result = await db.execute(select(Booking).where(Booking.id == booking_id))
    booking = result.scalar_one_or_none()

    if not booking:
        raise NotFoundError("Booking", str(booking_id))

    if current_user.id not in (booking.renter_id, booking.owner_id):
        raise AuthorizationError("You don't have permission to access this booking")

    return booking

"""Vehicle lifecycle operations that must not race with booking creation."""

import logging
from datetime import UTC, datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rento.core.exceptions import ConflictError
from rento.domain.availability import ACTIVE_BOOKING_STATUSES
from rento.models.booking import Booking
from rento.models.vehicle import Vehicle
from rento.services.booking_service import booking_service

logger = logging.getLogger(__name__)


class VehicleService:
    """Service for withdrawing vehicles from the marketplace."""

    async def soft_delete(self, db: AsyncSession, vehicle: Vehicle) -> Vehicle:
        """Withdraw a vehicle while keeping its booking history.

        Takes the same vehicle lock as booking creation, so a booking cannot
        commit between the active-booking count and the delete.

        Raises:
            NotFoundError: Vehicle was already deleted
            ConflictError: Vehicle still has pending or confirmed bookings
        """
        vehicle = await booking_service.lock_vehicle(db, vehicle.id)

        result = await db.execute(
            select(func.count())
            .select_from(Booking)
            .where(
                Booking.vehicle_id == vehicle.id,
                Booking.status.in_(ACTIVE_BOOKING_STATUSES),
            )
        )
        active = result.scalar() or 0
        if active:
            raise ConflictError(f"Vehicle has {active} active booking(s) and cannot be deleted")

        vehicle.availability = False
        vehicle.deleted_at = datetime.now(UTC)
        await db.flush()

        logger.info(f"Vehicle {vehicle.id} deleted by owner {vehicle.owner_id}")
        return vehicle


vehicle_service = VehicleService()

"""Booking lifecycle service.

Creation runs check-and-insert under a lock on the vehicle row: the first
statement of the transaction bumps `vehicles.booking_revision`, so concurrent
creators for the same vehicle wait for each other and the second one sees the
first one's booking. On PostgreSQL an exclusion constraint backs this up.
Status changes are compare-and-set on the status they were checked against.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from rento.core.exceptions import (
    ConflictError,
    NotFoundError,
    ValidationError,
    VehicleNotBookable,
    VehicleUnavailable,
)
from rento.domain.availability import (
    ACTIVE_BOOKING_STATUSES,
    find_conflicts,
    validate_date_range,
)
from rento.domain.booking_state import (
    BookingStatus,
    assert_booking_transition,
    resolve_actor_role,
)
from rento.domain.payment_state import assert_payment_transition, can_transition_payment
from rento.domain.pricing import PriceQuote, quote_rental
from rento.models.booking import Booking
from rento.models.payment import Payment
from rento.models.user import User
from rento.models.vehicle import Vehicle

logger = logging.getLogger(__name__)

EXCLUSION_CONSTRAINT = "excl_booking_vehicle_active_dates"


@dataclass
class AvailabilityResult:
    """Outcome of pricing a candidate booking."""

    vehicle: Vehicle
    available: bool
    quote: PriceQuote | None = None
    reason: str | None = None


class BookingService:
    """Service for creating bookings and moving them through their lifecycle."""

    async def _active_bookings(
        self, db: AsyncSession, vehicle_id: UUID, start: date
    ) -> list[Booking]:
        """Active bookings of a vehicle that end on or after `start`."""
        result = await db.execute(
            select(Booking).where(
                Booking.vehicle_id == vehicle_id,
                Booking.status.in_(ACTIVE_BOOKING_STATUSES),
                Booking.end_date >= start,
            )
        )
        return list(result.scalars().all())

    async def lock_vehicle(self, db: AsyncSession, vehicle_id: UUID) -> Vehicle:
        """Take the vehicle's booking lock for the rest of the transaction."""
        result = await db.execute(
            update(Vehicle)
            .where(Vehicle.id == vehicle_id, Vehicle.deleted_at.is_(None))
            .values(booking_revision=Vehicle.booking_revision + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise NotFoundError("Vehicle", str(vehicle_id))

        vehicle_result = await db.execute(
            select(Vehicle)
            .where(Vehicle.id == vehicle_id)
            .execution_options(populate_existing=True)
        )
        return vehicle_result.scalar_one()

    async def check_availability(
        self,
        db: AsyncSession,
        vehicle_id: UUID,
        start: date | None,
        end: date | None,
    ) -> AvailabilityResult:
        """Price a candidate booking and report whether its dates are free."""
        validate_date_range(start, end)

        result = await db.execute(
            select(Vehicle).where(Vehicle.id == vehicle_id, Vehicle.deleted_at.is_(None))
        )
        vehicle = result.scalar_one_or_none()
        if not vehicle:
            raise NotFoundError("Vehicle", str(vehicle_id))

        if not vehicle.availability:
            return AvailabilityResult(
                vehicle=vehicle, available=False, reason="Vehicle is not available for booking"
            )

        existing = await self._active_bookings(db, vehicle.id, start)
        if find_conflicts(start, end, existing):
            return AvailabilityResult(
                vehicle=vehicle,
                available=False,
                reason="Vehicle is not available for the selected dates",
            )

        quote = quote_rental(
            vehicle.price_per_day,
            start,
            end,
            price_per_week=vehicle.price_per_week,
            price_per_month=vehicle.price_per_month,
        )
        return AvailabilityResult(vehicle=vehicle, available=True, quote=quote)

    async def create_booking(
        self,
        db: AsyncSession,
        renter: User,
        vehicle_id: UUID,
        start: date | None,
        end: date | None,
    ) -> Booking:
        """Create a pending booking.

        Args:
            db: Session whose transaction the booking is written in
            renter: Authenticated renter
            vehicle_id: Vehicle to book
            start: First rental day
            end: Last rental day (inclusive)

        Returns:
            Booking: The new booking (flushed, not committed)

        Raises:
            InvalidDateRange: Missing dates or end before start
            NotFoundError: Unknown or deleted vehicle
            VehicleNotBookable: Owner has switched the vehicle off
            VehicleUnavailable: Dates overlap an active booking
        """
        validate_date_range(start, end)

        vehicle = await self.lock_vehicle(db, vehicle_id)
        if not vehicle.availability:
            raise VehicleNotBookable()
        if vehicle.owner_id == renter.id:
            raise ValidationError("You cannot book your own vehicle")

        existing = await self._active_bookings(db, vehicle.id, start)
        conflicts = find_conflicts(start, end, existing)
        if conflicts:
            logger.info(
                f"Booking rejected for vehicle {vehicle.id}: {start}..{end} overlaps "
                f"{len(conflicts)} active booking(s)"
            )
            raise VehicleUnavailable()

        quote = quote_rental(
            vehicle.price_per_day,
            start,
            end,
            price_per_week=vehicle.price_per_week,
            price_per_month=vehicle.price_per_month,
        )

        booking = Booking(
            vehicle_id=vehicle.id,
            renter_id=renter.id,
            owner_id=vehicle.owner_id,
            start_date=start,
            end_date=end,
            duration_days=quote.duration_days,
            total_amount=quote.total_amount,
            currency=vehicle.currency,
            status=BookingStatus.PENDING.value,
            payment_status="pending",
        )
        db.add(booking)
        try:
            await db.flush()
        except IntegrityError as e:
            if EXCLUSION_CONSTRAINT in str(e.orig):
                raise VehicleUnavailable() from e
            raise

        await db.refresh(booking)
        logger.info(
            f"Booking {booking.id} created for vehicle {vehicle.id} "
            f"({start}..{end}, {quote.duration_days} days, {quote.tier.value} rate, "
            f"total {quote.total_amount})"
        )
        return booking

    async def update_status(
        self,
        db: AsyncSession,
        booking: Booking,
        user: User,
        target: str,
    ) -> Booking:
        """Apply a status change requested by `user`.

        The caller's side of the booking is resolved first, then the
        transition table is consulted. The write only lands if the booking
        still has the status it was checked against; otherwise another
        request moved it first and `ConflictError` is raised. Nothing is
        written if any of these fail.
        """
        role = resolve_actor_role(user.id, user.role, booking.renter_id, booking.owner_id)
        target = getattr(target, "value", target)
        previous = booking.status
        assert_booking_transition(role, previous, target)

        now = datetime.now(UTC)
        values = {"status": target}
        if target == BookingStatus.CONFIRMED.value:
            values["confirmed_at"] = now
        elif target == BookingStatus.COMPLETED.value:
            values["completed_at"] = now
        elif target == BookingStatus.CANCELLED.value:
            values["cancelled_at"] = now
            values["cancelled_by"] = role.value

        result = await db.execute(
            update(Booking)
            .where(Booking.id == booking.id, Booking.status == previous)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            logger.info(
                f"Booking {booking.id} left {previous} before {role.value} {user.id} "
                f"could move it to {target}"
            )
            raise ConflictError("Booking was updated by another request; reload and try again")

        await db.refresh(booking)
        if target == BookingStatus.CANCELLED.value:
            await self._close_payments(db, booking, now)
            await db.flush()
            await db.refresh(booking)

        logger.info(
            f"Booking {booking.id} moved {previous} -> {target} by {role.value} {user.id}"
        )
        return booking

    async def _close_payments(self, db: AsyncSession, booking: Booking, now: datetime) -> None:
        """Refund settled payments and fail open ones when a booking is cancelled."""
        result = await db.execute(
            select(Payment).where(
                Payment.booking_id == booking.id,
                Payment.status.in_(("pending", "paid")),
            )
        )
        for payment in result.scalars().all():
            if payment.status == "paid":
                assert_payment_transition(payment.status, "refunded")
                payment.status = "refunded"
                payment.refunded_at = now
            else:
                assert_payment_transition(payment.status, "failed")
                payment.status = "failed"

        if can_transition_payment(booking.payment_status, "refunded"):
            booking.payment_status = "refunded"
            logger.info(f"Booking {booking.id} cancelled after payment; marked refunded")


booking_service = BookingService()

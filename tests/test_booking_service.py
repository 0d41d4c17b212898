"""Booking service tests against a real (SQLite) database."""

import asyncio
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import select

from rento.core.exceptions import (
    ConflictError,
    InvalidDateRange,
    InvalidTransition,
    NotFoundError,
    Unauthorized,
    ValidationError,
    VehicleNotBookable,
    VehicleUnavailable,
)
from rento.models.booking import Booking
from rento.models.vehicle import Vehicle
from rento.services.booking_service import booking_service


async def create(session_maker, renter, vehicle_id, start, end):
    async with session_maker() as session:
        try:
            booking = await booking_service.create_booking(session, renter, vehicle_id, start, end)
            await session.commit()
            return booking
        except Exception:
            await session.rollback()
            raise


async def test_create_booking_prices_and_starts_pending(session_maker, seeded):
    renter, _ = seeded["renters"]

    booking = await create(
        session_maker, renter, seeded["vehicle"].id, date(2024, 6, 1), date(2024, 6, 11)
    )

    assert booking.status == "pending"
    assert booking.payment_status == "pending"
    assert booking.owner_id == seeded["owner"].id
    assert booking.duration_days == 10
    assert booking.total_amount == Decimal("2700.00")


async def test_overlap_rejected_adjacent_accepted(session_maker, seeded):
    first, second = seeded["renters"]
    vehicle_id = seeded["vehicle"].id
    await create(session_maker, first, vehicle_id, date(2024, 6, 10), date(2024, 6, 15))

    with pytest.raises(VehicleUnavailable):
        await create(session_maker, second, vehicle_id, date(2024, 6, 14), date(2024, 6, 20))

    booking = await create(session_maker, second, vehicle_id, date(2024, 6, 16), date(2024, 6, 20))
    assert booking.start_date == date(2024, 6, 16)


async def test_rejected_booking_writes_nothing(session_maker, seeded):
    first, second = seeded["renters"]
    vehicle_id = seeded["vehicle"].id
    await create(session_maker, first, vehicle_id, date(2024, 6, 10), date(2024, 6, 15))

    with pytest.raises(VehicleUnavailable):
        await create(session_maker, second, vehicle_id, date(2024, 6, 12), date(2024, 6, 13))

    async with session_maker() as session:
        result = await session.execute(select(Booking).where(Booking.vehicle_id == vehicle_id))
        assert len(result.scalars().all()) == 1


async def test_concurrent_overlapping_requests_admit_one(session_maker, seeded):
    first, second = seeded["renters"]
    vehicle_id = seeded["vehicle"].id

    results = await asyncio.gather(
        create(session_maker, first, vehicle_id, date(2024, 7, 1), date(2024, 7, 5)),
        create(session_maker, second, vehicle_id, date(2024, 7, 3), date(2024, 7, 8)),
        return_exceptions=True,
    )

    created = [r for r in results if isinstance(r, Booking)]
    rejected = [r for r in results if isinstance(r, VehicleUnavailable)]
    assert len(created) == 1
    assert len(rejected) == 1

    async with session_maker() as session:
        result = await session.execute(select(Booking).where(Booking.vehicle_id == vehicle_id))
        assert len(result.scalars().all()) == 1


async def test_cancelled_booking_frees_dates(session_maker, seeded):
    first, second = seeded["renters"]
    vehicle_id = seeded["vehicle"].id
    booking = await create(session_maker, first, vehicle_id, date(2024, 6, 10), date(2024, 6, 15))

    async with session_maker() as session:
        stored = await session.get(Booking, booking.id)
        await booking_service.update_status(session, stored, first, "cancelled")
        await session.commit()

    replacement = await create(
        session_maker, second, vehicle_id, date(2024, 6, 12), date(2024, 6, 14)
    )
    assert replacement.status == "pending"


async def test_missing_dates_rejected_before_vehicle_lookup(session_maker, seeded):
    renter, _ = seeded["renters"]

    with pytest.raises(InvalidDateRange):
        await create(session_maker, renter, seeded["vehicle"].id, None, date(2024, 6, 1))


async def test_unknown_vehicle(session_maker, seeded):
    renter, _ = seeded["renters"]

    with pytest.raises(NotFoundError):
        await create(session_maker, renter, seeded["owner"].id, date(2024, 6, 1), date(2024, 6, 2))


async def test_switched_off_vehicle_is_not_bookable(session_maker, seeded):
    renter, _ = seeded["renters"]
    async with session_maker() as session:
        vehicle = await session.get(Vehicle, seeded["vehicle"].id)
        vehicle.availability = False
        await session.commit()

    with pytest.raises(VehicleNotBookable):
        await create(session_maker, renter, seeded["vehicle"].id, date(2024, 6, 1), date(2024, 6, 2))


async def test_owner_cannot_book_own_vehicle(session_maker, seeded):
    with pytest.raises(ValidationError):
        await create(
            session_maker, seeded["owner"], seeded["vehicle"].id, date(2024, 6, 1), date(2024, 6, 2)
        )


async def test_check_availability_reports_conflict_without_writing(session_maker, seeded):
    renter, _ = seeded["renters"]
    vehicle_id = seeded["vehicle"].id
    await create(session_maker, renter, vehicle_id, date(2024, 6, 10), date(2024, 6, 15))

    async with session_maker() as session:
        busy = await booking_service.check_availability(
            session, vehicle_id, date(2024, 6, 14), date(2024, 6, 20)
        )
        free = await booking_service.check_availability(
            session, vehicle_id, date(2024, 7, 1), date(2024, 8, 5)
        )

    assert not busy.available
    assert busy.quote is None
    assert free.available
    assert free.quote.total_amount == Decimal("8500.00")


async def test_status_changes_record_timestamps(session_maker, seeded):
    renter, _ = seeded["renters"]
    owner = seeded["owner"]
    booking = await create(
        session_maker, renter, seeded["vehicle"].id, date(2024, 6, 1), date(2024, 6, 3)
    )

    async with session_maker() as session:
        stored = await session.get(Booking, booking.id)
        await booking_service.update_status(session, stored, owner, "confirmed")
        assert stored.confirmed_at is not None

        await booking_service.update_status(session, stored, owner, "completed")
        assert stored.status == "completed"
        assert stored.completed_at is not None

        with pytest.raises(InvalidTransition):
            await booking_service.update_status(session, stored, owner, "cancelled")


async def test_stranger_cannot_change_status(session_maker, seeded):
    first, second = seeded["renters"]
    booking = await create(
        session_maker, first, seeded["vehicle"].id, date(2024, 6, 1), date(2024, 6, 3)
    )

    async with session_maker() as session:
        stored = await session.get(Booking, booking.id)
        with pytest.raises(Unauthorized):
            await booking_service.update_status(session, stored, second, "cancelled")
        assert stored.status == "pending"


async def test_stale_status_change_loses_to_committed_cancel(session_maker, seeded):
    renter, _ = seeded["renters"]
    owner = seeded["owner"]
    booking = await create(
        session_maker, renter, seeded["vehicle"].id, date(2024, 6, 1), date(2024, 6, 3)
    )

    async with session_maker() as renter_session, session_maker() as owner_session:
        renter_copy = await renter_session.get(Booking, booking.id)
        owner_copy = await owner_session.get(Booking, booking.id)
        assert renter_copy.status == owner_copy.status == "pending"

        await booking_service.update_status(renter_session, renter_copy, renter, "cancelled")
        await renter_session.commit()

        with pytest.raises(ConflictError):
            await booking_service.update_status(owner_session, owner_copy, owner, "confirmed")
        await owner_session.rollback()

    async with session_maker() as session:
        stored = await session.get(Booking, booking.id)
        assert stored.status == "cancelled"
        assert stored.confirmed_at is None
        assert stored.cancelled_by == "renter"


async def test_concurrent_status_changes_apply_one(session_maker, seeded):
    renter, _ = seeded["renters"]
    owner = seeded["owner"]
    booking = await create(
        session_maker, renter, seeded["vehicle"].id, date(2024, 6, 1), date(2024, 6, 3)
    )

    async def change(user, target):
        async with session_maker() as session:
            try:
                stored = await session.get(Booking, booking.id)
                await booking_service.update_status(session, stored, user, target)
                await session.commit()
                return target
            except Exception:
                await session.rollback()
                raise

    results = await asyncio.gather(
        change(renter, "cancelled"),
        change(owner, "confirmed"),
        return_exceptions=True,
    )

    applied = [r for r in results if isinstance(r, str)]
    assert len(applied) >= 1

    async with session_maker() as session:
        stored = await session.get(Booking, booking.id)
    if len(applied) == 1:
        assert stored.status == applied[0]
    else:
        # Both can land only in order: confirm, then the renter cancels it.
        assert stored.status == "cancelled"
        assert stored.confirmed_at is not None

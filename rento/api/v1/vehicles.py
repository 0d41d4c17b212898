"""Vehicle endpoints."""

import logging
from datetime import date
from decimal import Decimal
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from rento.api.deps import get_db, get_owned_vehicle
from rento.config import settings
from rento.core.exceptions import NotFoundError
from rento.core.permissions import require_owner
from rento.domain.availability import ACTIVE_BOOKING_STATUSES
from rento.domain.pricing import check_rate_tiers
from rento.models.booking import Booking
from rento.models.user import User
from rento.models.vehicle import Vehicle
from rento.schemas.vehicle import (
    BookedDateRange,
    VehicleAvailabilityUpdate,
    VehicleCreate,
    VehicleDetailResponse,
    VehicleResponse,
    VehicleUpdate,
)
from rento.services.vehicle_service import vehicle_service

router = APIRouter()
logger = logging.getLogger(__name__)

SORTABLE_COLUMNS = {
    "created_at": Vehicle.created_at,
    "price_per_day": Vehicle.price_per_day,
    "year": Vehicle.year,
    "name": Vehicle.name,
}


@router.post("/", response_model=VehicleResponse, status_code=status.HTTP_201_CREATED)
async def create_vehicle(
    vehicle_data: VehicleCreate,
    current_user: Annotated[User, Depends(require_owner)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Vehicle:
    """List a new vehicle (owners only)."""
    check_rate_tiers(
        vehicle_data.price_per_day,
        vehicle_data.price_per_week,
        vehicle_data.price_per_month,
    )

    vehicle = Vehicle(
        owner_id=current_user.id,
        currency=settings.default_currency,
        **vehicle_data.model_dump(),
    )
    db.add(vehicle)
    await db.flush()
    await db.refresh(vehicle)

    logger.info(f"Vehicle {vehicle.id} listed by owner {current_user.id}")
    return vehicle


@router.get("/", response_model=list[VehicleResponse])
async def search_vehicles(
    db: Annotated[AsyncSession, Depends(get_db)],
    category: str | None = Query(None),
    location: str | None = Query(None),
    min_price: Decimal | None = Query(None, ge=0),
    max_price: Decimal | None = Query(None, ge=0),
    search: str | None = Query(None, max_length=100),
    sort_by: str = Query("created_at", pattern="^(created_at|price_per_day|year|name)$"),
    sort_order: str = Query("desc", pattern="^(asc|desc|ASC|DESC)$"),
) -> list[Vehicle]:
    """Search bookable vehicles."""
    query = select(Vehicle).where(
        Vehicle.availability.is_(True),
        Vehicle.deleted_at.is_(None),
    )

    if category:
        query = query.where(Vehicle.category == category)
    if location:
        query = query.where(Vehicle.location.ilike(f"%{location}%"))
    if min_price is not None:
        query = query.where(Vehicle.price_per_day >= min_price)
    if max_price is not None:
        query = query.where(Vehicle.price_per_day <= max_price)
    if search:
        pattern = f"%{search}%"
        query = query.where(
            or_(
                Vehicle.name.ilike(pattern),
                Vehicle.brand.ilike(pattern),
                Vehicle.model.ilike(pattern),
                Vehicle.description.ilike(pattern),
            )
        )

    column = SORTABLE_COLUMNS[sort_by]
    query = query.order_by(column.asc() if sort_order.lower() == "asc" else column.desc())

    result = await db.execute(query)
    return list(result.scalars().all())


@router.get("/owner", response_model=list[VehicleResponse])
async def get_my_vehicles(
    current_user: Annotated[User, Depends(require_owner)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[Vehicle]:
    """Get all vehicles of the current owner, including unavailable ones."""
    result = await db.execute(
        select(Vehicle)
        .where(Vehicle.owner_id == current_user.id, Vehicle.deleted_at.is_(None))
        .order_by(Vehicle.created_at.desc())
    )
    return list(result.scalars().all())


@router.get("/{vehicle_id}", response_model=VehicleDetailResponse)
async def get_vehicle(
    vehicle_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Vehicle:
    """Get a vehicle by ID."""
    result = await db.execute(
        select(Vehicle)
        .where(Vehicle.id == vehicle_id, Vehicle.deleted_at.is_(None))
        .options(selectinload(Vehicle.owner))
    )
    vehicle = result.scalar_one_or_none()
    if not vehicle:
        raise NotFoundError("Vehicle", str(vehicle_id))
    return vehicle


@router.get("/{vehicle_id}/booked-dates", response_model=list[BookedDateRange])
async def get_booked_dates(
    vehicle_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    from_date: date | None = Query(None, alias="from"),
) -> list[Booking]:
    """Date ranges held by active bookings, for availability calendars."""
    result = await db.execute(
        select(Vehicle.id).where(Vehicle.id == vehicle_id, Vehicle.deleted_at.is_(None))
    )
    if result.scalar_one_or_none() is None:
        raise NotFoundError("Vehicle", str(vehicle_id))

    query = select(Booking).where(
        Booking.vehicle_id == vehicle_id,
        Booking.status.in_(ACTIVE_BOOKING_STATUSES),
    )
    if from_date:
        query = query.where(Booking.end_date >= from_date)

    bookings = await db.execute(query.order_by(Booking.start_date))
    return list(bookings.scalars().all())


@router.put("/{vehicle_id}", response_model=VehicleResponse)
async def update_vehicle(
    vehicle_data: VehicleUpdate,
    vehicle: Annotated[Vehicle, Depends(get_owned_vehicle)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Vehicle:
    """Update a vehicle's details (owner only)."""
    changes = vehicle_data.model_dump(exclude_unset=True)

    check_rate_tiers(
        changes.get("price_per_day", vehicle.price_per_day),
        changes.get("price_per_week", vehicle.price_per_week),
        changes.get("price_per_month", vehicle.price_per_month),
    )

    for field, value in changes.items():
        setattr(vehicle, field, value)

    await db.flush()
    await db.refresh(vehicle)
    return vehicle


@router.patch("/{vehicle_id}/availability", response_model=VehicleResponse)
async def update_availability(
    request: VehicleAvailabilityUpdate,
    vehicle: Annotated[Vehicle, Depends(get_owned_vehicle)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Vehicle:
    """Switch a vehicle on or off for new bookings (owner only)."""
    vehicle.availability = request.availability
    await db.flush()
    await db.refresh(vehicle)

    logger.info(f"Vehicle {vehicle.id} availability set to {request.availability}")
    return vehicle


@router.delete("/{vehicle_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_vehicle(
    vehicle: Annotated[Vehicle, Depends(get_owned_vehicle)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    """Remove a vehicle from the marketplace (owner only).

    Bookings are kept for history, so the vehicle is soft deleted. Vehicles
    with pending or confirmed bookings cannot be removed.
    """
    await vehicle_service.soft_delete(db, vehicle)

"""Booking endpoints."""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from rento.api.deps import get_accessible_booking, get_current_active_user, get_db
from rento.core.exceptions import NotFoundError
from rento.core.permissions import UserRole, require_renter
from rento.domain.booking_state import BookingStatus
from rento.models.booking import Booking
from rento.models.user import User
from rento.schemas.booking import (
    BookingCalculateRequest,
    BookingCalculateResponse,
    BookingCreate,
    BookingDetailResponse,
    BookingListResponse,
    BookingPriceQuote,
    BookingResponse,
    BookingStatusResponse,
    BookingStatusUpdate,
)
from rento.services.booking_service import booking_service

router = APIRouter()

STATUS_MESSAGES = {
    BookingStatus.CONFIRMED.value: "Booking confirmed",
    BookingStatus.CANCELLED.value: "Booking cancelled",
    BookingStatus.COMPLETED.value: "Booking completed",
}


def _detail(booking: Booking, viewer: User) -> BookingDetailResponse:
    item = BookingDetailResponse.model_validate(booking)
    # Renters only see the vehicle; owners also see who rented it
    if viewer.id != booking.owner_id:
        item.renter = None
    return item


@router.post("/calculate", response_model=BookingCalculateResponse)
async def calculate_booking_price(
    request: BookingCalculateRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BookingCalculateResponse:
    """Price a booking and check its dates without creating it."""
    result = await booking_service.check_availability(
        db, request.vehicle_id, request.start_date, request.end_date
    )
    if not result.available:
        return BookingCalculateResponse(available=False, unavailable_reason=result.reason)

    vehicle = result.vehicle
    quote = result.quote
    return BookingCalculateResponse(
        available=True,
        quote=BookingPriceQuote(
            duration_days=quote.duration_days,
            tier=quote.tier,
            periods=quote.periods,
            remainder_days=quote.remainder_days,
            price_per_day=vehicle.price_per_day,
            price_per_week=vehicle.price_per_week,
            price_per_month=vehicle.price_per_month,
            total_amount=quote.total_amount,
            currency=vehicle.currency,
        ),
    )


@router.post("/", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    current_user: Annotated[User, Depends(require_renter)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Create a pending booking (renters only)."""
    return await booking_service.create_booking(
        db,
        renter=current_user,
        vehicle_id=booking_data.vehicle_id,
        start=booking_data.start_date,
        end=booking_data.end_date,
    )


@router.get("/", response_model=BookingListResponse)
async def list_my_bookings(
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    status_filter: BookingStatus | None = Query(default=None, alias="status"),
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
) -> BookingListResponse:
    """List bookings the user made (renters) or received (owners)."""
    if current_user.role == UserRole.OWNER.value:
        query = select(Booking).where(Booking.owner_id == current_user.id)
    else:
        query = select(Booking).where(Booking.renter_id == current_user.id)

    if status_filter:
        query = query.where(Booking.status == status_filter.value)
    if start_date:
        query = query.where(Booking.start_date >= start_date)
    if end_date:
        query = query.where(Booking.end_date <= end_date)

    # Count total
    count_query = select(func.count()).select_from(query.subquery())
    count_result = await db.execute(count_query)
    total = count_result.scalar() or 0

    # Paginate
    offset = (page - 1) * page_size
    query = (
        query.options(selectinload(Booking.vehicle), selectinload(Booking.renter))
        .order_by(Booking.created_at.desc())
        .offset(offset)
        .limit(page_size)
    )

    result = await db.execute(query)
    bookings = result.scalars().all()

    return BookingListResponse(
        bookings=[_detail(booking, current_user) for booking in bookings],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/{booking_id}", response_model=BookingDetailResponse)
async def get_booking(
    booking: Annotated[Booking, Depends(get_accessible_booking)],
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BookingDetailResponse:
    """Get booking details."""
    result = await db.execute(
        select(Booking)
        .where(Booking.id == booking.id)
        .options(selectinload(Booking.vehicle), selectinload(Booking.renter))
        .execution_options(populate_existing=True)
    )
    return _detail(result.scalar_one(), current_user)


@router.patch("/{booking_id}/status", response_model=BookingStatusResponse)
async def update_booking_status(
    booking_id: UUID,
    request: BookingStatusUpdate,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BookingStatusResponse:
    """Confirm, complete or cancel a booking.

    Owners confirm, complete or cancel bookings on their vehicles. Renters
    may only cancel their own bookings.
    """
    result = await db.execute(select(Booking).where(Booking.id == booking_id))
    booking = result.scalar_one_or_none()
    if not booking:
        raise NotFoundError("Booking", str(booking_id))

    booking = await booking_service.update_status(db, booking, current_user, request.status)
    return BookingStatusResponse(
        id=booking.id,
        status=booking.status,
        payment_status=booking.payment_status,
        message=STATUS_MESSAGES.get(booking.status, "Booking status updated successfully"),
    )

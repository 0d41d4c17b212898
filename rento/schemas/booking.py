"""Booking-related Pydantic schemas."""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from rento.domain.booking_state import BookingStatus
from rento.domain.pricing import RateTier
from rento.schemas.user import UserSummary
from rento.schemas.vehicle import VehicleSummary


class BookingCreate(BaseModel):
    """Schema for creating a booking.

    Dates are validated by the booking service so that missing or reversed
    dates surface as InvalidDateRange.
    """

    vehicle_id: UUID
    start_date: date | None = None
    end_date: date | None = None


class BookingCalculateRequest(BookingCreate):
    """Schema for pricing a booking without creating it."""


class BookingPriceQuote(BaseModel):
    """Schema for a price breakdown."""

    duration_days: int
    tier: RateTier
    periods: int
    remainder_days: int
    price_per_day: Decimal
    price_per_week: Decimal | None
    price_per_month: Decimal | None
    total_amount: Decimal
    currency: str


class BookingCalculateResponse(BaseModel):
    """Schema for booking price calculation response."""

    available: bool
    quote: BookingPriceQuote | None = None
    unavailable_reason: str | None = None


class BookingResponse(BaseModel):
    """Schema for booking response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    vehicle_id: UUID
    renter_id: UUID
    owner_id: UUID

    # Dates
    start_date: date
    end_date: date
    duration_days: int

    # Pricing
    total_amount: Decimal
    currency: str

    # Status
    status: str
    payment_status: str
    cancelled_by: str | None

    # Timestamps
    confirmed_at: datetime | None
    cancelled_at: datetime | None
    completed_at: datetime | None
    created_at: datetime
    updated_at: datetime


class BookingDetailResponse(BookingResponse):
    """Booking with the vehicle and, for owners, the renter."""

    vehicle: VehicleSummary | None = None
    renter: UserSummary | None = None


class BookingListResponse(BaseModel):
    """Schema for paginated booking list."""

    bookings: list[BookingDetailResponse]
    total: int
    page: int
    page_size: int


class BookingStatusUpdate(BaseModel):
    status: BookingStatus


class BookingStatusResponse(BaseModel):
    id: UUID
    status: str
    payment_status: str
    message: str = Field(default="Booking status updated successfully")

"""Vehicle-related Pydantic schemas."""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class VehicleBase(BaseModel):
    """Base vehicle schema."""

    name: str = Field(..., min_length=2, max_length=100)
    description: str | None = Field(None, max_length=5000)
    category: str = Field(..., min_length=2, max_length=30)
    brand: str | None = Field(None, max_length=50)
    model: str | None = Field(None, max_length=50)
    year: int | None = Field(None, ge=1950, le=2100)
    location: str | None = Field(None, max_length=255)
    image_url: str | None = None
    features: list[str] = Field(default_factory=list)
    specifications: dict[str, str] = Field(default_factory=dict)

    # Pricing
    price_per_day: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    price_per_week: Decimal | None = Field(None, gt=0, max_digits=10, decimal_places=2)
    price_per_month: Decimal | None = Field(None, gt=0, max_digits=10, decimal_places=2)


class VehicleCreate(VehicleBase):
    """Schema for listing a vehicle."""

    availability: bool = True


class VehicleUpdate(BaseModel):
    """Schema for updating a vehicle. Omitted fields are left unchanged."""

    name: str | None = Field(None, min_length=2, max_length=100)
    description: str | None = Field(None, max_length=5000)
    category: str | None = Field(None, min_length=2, max_length=30)
    brand: str | None = Field(None, max_length=50)
    model: str | None = Field(None, max_length=50)
    year: int | None = Field(None, ge=1950, le=2100)
    location: str | None = Field(None, max_length=255)
    image_url: str | None = None
    features: list[str] | None = None
    specifications: dict[str, str] | None = None
    price_per_day: Decimal | None = Field(None, gt=0, max_digits=10, decimal_places=2)
    price_per_week: Decimal | None = Field(None, gt=0, max_digits=10, decimal_places=2)
    price_per_month: Decimal | None = Field(None, gt=0, max_digits=10, decimal_places=2)


class VehicleAvailabilityUpdate(BaseModel):
    availability: bool


class VehicleResponse(BaseModel):
    """Schema for vehicle response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    owner_id: UUID
    name: str
    description: str | None
    category: str
    brand: str | None
    model: str | None
    year: int | None
    location: str | None
    image_url: str | None
    features: list[str]
    specifications: dict[str, str]
    price_per_day: Decimal
    price_per_week: Decimal | None
    price_per_month: Decimal | None
    currency: str
    availability: bool
    created_at: datetime


class VehicleDetailResponse(VehicleResponse):
    """Vehicle with owner details."""

    owner_name: str | None = None


class VehicleSummary(BaseModel):
    """Vehicle fields embedded in booking listings."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    brand: str | None
    model: str | None
    category: str
    location: str | None
    image_url: str | None


class BookedDateRange(BaseModel):
    """An active booking's date range, without renter details."""

    model_config = ConfigDict(from_attributes=True)

    start_date: date
    end_date: date
    status: str

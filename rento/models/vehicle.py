"""Vehicle database model."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, Numeric, String, Text, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from rento.database import Base

if TYPE_CHECKING:
    from rento.models.booking import Booking
    from rento.models.user import User

JSONType = JSON().with_variant(JSONB(), "postgresql")


class Vehicle(Base):
    """Vehicle listed for rent by an owner."""

    __tablename__ = "vehicles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Basic Info
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    category: Mapped[str] = mapped_column(
        String(30), nullable=False, index=True
    )  # car, bike, scooter, suv, van, ...
    brand: Mapped[str | None] = mapped_column(String(50))
    model: Mapped[str | None] = mapped_column(String(50))
    year: Mapped[int | None] = mapped_column(Integer)
    location: Mapped[str | None] = mapped_column(String(255), index=True)
    image_url: Mapped[str | None] = mapped_column(Text)
    features: Mapped[list[str]] = mapped_column(JSONType, default=list)
    specifications: Mapped[dict[str, str]] = mapped_column(JSONType, default=dict)

    # Pricing
    price_per_day: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    price_per_week: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    price_per_month: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    currency: Mapped[str] = mapped_column(String(3), default="INR")

    # Status
    availability: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Bumped inside every booking-creation transaction to lock the vehicle row
    booking_revision: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    owner: Mapped["User"] = relationship("User", back_populates="vehicles")
    bookings: Mapped[list["Booking"]] = relationship("Booking", back_populates="vehicle")

    @property
    def owner_name(self) -> str | None:
        """Owner display name (requires the owner relationship to be loaded)."""
        return self.owner.name if "owner" in self.__dict__ and self.owner else None

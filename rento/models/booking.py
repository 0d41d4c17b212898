"""Booking database model."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Uuid,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import ExcludeConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rento.database import Base

if TYPE_CHECKING:
    from rento.models.payment import Payment
    from rento.models.user import User
    from rento.models.vehicle import Vehicle


class Booking(Base):
    """Booking model."""

    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("end_date >= start_date", name="check_booking_date_order"),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'cancelled', 'completed')",
            name="check_booking_status",
        ),
        CheckConstraint(
            "payment_status IN ('pending', 'paid', 'refunded')",
            name="check_booking_payment_status",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    vehicle_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("vehicles.id"), nullable=False, index=True
    )
    renter_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False, index=True
    )
    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False, index=True
    )

    # Dates (inclusive calendar days)
    start_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    end_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    duration_days: Mapped[int] = mapped_column(Integer, nullable=False)

    # Pricing
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="INR")

    # Status
    status: Mapped[str] = mapped_column(
        String(20), default="pending", index=True
    )  # pending, confirmed, cancelled, completed
    payment_status: Mapped[str] = mapped_column(
        String(20), default="pending"
    )  # pending, paid, refunded
    cancelled_by: Mapped[str | None] = mapped_column(String(10))  # owner, renter

    # Timestamps
    confirmed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    vehicle: Mapped["Vehicle"] = relationship("Vehicle", back_populates="bookings")
    renter: Mapped["User"] = relationship(
        "User", back_populates="bookings_as_renter", foreign_keys=[renter_id]
    )
    owner: Mapped["User"] = relationship("User", foreign_keys=[owner_id])
    payments: Mapped[list["Payment"]] = relationship("Payment", back_populates="booking")


# No two active bookings of a vehicle may share a day. PostgreSQL only; needs btree_gist.
Booking.__table__.append_constraint(
    ExcludeConstraint(
        (Booking.__table__.c.vehicle_id, "="),
        (
            func.daterange(
                Booking.__table__.c.start_date,
                Booking.__table__.c.end_date,
                text("'[]'"),
            ),
            "&&",
        ),
        name="excl_booking_vehicle_active_dates",
        using="gist",
        where=text("status IN ('pending', 'confirmed')"),
    ).ddl_if(dialect="postgresql")
)

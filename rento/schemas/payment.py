"""Payment-related Pydantic schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class PaymentCreate(BaseModel):
    """Schema for initiating a payment."""

    booking_id: UUID
    method: str = Field(..., pattern="^(upi|cash)$")
    # Optional client-side total; must match the booking when sent
    amount: Decimal | None = Field(None, gt=0)


class PaymentResponse(BaseModel):
    """Schema for payment response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    booking_id: UUID
    user_id: UUID
    amount: Decimal
    currency: str
    method: str
    status: str
    reference: str
    payment_link: str | None
    paid_at: datetime | None
    created_at: datetime


class PaymentStatusResponse(BaseModel):
    """Payment state of a booking."""

    booking_id: UUID
    booking_status: str
    payment_status: str
    payment: PaymentResponse | None = None
    message: str

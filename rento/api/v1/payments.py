"""Payment endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rento.api.deps import get_accessible_booking, get_db
from rento.core.exceptions import NotFoundError
from rento.core.permissions import require_owner, require_renter
from rento.models.booking import Booking
from rento.models.payment import Payment
from rento.models.user import User
from rento.schemas.payment import PaymentCreate, PaymentResponse, PaymentStatusResponse
from rento.services.payment_service import payment_service

router = APIRouter()

PAYMENT_MESSAGES = {
    "pending": "Payment is pending",
    "paid": "Payment received",
    "failed": "Payment failed",
    "refunded": "Payment refunded",
}


@router.post("/", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
async def initiate_payment(
    payment_data: PaymentCreate,
    current_user: Annotated[User, Depends(require_renter)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Payment:
    """Initiate a UPI or cash payment for a booking (renters only)."""
    result = await db.execute(select(Booking).where(Booking.id == payment_data.booking_id))
    booking = result.scalar_one_or_none()
    if not booking:
        raise NotFoundError("Booking", str(payment_data.booking_id))

    return await payment_service.initiate(
        db,
        booking=booking,
        payer=current_user,
        method=payment_data.method,
        amount=payment_data.amount,
    )


@router.get("/status/{booking_id}", response_model=PaymentStatusResponse)
async def get_payment_status(
    booking: Annotated[Booking, Depends(get_accessible_booking)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PaymentStatusResponse:
    """Get the payment state of a booking."""
    payment = await payment_service.latest_payment(db, booking)
    return PaymentStatusResponse(
        booking_id=booking.id,
        booking_status=booking.status,
        payment_status=booking.payment_status,
        payment=PaymentResponse.model_validate(payment) if payment else None,
        message=PAYMENT_MESSAGES.get(booking.payment_status, booking.payment_status),
    )


@router.post("/{payment_id}/confirm", response_model=PaymentResponse)
async def confirm_payment(
    payment_id: UUID,
    current_user: Annotated[User, Depends(require_owner)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Payment:
    """Confirm that money for a booking was received (vehicle owner only)."""
    result = await db.execute(select(Payment).where(Payment.id == payment_id))
    payment = result.scalar_one_or_none()
    if not payment:
        raise NotFoundError("Payment", str(payment_id))

    booking_result = await db.execute(select(Booking).where(Booking.id == payment.booking_id))
    booking = booking_result.scalar_one()

    return await payment_service.confirm(db, payment=payment, booking=booking, owner=current_user)

"""Payment initiation service.

Rento never captures money itself. A renter initiates a payment (UPI link or
cash at pickup) and the vehicle owner confirms receipt, which settles the
booking's payment status.
"""

import logging
from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from rento.config import settings
from rento.core.exceptions import (
    AuthorizationError,
    ConflictError,
    PaymentError,
    ValidationError,
)
from rento.domain.availability import ACTIVE_BOOKING_STATUSES
from rento.domain.payment_state import assert_payment_transition
from rento.models.booking import Booking
from rento.models.payment import Payment
from rento.models.user import User
from rento.utils.references import build_upi_link, generate_payment_reference

logger = logging.getLogger(__name__)

PAYMENT_IN_PROGRESS = "A payment is already in progress for this booking"


class PaymentService:
    """Service for initiating and settling booking payments."""

    async def latest_payment(self, db: AsyncSession, booking: Booking) -> Payment | None:
        result = await db.execute(
            select(Payment)
            .where(Payment.booking_id == booking.id)
            .order_by(Payment.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def initiate(
        self,
        db: AsyncSession,
        booking: Booking,
        payer: User,
        method: str,
        amount: Decimal | None = None,
    ) -> Payment:
        """Open a pending payment for a booking.

        Args:
            db: Database session
            booking: Booking being paid for
            payer: Authenticated user (must be the booking's renter)
            method: 'upi' or 'cash'
            amount: Amount the client expects to pay, if it sent one

        Returns:
            Payment: The pending payment record
        """
        if booking.renter_id != payer.id:
            raise AuthorizationError("You can only pay for your own bookings")

        if booking.status not in ACTIVE_BOOKING_STATUSES:
            raise ValidationError(f"Cannot pay for a {booking.status} booking")
        if booking.payment_status != "pending":
            raise ValidationError(f"Booking payment is already {booking.payment_status}")

        if amount is not None and Decimal(amount) != Decimal(booking.total_amount):
            raise PaymentError(
                f"Payment amount {amount} does not match booking total {booking.total_amount}"
            )

        existing = await db.execute(
            select(Payment).where(
                Payment.booking_id == booking.id,
                Payment.status == "pending",
            )
        )
        if existing.scalars().first():
            raise ConflictError(PAYMENT_IN_PROGRESS)

        currency = booking.currency or settings.default_currency
        reference = await generate_payment_reference(db)
        payment = Payment(
            booking_id=booking.id,
            user_id=payer.id,
            amount=booking.total_amount,
            currency=currency,
            method=method,
            status="pending",
            reference=reference,
        )
        if method == "upi":
            payment.payment_link = build_upi_link(
                payee_vpa=settings.upi_payee_vpa,
                payee_name=settings.upi_payee_name,
                amount=f"{Decimal(booking.total_amount):.2f}",
                currency=currency,
                reference=reference,
                note=f"Rento booking {booking.id}",
            )

        db.add(payment)
        try:
            await db.flush()
        except IntegrityError as e:
            # Another request opened a pending payment after our check.
            raise ConflictError(PAYMENT_IN_PROGRESS) from e

        await db.refresh(payment)
        logger.info(
            f"Payment {payment.reference} initiated for booking {booking.id} "
            f"via {method} ({payment.amount} {payment.currency})"
        )
        return payment

    async def confirm(
        self,
        db: AsyncSession,
        payment: Payment,
        booking: Booking,
        owner: User,
    ) -> Payment:
        """Record that the vehicle owner has received the money.

        The booking is settled with a conditional update, so a cancellation
        that lands first makes the confirmation fail instead of marking a
        cancelled booking paid.
        """
        if booking.owner_id != owner.id:
            raise AuthorizationError("Only the vehicle owner can confirm payment")
        if booking.status not in ACTIVE_BOOKING_STATUSES:
            raise ValidationError(f"Cannot settle payment for a {booking.status} booking")

        assert_payment_transition(payment.status, "paid")
        assert_payment_transition(booking.payment_status, "paid")

        result = await db.execute(
            update(Booking)
            .where(
                Booking.id == booking.id,
                Booking.status.in_(ACTIVE_BOOKING_STATUSES),
                Booking.payment_status == booking.payment_status,
            )
            .values(payment_status="paid")
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise ConflictError("Booking was updated by another request; reload and try again")

        payment.status = "paid"
        payment.paid_at = datetime.now(UTC)

        await db.flush()
        await db.refresh(payment)
        await db.refresh(booking)
        logger.info(f"Payment {payment.reference} confirmed for booking {booking.id}")
        return payment


payment_service = PaymentService()

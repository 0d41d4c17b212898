"""Booking state machine.

Transitions are gated by the role the caller acts in for the booking.
Cancelled and completed are terminal.
"""

from enum import Enum
from uuid import UUID

from rento.core.exceptions import InvalidTransition, Unauthorized


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class ActorRole(str, Enum):
    """Capacity in which a user acts on a specific booking."""

    OWNER = "owner"
    RENTER = "renter"


BOOKING_TRANSITIONS: dict[ActorRole, dict[BookingStatus, frozenset[BookingStatus]]] = {
    ActorRole.OWNER: {
        BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
        BookingStatus.CONFIRMED: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
    },
    ActorRole.RENTER: {
        BookingStatus.PENDING: frozenset({BookingStatus.CANCELLED}),
        BookingStatus.CONFIRMED: frozenset({BookingStatus.CANCELLED}),
    },
}

TERMINAL_STATUSES = frozenset({BookingStatus.CANCELLED, BookingStatus.COMPLETED})


def allowed_transitions(role: ActorRole, current: str) -> frozenset[BookingStatus]:
    try:
        status = BookingStatus(current)
    except ValueError:
        return frozenset()
    return BOOKING_TRANSITIONS[ActorRole(role)].get(status, frozenset())


def assert_booking_transition(role: ActorRole, current: str, target: str) -> None:
    """Raise InvalidTransition unless `role` may move a booking from current to target."""
    current = getattr(current, "value", current)
    target = getattr(target, "value", target)
    allowed = allowed_transitions(role, current)
    if target not in {status.value for status in allowed}:
        raise InvalidTransition(role=ActorRole(role).value, current=current, target=target)


def resolve_actor_role(
    user_id: UUID,
    user_role: str,
    renter_id: UUID,
    owner_id: UUID,
) -> ActorRole:
    """Work out which side of the booking the user is on.

    Args:
        user_id: Authenticated user
        user_role: Account role of the authenticated user
        renter_id: Renter of the booking
        owner_id: Owner of the booked vehicle

    Returns:
        ActorRole: OWNER or RENTER

    Raises:
        Unauthorized: If the user is neither the vehicle's owner nor the booking's renter
    """
    if user_role == ActorRole.OWNER.value and user_id == owner_id:
        return ActorRole.OWNER
    if user_role == ActorRole.RENTER.value and user_id == renter_id:
        return ActorRole.RENTER
    raise Unauthorized()

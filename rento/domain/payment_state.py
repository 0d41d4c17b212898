"""Payment state machine."""

from rento.core.exceptions import ValidationError

PAYMENT_TRANSITIONS = {
    "pending": {"paid", "failed"},
    "paid": {"refunded"},
    "failed": set(),
    "refunded": set(),
}


def can_transition_payment(current: str, target: str) -> bool:
    return target in PAYMENT_TRANSITIONS.get(current, set())


def assert_payment_transition(current: str, target: str) -> None:
    if not can_transition_payment(current, target):
        raise ValidationError(
            f"Invalid payment transition: {current} → {target}"
        )

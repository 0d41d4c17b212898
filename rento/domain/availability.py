"""Vehicle availability rules.

Booking ranges are whole calendar days with inclusive endpoints, so a booking
ending on the 15th blocks the 15th and a new booking may start on the 16th.
"""

from collections.abc import Iterable
from datetime import date
from typing import Protocol, TypeVar

from rento.core.exceptions import InvalidDateRange

ACTIVE_BOOKING_STATUSES = frozenset({"pending", "confirmed"})


class DatedBooking(Protocol):
    start_date: date
    end_date: date
    status: str


B = TypeVar("B", bound=DatedBooking)


def validate_date_range(start: date | None, end: date | None) -> None:
    """Raise InvalidDateRange if either date is missing or end precedes start."""
    if start is None or end is None:
        raise InvalidDateRange("Start date and end date are required")
    if end < start:
        raise InvalidDateRange()


def ranges_overlap(start_a: date, end_a: date, start_b: date, end_b: date) -> bool:
    """Inclusive interval intersection."""
    return start_a <= end_b and end_a >= start_b


def find_conflicts(start: date, end: date, bookings: Iterable[B]) -> list[B]:
    """Active bookings whose dates intersect the candidate range."""
    return [
        booking
        for booking in bookings
        if booking.status in ACTIVE_BOOKING_STATUSES
        and ranges_overlap(booking.start_date, booking.end_date, start, end)
    ]


def is_available(start: date, end: date, bookings: Iterable[DatedBooking]) -> bool:
    return not find_conflicts(start, end, bookings)

"""Database models."""

from rento.models.booking import Booking
from rento.models.payment import Payment
from rento.models.user import RenterDocument, User
from rento.models.vehicle import Vehicle

__all__ = [
    # User
    "User",
    "RenterDocument",
    # Vehicle
    "Vehicle",
    # Booking
    "Booking",
    # Payment
    "Payment",
]

"""Pydantic schemas for API validation."""

from rento.schemas.booking import (
    BookingCalculateRequest,
    BookingCalculateResponse,
    BookingCreate,
    BookingDetailResponse,
    BookingListResponse,
    BookingResponse,
    BookingStatusResponse,
    BookingStatusUpdate,
)
from rento.schemas.payment import PaymentCreate, PaymentResponse, PaymentStatusResponse
from rento.schemas.user import (
    RenterDocumentCreate,
    RenterDocumentResponse,
    TokenResponse,
    UserCreate,
    UserLogin,
    UserResponse,
)
from rento.schemas.vehicle import (
    VehicleCreate,
    VehicleDetailResponse,
    VehicleResponse,
    VehicleUpdate,
)

__all__ = [
    # User
    "UserCreate",
    "UserLogin",
    "UserResponse",
    "TokenResponse",
    "RenterDocumentCreate",
    "RenterDocumentResponse",
    # Vehicle
    "VehicleCreate",
    "VehicleUpdate",
    "VehicleResponse",
    "VehicleDetailResponse",
    # Booking
    "BookingCreate",
    "BookingCalculateRequest",
    "BookingCalculateResponse",
    "BookingResponse",
    "BookingDetailResponse",
    "BookingListResponse",
    "BookingStatusUpdate",
    "BookingStatusResponse",
    # Payment
    "PaymentCreate",
    "PaymentResponse",
    "PaymentStatusResponse",
]

"""Core utilities and security modules."""

from rento.core.exceptions import (
    AppException,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    InvalidDateRange,
    InvalidTransition,
    NotFoundError,
    PaymentError,
    Unauthorized,
    ValidationError,
    VehicleNotBookable,
    VehicleUnavailable,
)
from rento.core.security import (
    TokenClaims,
    decode_token,
    hash_password,
    issue_tokens,
    verify_password,
)

__all__ = [
    "AppException",
    "AuthenticationError",
    "AuthorizationError",
    "ConflictError",
    "InvalidDateRange",
    "InvalidTransition",
    "NotFoundError",
    "PaymentError",
    "Unauthorized",
    "ValidationError",
    "VehicleNotBookable",
    "VehicleUnavailable",
    "TokenClaims",
    "decode_token",
    "hash_password",
    "issue_tokens",
    "verify_password",
]

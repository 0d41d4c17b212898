"""Main API router that includes all endpoint routers."""

from fastapi import APIRouter

from rento.api.v1 import auth, bookings, payments, renters, vehicles

api_router = APIRouter()

# Authentication
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])

# Vehicles
api_router.include_router(vehicles.router, prefix="/vehicles", tags=["Vehicles"])

# Bookings
api_router.include_router(bookings.router, prefix="/bookings", tags=["Bookings"])

# Payments
api_router.include_router(payments.router, prefix="/payments", tags=["Payments"])

# Renters
api_router.include_router(renters.router, prefix="/renters", tags=["Renters"])

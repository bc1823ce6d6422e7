"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from backend.app.api.v1.endpoints import (
    auth, bookings, tours,
    companies, drivers, vehicles, leads,
    users
)

router = APIRouter()

# Authentication
router.include_router(auth.router)

# Tours and bookings
router.include_router(tours.router)
router.include_router(bookings.router)

# Reference data
router.include_router(companies.router)
router.include_router(drivers.router)
router.include_router(vehicles.router)
router.include_router(leads.router)

# Admin user management
router.include_router(users.router)

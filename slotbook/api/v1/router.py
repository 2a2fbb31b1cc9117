"""
API v1 router setup
Organized into: public booking pages and auth, dashboard (JWT) routes
"""
from fastapi import APIRouter

from slotbook.api.v1.dashboard import availability, bookings, event_types, google_integration, users
from slotbook.api.v1.public import auth, booking_pages

api_v1_router = APIRouter()

# ============================================================================
# PUBLIC ROUTES (No authentication required)
# ============================================================================
api_v1_router.include_router(
    auth.router,
    # No prefix needed - auth.router already has "/auth" prefix
    tags=["Authentication"]
)

api_v1_router.include_router(
    booking_pages.router,
    prefix="/public",
    tags=["Public"]
)

# ============================================================================
# DASHBOARD ROUTES (JWT authentication required)
# ============================================================================
api_v1_router.include_router(
    users.router,
    prefix="/users",
    tags=["Dashboard"]
)

api_v1_router.include_router(
    event_types.router,
    prefix="/event-types",
    tags=["Dashboard"]
)

api_v1_router.include_router(
    availability.router,
    prefix="/availability",
    tags=["Dashboard"]
)

api_v1_router.include_router(
    bookings.router,
    prefix="/bookings",
    tags=["Dashboard"]
)

api_v1_router.include_router(
    google_integration.router,
    prefix="/integrations/google",
    tags=["Dashboard"]
)


# ============================================================================
# ROOT ENDPOINT - API Info
# ============================================================================
@api_v1_router.get("/", tags=["Info"])
async def api_info():
    """API information and route groups by authentication type."""
    return {
        "version": "1.0",
        "authentication": {
            "public": "No authentication required (booking pages, register, login)",
            "dashboard": "JWT Bearer token required (user login)",
        }
    }

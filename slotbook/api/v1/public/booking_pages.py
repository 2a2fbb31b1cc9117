# ============================================================================
# FILE: slotbook/api/v1/public/booking_pages.py
# Public booking pages - no authentication, thin HTTP layer
# ============================================================================
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from slotbook.api.dependencies import get_calendar_gateway, get_clock
from slotbook.config.database import get_db
from slotbook.schemas.availability import DayAvailabilityResponse
from slotbook.schemas.booking import BookingConfirmation, BookingCreate
from slotbook.schemas.user import PublicEventTypeDetails, PublicProfileResponse
from slotbook.services.availability.resolver_service import AvailabilityResolver
from slotbook.services.booking.booking_service import BookingService
from slotbook.services.calendar.gateway import CalendarGateway
from slotbook.services.event_type.lookup import find_bookable_event_type
from slotbook.services.user.user_service import UserService
from slotbook.utils.clock import Clock

router = APIRouter(tags=["Public"])


@router.get("/{username}", response_model=PublicProfileResponse)
async def get_public_profile(username: str, db: Session = Depends(get_db)):
    """Public profile with the user's active event types"""
    return UserService.public_profile(db, username)


@router.get("/{username}/{slug}", response_model=PublicEventTypeDetails)
async def get_public_event_type(username: str, slug: str, db: Session = Depends(get_db)):
    """Event type details with the owner's weekly availability"""
    user, event_type = find_bookable_event_type(db, username, slug)
    return UserService.public_event_type(db, user, event_type)


@router.get("/{username}/{slug}/availability", response_model=DayAvailabilityResponse)
async def get_day_availability(
        username: str,
        slug: str,
        date_str: str = Query(..., alias="date", description="YYYY-MM-DD"),
        db: Session = Depends(get_db),
        gateway: CalendarGateway = Depends(get_calendar_gateway),
        clock: Clock = Depends(get_clock)
):
    """Bookable slots for one day"""
    try:
        requested_date = date.fromisoformat(date_str)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid date format. Use YYYY-MM-DD"
        )

    resolver = AvailabilityResolver(db, gateway, clock=clock)
    return await resolver.resolve(username, slug, requested_date)


@router.post("/{username}/{slug}/book", response_model=BookingConfirmation, status_code=status.HTTP_201_CREATED)
async def create_booking(
        username: str,
        slug: str,
        request: BookingCreate,
        db: Session = Depends(get_db),
        gateway: CalendarGateway = Depends(get_calendar_gateway),
        clock: Clock = Depends(get_clock)
):
    """
    Book a slot. Returns 409 when the slot was taken in the meantime,
    404 when the page does not exist.
    """
    service = BookingService(db, gateway, clock=clock)
    return await service.admit(username, slug, request)

# ============================================================================
# FILE: slotbook/api/v1/dashboard/bookings.py
# Owner-side booking list and cancellation
# ============================================================================
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from slotbook.api.dependencies import get_clock, get_current_user
from slotbook.config.database import get_db
from slotbook.models.user import User
from slotbook.schemas.booking import BookingCancel, BookingFilter, BookingResponse
from slotbook.services.booking.booking_service import BookingService
from slotbook.utils.clock import Clock

router = APIRouter(tags=["Bookings"])


@router.get("", response_model=List[BookingResponse])
async def list_bookings(
        filter: BookingFilter = Query(BookingFilter.ALL),
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
        clock: Clock = Depends(get_clock)
):
    return BookingService.list_bookings(db, current_user.id, filter, now=clock())


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
        booking_id: UUID,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    return BookingService.get_booking(db, current_user.id, booking_id)


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(
        booking_id: UUID,
        request: Optional[BookingCancel] = None,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
        clock: Clock = Depends(get_clock)
):
    reason = request.reason if request else None
    return BookingService.cancel(db, booking_id, current_user.id, reason, now=clock())

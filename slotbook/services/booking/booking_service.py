# ============================================================================
# slotbook/services/booking/booking_service.py
# ============================================================================
"""Booking admission for public pages and booking management for owners"""
import asyncio
import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from slotbook.config.settings import Settings, get_settings
from slotbook.core.exceptions import NotFoundError, SlotUnavailableError, ValidationError
from slotbook.models import Booking, BookingStatus, EventType, User
from slotbook.schemas.booking import BookingCreate, BookingFilter
from slotbook.services.availability.resolver_service import (
    active_bookings_between,
    booking_window,
    day_bounds,
    rules_for_date,
)
from slotbook.services.availability.slot_generator import conflicts_with_buffer
from slotbook.services.booking.admission_lock import admission_lock
from slotbook.services.calendar.gateway import CalendarGateway, fetch_busy_or_none
from slotbook.services.event_type.lookup import find_bookable_event_type
from slotbook.utils.clock import Clock, to_naive_utc, utcnow

logger = logging.getLogger(__name__)

CONFIRMATION_MESSAGE = "Booking confirmed! You will receive a confirmation email shortly."


class BookingService:
    """
    Admits bookings against the same rules the availability resolver uses.

    Admission order:
      1. resolve the public user and active event type
      2. check the slot against weekly rules, notice and horizon
      3. check the external calendar (buffered, skipped when unavailable)
      4. under the owner's admission lock, check local bookings and insert
      5. mirror the booking to the external calendar, best effort

    Step 4's check and insert share one transaction; the local booking is
    the record of truth and is never rolled back because of step 5.
    """

    def __init__(
            self,
            db: Session,
            gateway: CalendarGateway,
            settings: Optional[Settings] = None,
            clock: Clock = utcnow
    ):
        self.db = db
        self.gateway = gateway
        self.settings = settings or get_settings()
        self.clock = clock

    # ========================================================================
    # Admission
    # ========================================================================

    async def admit(self, username: str, slug: str, request: BookingCreate) -> Dict:
        """
        Book a slot on a public page.

        Raises NotFoundError for an unknown user or inactive event type and
        SlotUnavailableError for any conflict, without saying which check failed.
        """
        user, event_type = find_bookable_event_type(self.db, username, slug)

        start = to_naive_utc(request.start_time)
        end = start + timedelta(minutes=event_type.duration_minutes)

        if not self._matches_schedule(user.id, event_type, start, end):
            logger.info(f"Rejected booking for {username}/{slug} at {start}: outside bookable schedule")
            raise SlotUnavailableError()

        if await self._conflicts_with_calendar(user.id, event_type, start, end):
            logger.info(f"Rejected booking for {username}/{slug} at {start}: external calendar busy")
            raise SlotUnavailableError()

        booking = self._insert_booking(user, event_type, request, start, end)
        logger.info(f"Booking {booking.id} confirmed for {username}/{slug} at {start}")

        external_event_id = await self._mirror(user, event_type, booking)

        return {
            "booking_id": str(booking.id),
            "guest_name": booking.guest_name,
            "guest_email": booking.guest_email,
            "start_time": booking.start_time.isoformat(),
            "end_time": booking.end_time.isoformat(),
            "event_type_name": event_type.name,
            "duration_minutes": event_type.duration_minutes,
            "location": event_type.location,
            "location_details": event_type.location_details,
            "status": booking.status,
            "external_event_id": external_event_id,
            "message": CONFIRMATION_MESSAGE,
        }

    def _matches_schedule(self, user_id: UUID, event_type: EventType, start: datetime, end: datetime) -> bool:
        """True when [start, end) is a slot the resolver could have offered, ignoring busy time"""
        now = self.clock()
        if start < now:
            return False

        min_date, max_date = booking_window(event_type, now.date())
        if not min_date <= start.date() <= max_date:
            return False

        step = timedelta(minutes=self.settings.SLOT_STEP_MINUTES)
        for rule in rules_for_date(self.db, user_id, start.date()):
            window_start = datetime.combine(start.date(), rule.start_time)
            window_end = datetime.combine(start.date(), rule.end_time)
            if window_start <= start and end <= window_end and (start - window_start) % step == timedelta(0):
                return True

        return False

    async def _conflicts_with_calendar(self, user_id: UUID, event_type: EventType,
                                       start: datetime, end: datetime) -> bool:
        day_start, day_end = day_bounds(start.date())
        busy = await fetch_busy_or_none(
            self.gateway,
            user_id,
            day_start,
            day_end,
            timeout=self.settings.CALENDAR_GATEWAY_TIMEOUT_SECONDS
        )
        if busy is None:
            return False

        # Same buffered comparison as slot generation
        return any(conflicts_with_buffer(start, end, interval, event_type.buffer_minutes) for interval in busy)

    def _insert_booking(self, user: User, event_type: EventType, request: BookingCreate,
                        start: datetime, end: datetime) -> Booking:
        try:
            with admission_lock(self.db, user.id):
                if active_bookings_between(self.db, user.id, start, end):
                    raise SlotUnavailableError()

                booking = Booking(
                    event_type_id=event_type.id,
                    guest_name=request.guest_name.strip(),
                    guest_email=str(request.guest_email).lower(),
                    guest_phone=request.guest_phone,
                    notes=request.notes,
                    start_time=start,
                    end_time=end,
                    status=BookingStatus.CONFIRMED
                )
                self.db.add(booking)
                self.db.commit()
        except IntegrityError as e:
            # Exclusion constraint caught an overlap the lock did not
            self.db.rollback()
            logger.warning(f"Booking insert for event type {event_type.id} at {start} hit a constraint: {e.orig}")
            raise SlotUnavailableError()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(booking)
        return booking

    async def _mirror(self, user: User, event_type: EventType, booking: Booking) -> Optional[str]:
        """Copy the booking to the external calendar; any failure is logged and ignored"""
        timeout = self.settings.CALENDAR_GATEWAY_TIMEOUT_SECONDS

        try:
            connected = await asyncio.wait_for(self.gateway.is_connected(user.id), timeout=timeout)
            if not connected:
                return None

            external_event_id = await asyncio.wait_for(
                self.gateway.create_event(
                    user_id=user.id,
                    summary=f"{event_type.name} - {booking.guest_name}",
                    description=self._event_description(event_type, booking),
                    location=self._event_location(event_type),
                    start=booking.start_time,
                    end=booking.end_time,
                    attendee_email=booking.guest_email,
                    attendee_name=booking.guest_name
                ),
                timeout=timeout
            )
        except asyncio.TimeoutError:
            logger.warning(f"Calendar mirror timed out for booking {booking.id}; booking kept without event")
            return None
        except Exception as e:
            logger.warning(f"Calendar mirror failed for booking {booking.id}: {e}; booking kept without event")
            return None

        try:
            booking.external_event_id = external_event_id
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Could not store external event id for booking {booking.id}: {e}")
            return None

        return external_event_id

    @staticmethod
    def _event_description(event_type: EventType, booking: Booking) -> str:
        return (
            f"Meeting with {booking.guest_name} ({booking.guest_email})\n\n"
            f"{event_type.description or ''}\n\n"
            f"Notes: {booking.notes or 'None'}"
        )

    @staticmethod
    def _event_location(event_type: EventType) -> str:
        if event_type.location_details:
            return event_type.location_details
        if event_type.location == "Online":
            return "Online Meeting"
        return event_type.location

    # ========================================================================
    # Owner side
    # ========================================================================

    @staticmethod
    def list_bookings(
            db: Session,
            user_id: UUID,
            booking_filter: BookingFilter = BookingFilter.ALL,
            now: Optional[datetime] = None
    ) -> List[Dict]:
        """Owner's bookings across all event types, earliest first"""
        now = now or utcnow()

        query = db.query(Booking).join(EventType, Booking.event_type_id == EventType.id).filter(
            EventType.user_id == user_id
        )

        if booking_filter == BookingFilter.UPCOMING:
            query = query.filter(Booking.start_time >= now, Booking.status != BookingStatus.CANCELLED)
        elif booking_filter == BookingFilter.PAST:
            query = query.filter(Booking.start_time < now, Booking.status != BookingStatus.CANCELLED)
        elif booking_filter == BookingFilter.CANCELLED:
            query = query.filter(Booking.status == BookingStatus.CANCELLED)
        elif booking_filter != BookingFilter.ALL:
            raise ValidationError(f"Unknown booking filter: {booking_filter}")

        bookings = query.order_by(Booking.start_time).all()
        return [BookingService._serialize_booking(booking) for booking in bookings]

    @staticmethod
    def get_booking(db: Session, user_id: UUID, booking_id: UUID) -> Dict:
        booking = BookingService._owned_booking(db, user_id, booking_id)
        return BookingService._serialize_booking(booking)

    @staticmethod
    def cancel(
            db: Session,
            booking_id: UUID,
            requester_user_id: UUID,
            reason: Optional[str] = None,
            now: Optional[datetime] = None
    ) -> Dict:
        """
        Cancel a booking owned by the requester.

        A booking owned by someone else reads as NotFoundError. Cancelling an
        already-cancelled booking changes nothing and returns it as is.
        """
        booking = BookingService._owned_booking(db, requester_user_id, booking_id)

        if booking.is_cancelled:
            logger.info(f"Booking {booking_id} already cancelled; nothing to do")
            return BookingService._serialize_booking(booking)

        try:
            booking.status = BookingStatus.CANCELLED
            booking.cancellation_reason = reason
            booking.cancelled_at = now or utcnow()
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(booking)
        logger.info(f"Booking {booking_id} cancelled by user {requester_user_id}")
        return BookingService._serialize_booking(booking)

    @staticmethod
    def _owned_booking(db: Session, user_id: UUID, booking_id: UUID) -> Booking:
        booking = db.query(Booking).join(EventType, Booking.event_type_id == EventType.id).filter(
            Booking.id == booking_id,
            EventType.user_id == user_id
        ).first()

        if not booking:
            raise NotFoundError("Booking not found")
        return booking

    @staticmethod
    def _serialize_booking(booking: Booking) -> Dict:
        return {
            "id": str(booking.id),
            "event_type_id": str(booking.event_type_id),
            "event_type_name": booking.event_type.name if booking.event_type else "",
            "guest_name": booking.guest_name,
            "guest_email": booking.guest_email,
            "guest_phone": booking.guest_phone,
            "notes": booking.notes,
            "start_time": booking.start_time.isoformat(),
            "end_time": booking.end_time.isoformat(),
            "status": booking.status,
            "cancellation_reason": booking.cancellation_reason,
            "cancelled_at": booking.cancelled_at.isoformat() if booking.cancelled_at else None,
            "external_event_id": booking.external_event_id,
            "created_at": booking.created_at.isoformat() if booking.created_at else None,
        }

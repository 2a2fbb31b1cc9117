# ===== slotbook/services/availability/resolver_service.py =====
import logging
import math
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from slotbook.config.settings import Settings, get_settings
from slotbook.models import AvailabilityRule, Booking, BookingStatus, EventType
from slotbook.services.availability.slot_generator import Slot, generate_slots, overlaps
from slotbook.services.availability.weekdays import day_key_for_date, storage_day_for_key
from slotbook.services.calendar.gateway import CalendarGateway, fetch_busy_or_none
from slotbook.services.event_type.lookup import event_type_info, find_bookable_event_type
from slotbook.utils.clock import Clock, utcnow

logger = logging.getLogger(__name__)


def day_bounds(value: date) -> Tuple[datetime, datetime]:
    """[00:00, next day 00:00) for a calendar date"""
    start = datetime.combine(value, time.min)
    return start, start + timedelta(days=1)


def booking_window(event_type: EventType, today: date) -> Tuple[date, date]:
    """First and last bookable dates given notice hours and the booking horizon"""
    min_date = today + timedelta(days=math.ceil(event_type.min_notice_hours / 24))
    max_date = today + timedelta(days=event_type.max_days_in_advance)
    return min_date, max_date


def rules_for_date(db: Session, user_id: UUID, value: date) -> List[AvailabilityRule]:
    """The user's windows for the weekday of `value`, earliest first"""
    storage_day = storage_day_for_key(day_key_for_date(value))
    return db.query(AvailabilityRule).filter(
        AvailabilityRule.user_id == user_id,
        AvailabilityRule.day_of_week == storage_day
    ).order_by(AvailabilityRule.start_time).all()


def active_bookings_between(db: Session, user_id: UUID, start: datetime, end: datetime) -> List[Booking]:
    """Non-cancelled bookings on any of the user's event types overlapping [start, end)"""
    return db.query(Booking).join(EventType, Booking.event_type_id == EventType.id).filter(
        EventType.user_id == user_id,
        Booking.status != BookingStatus.CANCELLED,
        Booking.start_time < end,
        Booking.end_time > start
    ).all()


class AvailabilityResolver:
    """Computes the bookable slots of one event type on one date"""

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

    async def resolve(self, username: str, slug: str, requested_date: date) -> Dict:
        """
        Available slots for username/slug on requested_date.

        Raises NotFoundError when the user or active event type is missing.
        Dates outside the notice/horizon window, and days without rules, give
        an empty slot list rather than an error.
        """
        user, event_type = find_bookable_event_type(self.db, username, slug)

        response = {
            "date": requested_date.isoformat(),
            "event_type": event_type_info(event_type),
            "available_slots": [],
        }

        slots = await self.compute_slots(user.id, event_type, requested_date)
        response["available_slots"] = [
            {"start": start.isoformat(), "end": end.isoformat()}
            for start, end in slots
        ]
        return response

    async def compute_slots(self, user_id: UUID, event_type: EventType, requested_date: date) -> List[Slot]:
        now = self.clock()

        min_date, max_date = booking_window(event_type, now.date())
        if requested_date < min_date or requested_date > max_date:
            return []

        rules = rules_for_date(self.db, user_id, requested_date)
        if not rules:
            return []

        day_start, day_end = day_bounds(requested_date)

        # One gateway call per day; an absent or degraded calendar means no external busy time
        busy = await fetch_busy_or_none(
            self.gateway,
            user_id,
            day_start,
            day_end,
            timeout=self.settings.CALENDAR_GATEWAY_TIMEOUT_SECONDS
        ) or []

        booked = active_bookings_between(self.db, user_id, day_start, day_end)

        slots: List[Slot] = []
        for rule in rules:
            slots.extend(generate_slots(
                window_start=datetime.combine(requested_date, rule.start_time),
                window_end=datetime.combine(requested_date, rule.end_time),
                duration_minutes=event_type.duration_minutes,
                buffer_minutes=event_type.buffer_minutes,
                busy_intervals=busy,
                step_minutes=self.settings.SLOT_STEP_MINUTES,
            ))

        # Local bookings use the same strict overlap as booking admission
        slots = [
            (start, end) for start, end in slots
            if start >= now and not any(
                overlaps(start, end, booking.start_time, booking.end_time) for booking in booked
            )
        ]
        slots.sort(key=lambda slot: slot[0])

        logger.debug(
            f"Resolved {len(slots)} slot(s) for event type {event_type.id} on {requested_date} "
            f"({len(rules)} window(s), {len(busy)} busy, {len(booked)} booked)"
        )
        return slots

"""Shared test doubles and fixed dates."""

import asyncio
from datetime import date, datetime, time
from typing import List, Optional

from slotbook.services.calendar.gateway import NOT_CONNECTED, BusyInterval, CalendarGateway

# Monday morning; the following Monday is inside the default notice/horizon window
NOW = datetime(2026, 3, 2, 8, 0)
NEXT_MONDAY = date(2026, 3, 9)
NEXT_SUNDAY = date(2026, 3, 8)


def fixed_clock():
    return NOW


def at(day: date, hour: int, minute: int = 0) -> datetime:
    return datetime.combine(day, time(hour, minute))


class FakeCalendarGateway(CalendarGateway):
    """In-memory calendar with switches for the failure modes the core must tolerate."""

    def __init__(
        self,
        busy: Optional[List[BusyInterval]] = None,
        connected: bool = True,
        delay: float = 0.0,
        fail_busy: bool = False,
        fail_create: bool = False,
    ):
        self.busy = list(busy or [])
        self.connected = connected
        self.delay = delay
        self.fail_busy = fail_busy
        self.fail_create = fail_create
        self.busy_calls = []
        self.created_events = []

    async def is_connected(self, user_id):
        return self.connected

    async def get_busy_intervals(self, user_id, range_start, range_end, calendar_ids=None):
        self.busy_calls.append((user_id, range_start, range_end))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_busy:
            raise ConnectionError("calendar unreachable")
        if not self.connected:
            return NOT_CONNECTED
        return [b for b in self.busy if b.start < range_end and b.end > range_start]

    async def create_event(self, user_id, summary, description, location, start, end,
                           attendee_email, attendee_name):
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_create:
            raise ConnectionError("calendar unreachable")
        self.created_events.append({
            "user_id": user_id,
            "summary": summary,
            "description": description,
            "location": location,
            "start": start,
            "end": end,
            "attendee_email": attendee_email,
            "attendee_name": attendee_name,
        })
        return f"evt-{len(self.created_events)}"

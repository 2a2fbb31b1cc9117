"""Narrow interface the scheduling core uses to talk to an external calendar.

Provider adapters (Google today) implement :class:`CalendarGateway`; the
availability resolver and booking admission only ever see
:class:`BusyInterval` values and the :data:`NOT_CONNECTED` sentinel, never a
provider's own event or credential objects.
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence, Union
from uuid import UUID

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BusyInterval:
    """Half-open [start, end) range during which the user is occupied."""

    start: datetime
    end: datetime
    summary: Optional[str] = None
    calendar_id: str = ""


class _NotConnected:
    """Sentinel type: the user has no active external calendar."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return "NOT_CONNECTED"


NOT_CONNECTED = _NotConnected()

BusyResult = Union[List[BusyInterval], _NotConnected]


class CalendarGateway(ABC):
    """External calendar as seen by the scheduling core."""

    @abstractmethod
    async def is_connected(self, user_id: UUID) -> bool:
        """Return True if the user has an active calendar link."""

    @abstractmethod
    async def get_busy_intervals(
        self,
        user_id: UUID,
        range_start: datetime,
        range_end: datetime,
        calendar_ids: Optional[Sequence[str]] = None,
    ) -> BusyResult:
        """Return busy intervals overlapping [range_start, range_end).

        Returns ``NOT_CONNECTED`` when the user has no active link. Credential
        refresh happens inside the gateway.
        """

    @abstractmethod
    async def create_event(
        self,
        user_id: UUID,
        summary: str,
        description: str,
        location: Optional[str],
        start: datetime,
        end: datetime,
        attendee_email: str,
        attendee_name: str,
    ) -> str:
        """Create an event on the user's calendar and return its id.

        Raises on any failure.
        """


async def fetch_busy_or_none(
    gateway: CalendarGateway,
    user_id: UUID,
    range_start: datetime,
    range_end: datetime,
    timeout: float,
) -> Optional[List[BusyInterval]]:
    """Busy intervals, or None when the calendar is not connected or degraded.

    A timeout or provider error is logged and reported the same way as
    "not connected"; callers decide what an absent calendar means to them.
    """
    try:
        result = await asyncio.wait_for(
            gateway.get_busy_intervals(user_id, range_start, range_end),
            timeout=timeout,
        )
    except asyncio.TimeoutError:
        logger.warning(f"Calendar gateway timed out after {timeout}s for user {user_id}; treating as unavailable")
        return None
    except Exception as e:
        logger.error(f"Calendar gateway failed for user {user_id}: {e}; treating as unavailable")
        return None

    if result is NOT_CONNECTED:
        return None
    return list(result)


class NullCalendarGateway(CalendarGateway):
    """Gateway for deployments without calendar sync configured."""

    async def is_connected(self, user_id: UUID) -> bool:
        return False

    async def get_busy_intervals(self, user_id, range_start, range_end, calendar_ids=None) -> BusyResult:
        return NOT_CONNECTED

    async def create_event(self, user_id, summary, description, location, start, end,
                           attendee_email, attendee_name) -> str:
        raise RuntimeError("No calendar provider configured")

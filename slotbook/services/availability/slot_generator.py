# ===== slotbook/services/availability/slot_generator.py =====
"""Pure slot arithmetic shared by availability resolution and booking admission"""
from datetime import datetime, timedelta
from typing import Iterable, List, Protocol, Tuple

Slot = Tuple[datetime, datetime]


class Interval(Protocol):
    start: datetime
    end: datetime


def overlaps(start: datetime, end: datetime, other_start: datetime, other_end: datetime) -> bool:
    """Strict half-open overlap; touching boundaries do not overlap"""
    return start < other_end and end > other_start


def conflicts_with_buffer(
        start: datetime,
        end: datetime,
        busy: Interval,
        buffer_minutes: int
) -> bool:
    """Overlap after widening [start, end) by the buffer on both sides"""
    buffer = timedelta(minutes=buffer_minutes)
    return overlaps(start - buffer, end + buffer, busy.start, busy.end)


def generate_slots(
        window_start: datetime,
        window_end: datetime,
        duration_minutes: int,
        buffer_minutes: int,
        busy_intervals: Iterable[Interval],
        step_minutes: int = 15
) -> List[Slot]:
    """
    Candidate (start, end) pairs for one availability window.

    Candidates start at window_start and advance by step_minutes; one is kept
    when it ends inside the window and its buffered range does not overlap any
    busy interval. An empty or inverted window yields no slots.
    """
    if window_end <= window_start or duration_minutes <= 0 or step_minutes <= 0:
        return []

    busy = list(busy_intervals)
    duration = timedelta(minutes=duration_minutes)
    step = timedelta(minutes=step_minutes)

    slots = []
    current = window_start
    while current + duration <= window_end:
        slot_end = current + duration
        if not any(conflicts_with_buffer(current, slot_end, interval, buffer_minutes) for interval in busy):
            slots.append((current, slot_end))
        current += step

    return slots

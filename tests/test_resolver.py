"""Tests for day availability resolution."""

from datetime import time, timedelta

import pytest

from slotbook.core.exceptions import NotFoundError
from slotbook.models import AvailabilityRule, BookingStatus
from slotbook.services.availability.resolver_service import AvailabilityResolver, booking_window
from slotbook.services.calendar.gateway import BusyInterval
from tests.helpers import NEXT_MONDAY, NEXT_SUNDAY, NOW, FakeCalendarGateway, at, fixed_clock


def _resolver(db, gateway, settings):
    return AvailabilityResolver(db, gateway, settings=settings, clock=fixed_clock)


def _starts(response):
    return [slot["start"] for slot in response["available_slots"]]


@pytest.mark.asyncio
async def test_monday_slots_without_calendar(db, settings, event_type, monday_rule, gateway):
    response = await _resolver(db, gateway, settings).resolve("ada", "30-minute-meeting", NEXT_MONDAY)

    assert response["date"] == "2026-03-09"
    assert response["event_type"]["name"] == "30 Minute Meeting"
    assert response["event_type"]["duration_minutes"] == 30
    assert response["available_slots"][0] == {
        "start": "2026-03-09T09:00:00",
        "end": "2026-03-09T09:30:00",
    }
    assert response["available_slots"][-1]["end"] == "2026-03-09T17:00:00"
    assert len(response["available_slots"]) == 31


@pytest.mark.asyncio
async def test_busy_time_is_removed_with_boundary_touch_allowed(db, settings, event_type, monday_rule):
    gateway = FakeCalendarGateway(busy=[BusyInterval(at(NEXT_MONDAY, 10), at(NEXT_MONDAY, 10, 30))])

    starts = _starts(await _resolver(db, gateway, settings).resolve("ada", "30-minute-meeting", NEXT_MONDAY))

    assert "2026-03-09T10:00:00" not in starts
    assert "2026-03-09T09:45:00" not in starts
    assert "2026-03-09T09:30:00" in starts


@pytest.mark.asyncio
async def test_one_gateway_call_covers_the_whole_day(db, settings, event_type, owner, gateway):
    db.add_all([
        AvailabilityRule(user_id=owner.id, day_of_week=1, start_time=time(13, 0), end_time=time(15, 0)),
        AvailabilityRule(user_id=owner.id, day_of_week=1, start_time=time(9, 0), end_time=time(11, 0)),
    ])
    db.commit()

    response = await _resolver(db, gateway, settings).resolve("ada", "30-minute-meeting", NEXT_MONDAY)

    assert gateway.busy_calls == [(owner.id, at(NEXT_MONDAY, 0), at(NEXT_MONDAY, 0) + timedelta(days=1))]
    starts = _starts(response)
    # Windows are concatenated earliest first
    assert starts[0] == "2026-03-09T09:00:00"
    assert starts[-1] == "2026-03-09T14:30:00"
    assert "2026-03-09T11:00:00" not in starts
    assert starts == sorted(starts)


@pytest.mark.asyncio
async def test_notice_window_excludes_tomorrow(db, settings, event_type, owner, gateway):
    event_type.min_notice_hours = 72
    db.add(AvailabilityRule(user_id=owner.id, day_of_week=2, start_time=time(9, 0), end_time=time(17, 0)))
    db.commit()

    tomorrow = NOW.date() + timedelta(days=1)
    response = await _resolver(db, gateway, settings).resolve("ada", "30-minute-meeting", tomorrow)

    assert response["available_slots"] == []
    assert response["event_type"]["slug"] == "30-minute-meeting"
    assert gateway.busy_calls == []


@pytest.mark.asyncio
async def test_horizon_boundary(db, settings, event_type, owner, gateway):
    event_type.max_days_in_advance = 7
    db.commit()
    # NOW is a Monday; today + 7 is the next Monday
    db.add(AvailabilityRule(user_id=owner.id, day_of_week=1, start_time=time(9, 0), end_time=time(17, 0)))
    db.add(AvailabilityRule(user_id=owner.id, day_of_week=2, start_time=time(9, 0), end_time=time(17, 0)))
    db.commit()

    resolver = _resolver(db, gateway, settings)
    last_day = await resolver.resolve("ada", "30-minute-meeting", NOW.date() + timedelta(days=7))
    past_horizon = await resolver.resolve("ada", "30-minute-meeting", NOW.date() + timedelta(days=8))

    assert last_day["available_slots"]
    assert past_horizon["available_slots"] == []


def test_booking_window_rounds_notice_up_to_days(event_type):
    event_type.min_notice_hours = 25
    event_type.max_days_in_advance = 30

    min_date, max_date = booking_window(event_type, NOW.date())

    assert min_date == NOW.date() + timedelta(days=2)
    assert max_date == NOW.date() + timedelta(days=30)


@pytest.mark.asyncio
async def test_day_without_rules_is_empty_not_missing(db, settings, event_type, monday_rule, gateway):
    tuesday = NEXT_MONDAY + timedelta(days=1)

    response = await _resolver(db, gateway, settings).resolve("ada", "30-minute-meeting", tuesday)

    assert response["available_slots"] == []


@pytest.mark.asyncio
async def test_sunday_uses_storage_day_zero(db, settings, event_type, owner, gateway):
    db.add(AvailabilityRule(user_id=owner.id, day_of_week=0, start_time=time(10, 0), end_time=time(11, 0)))
    db.commit()

    sunday = await _resolver(db, gateway, settings).resolve("ada", "30-minute-meeting", NEXT_SUNDAY)
    saturday = await _resolver(db, gateway, settings).resolve(
        "ada", "30-minute-meeting", NEXT_SUNDAY - timedelta(days=1)
    )

    assert _starts(sunday) == ["2026-03-08T10:00:00", "2026-03-08T10:15:00", "2026-03-08T10:30:00"]
    assert saturday["available_slots"] == []


@pytest.mark.asyncio
async def test_lookup_is_case_insensitive(db, settings, event_type, monday_rule, gateway):
    response = await _resolver(db, gateway, settings).resolve("ADA", "30-Minute-Meeting", NEXT_MONDAY)

    assert response["available_slots"]


@pytest.mark.asyncio
@pytest.mark.parametrize("username,slug", [("nobody", "30-minute-meeting"), ("ada", "missing")])
async def test_unknown_user_or_slug_is_not_found(db, settings, event_type, gateway, username, slug):
    with pytest.raises(NotFoundError):
        await _resolver(db, gateway, settings).resolve(username, slug, NEXT_MONDAY)


@pytest.mark.asyncio
async def test_inactive_event_type_is_not_found(db, settings, event_type, monday_rule, gateway):
    event_type.is_active = False
    db.commit()

    with pytest.raises(NotFoundError):
        await _resolver(db, gateway, settings).resolve("ada", "30-minute-meeting", NEXT_MONDAY)


@pytest.mark.asyncio
@pytest.mark.parametrize("gateway_kwargs", [
    {"connected": False},
    {"fail_busy": True},
    {"delay": 1.0},
])
async def test_unavailable_calendar_means_no_busy_time(db, settings, event_type, monday_rule, gateway_kwargs):
    gateway = FakeCalendarGateway(
        busy=[BusyInterval(at(NEXT_MONDAY, 9), at(NEXT_MONDAY, 17))],
        **gateway_kwargs
    )

    response = await _resolver(db, gateway, settings).resolve("ada", "30-minute-meeting", NEXT_MONDAY)

    assert len(response["available_slots"]) == 31


@pytest.mark.asyncio
async def test_local_bookings_are_excluded_unless_cancelled(db, settings, event_type, monday_rule,
                                                           gateway, add_booking):
    add_booking(event_type, at(NEXT_MONDAY, 9))
    add_booking(event_type, at(NEXT_MONDAY, 14), status=BookingStatus.CANCELLED)

    starts = _starts(await _resolver(db, gateway, settings).resolve("ada", "30-minute-meeting", NEXT_MONDAY))

    assert "2026-03-09T09:00:00" not in starts
    assert "2026-03-09T09:15:00" not in starts
    assert "2026-03-09T09:30:00" in starts
    assert "2026-03-09T14:00:00" in starts


@pytest.mark.asyncio
async def test_resolution_is_idempotent(db, settings, event_type, monday_rule):
    gateway = FakeCalendarGateway(busy=[BusyInterval(at(NEXT_MONDAY, 12), at(NEXT_MONDAY, 13))])
    resolver = _resolver(db, gateway, settings)

    first = await resolver.resolve("ada", "30-minute-meeting", NEXT_MONDAY)
    second = await resolver.resolve("ada", "30-minute-meeting", NEXT_MONDAY)

    assert first == second

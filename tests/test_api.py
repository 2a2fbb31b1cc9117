"""HTTP tests for the public booking pages and the dashboard routes."""

import pytest
from fastapi.testclient import TestClient

from slotbook.api.dependencies import get_calendar_gateway, get_clock
from slotbook.config.database import get_db
from slotbook.main import app
from slotbook.models import BookingStatus
from tests.helpers import NEXT_MONDAY, at, fixed_clock

PAGE = "/api/v1/public/ada/30-minute-meeting"


@pytest.fixture
def client(session_factory, gateway):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_calendar_gateway] = lambda: gateway
    app.dependency_overrides[get_clock] = lambda: fixed_clock
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _login(client, email="ada@example.com", password="correct-horse"):
    response = client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def _guest(start_time):
    return {"guest_name": "Charles", "guest_email": "charles@example.com", "start_time": start_time}


class TestPublicPages:
    def test_profile_and_event_type_page(self, client, event_type, monday_rule):
        profile = client.get("/api/v1/public/ADA")
        details = client.get(PAGE)

        assert profile.status_code == 200
        assert [e["slug"] for e in profile.json()["event_types"]] == ["30-minute-meeting"]
        assert details.json()["availability"][0]["day_of_week_name"] == "Monday"

    def test_day_availability(self, client, event_type, monday_rule):
        response = client.get(f"{PAGE}/availability", params={"date": NEXT_MONDAY.isoformat()})

        assert response.status_code == 200
        body = response.json()
        assert body["event_type"]["slug"] == "30-minute-meeting"
        assert len(body["available_slots"]) == 31
        assert body["available_slots"][0] == {"start": "2026-03-09T09:00:00", "end": "2026-03-09T09:30:00"}

    def test_bad_date(self, client, event_type):
        response = client.get(f"{PAGE}/availability", params={"date": "09/03/2026"})

        assert response.status_code == 400
        assert response.json() == {"detail": "Invalid date format. Use YYYY-MM-DD"}

    def test_unknown_page_is_404_json(self, client, owner):
        response = client.get("/api/v1/public/ada/nope/availability", params={"date": NEXT_MONDAY.isoformat()})

        assert response.status_code == 404
        assert "detail" in response.json()


class TestPublicBooking:
    def test_book_then_conflict(self, client, event_type, monday_rule, gateway):
        first = client.post(f"{PAGE}/book", json=_guest("2026-03-09T10:00:00"))
        second = client.post(f"{PAGE}/book", json=_guest("2026-03-09T10:15:00"))

        assert first.status_code == 201
        assert first.json()["status"] == BookingStatus.CONFIRMED
        assert first.json()["external_event_id"] == "evt-1"
        assert second.status_code == 409
        assert "no longer available" in second.json()["detail"]

        slots = client.get(f"{PAGE}/availability", params={"date": NEXT_MONDAY.isoformat()}).json()
        starts = {slot["start"] for slot in slots["available_slots"]}
        assert "2026-03-09T10:00:00" not in starts
        assert "2026-03-09T10:30:00" in starts

    def test_invalid_guest_email(self, client, event_type, monday_rule):
        payload = _guest("2026-03-09T10:00:00")
        payload["guest_email"] = "not-an-email"

        assert client.post(f"{PAGE}/book", json=payload).status_code == 422


class TestDashboard:
    def test_requires_token(self, client):
        assert client.get("/api/v1/event-types").status_code in (401, 403)

    def test_login_with_wrong_password(self, client, owner):
        response = client.post("/api/v1/auth/login", json={"email": "ada@example.com", "password": "nope"})

        assert response.status_code == 401

    def test_register_configure_and_publish(self, client):
        registered = client.post("/api/v1/auth/register", json={
            "email": "linus@example.com",
            "username": "Linus",
            "full_name": "Linus T",
            "password": "s3cret-pass",
        })
        assert registered.status_code == 201
        headers = {"Authorization": f"Bearer {registered.json()['access_token']}"}

        created = client.post("/api/v1/event-types", headers=headers, json={
            "name": "Kernel Chat", "duration_minutes": 60, "min_notice_hours": 0,
        })
        assert created.status_code == 201
        assert created.json()["slug"] == "kernel-chat"

        schedule = client.put("/api/v1/availability", headers=headers, json={"rules": [
            {"day_of_week": 1, "start_time": "09:00", "end_time": "11:00"},
        ]})
        assert schedule.status_code == 200
        assert [r["day_of_week_name"] for r in schedule.json()] == ["Monday"]

        slots = client.get("/api/v1/public/linus/kernel-chat/availability",
                           params={"date": NEXT_MONDAY.isoformat()}).json()["available_slots"]
        assert [slot["start"] for slot in slots] == [
            "2026-03-09T09:00:00", "2026-03-09T09:15:00", "2026-03-09T09:30:00",
            "2026-03-09T09:45:00", "2026-03-09T10:00:00",
        ]

    def test_overlapping_schedule_rejected(self, client, owner):
        response = client.put("/api/v1/availability", headers=_login(client), json={"rules": [
            {"day_of_week": 2, "start_time": "09:00", "end_time": "12:00"},
            {"day_of_week": 2, "start_time": "11:00", "end_time": "13:00"},
        ]})

        assert response.status_code == 400

    def test_list_and_cancel_bookings(self, client, event_type, add_booking):
        booking = add_booking(event_type, at(NEXT_MONDAY, 10))
        headers = _login(client)

        upcoming = client.get("/api/v1/bookings", headers=headers, params={"filter": "upcoming"})
        assert [b["id"] for b in upcoming.json()] == [str(booking.id)]

        cancelled = client.post(f"/api/v1/bookings/{booking.id}/cancel", headers=headers,
                                json={"reason": "Conflict"})
        assert cancelled.status_code == 200
        assert cancelled.json()["status"] == BookingStatus.CANCELLED
        assert cancelled.json()["cancellation_reason"] == "Conflict"

        assert client.get("/api/v1/bookings", headers=headers, params={"filter": "upcoming"}).json() == []
        assert len(client.get("/api/v1/bookings", headers=headers, params={"filter": "cancelled"}).json()) == 1

    def test_cannot_cancel_someone_elses_booking(self, client, event_type, add_booking, other_user):
        booking = add_booking(event_type, at(NEXT_MONDAY, 10))

        response = client.post(f"/api/v1/bookings/{booking.id}/cancel",
                               headers=_login(client, "grace@example.com", "battery-staple"))

        assert response.status_code == 404


class TestGoogleBusyLookup:
    URL = "/api/v1/integrations/google/busy-slots"

    @pytest.mark.parametrize("end_date", ["2026-03-08T00:00:00", "2026-06-08T00:00:01"])
    def test_bad_ranges_are_400(self, client, owner, end_date):
        response = client.post(self.URL, headers=_login(client), json={
            "start_date": "2026-03-09T00:00:00", "end_date": end_date,
        })

        assert response.status_code == 400

    def test_not_connected_is_404(self, client, owner):
        response = client.post(self.URL, headers=_login(client), json={
            "start_date": "2026-03-09T00:00:00",
            "end_date": "2026-03-16T00:00:00",
            "calendar_ids": ["primary"],
        })

        assert response.status_code == 404
        assert response.json() == {"detail": "Google Calendar is not connected"}

    def test_live_calendar_list_not_connected(self, client, owner):
        response = client.get("/api/v1/integrations/google/calendars", headers=_login(client))

        assert response.status_code == 404


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"

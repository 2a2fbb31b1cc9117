"""Pytest fixtures for slotbook tests."""

import logging
import os
from datetime import time, timedelta

# Settings are cached on first use; point them at throwaway values before any import
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

import pytest
from cryptography.fernet import Fernet
from sqlalchemy.orm import sessionmaker

from slotbook.config.database import build_engine, create_tables
from slotbook.config.settings import Settings
from slotbook.models import AvailabilityRule, Booking, BookingStatus, EventType, User
from tests.helpers import FakeCalendarGateway

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@pytest.fixture
def settings():
    """Settings with a short gateway timeout and a real Fernet key."""
    return Settings(
        DATABASE_URL="sqlite://",
        JWT_SECRET_KEY="test-secret-key",
        CALENDAR_ENCRYPTION_KEY=Fernet.generate_key().decode(),
        GOOGLE_CLIENT_ID="client-id",
        GOOGLE_CLIENT_SECRET="client-secret",
        CALENDAR_GATEWAY_TIMEOUT_SECONDS=0.2,
        SLOT_STEP_MINUTES=15,
    )


@pytest.fixture
def engine(tmp_path):
    """File-backed SQLite so that several threads can hold their own connections."""
    engine = build_engine(f"sqlite:///{tmp_path / 'slotbook.db'}")
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def gateway():
    return FakeCalendarGateway()


@pytest.fixture
def owner(db):
    user = User(
        email="ada@example.com",
        username="ada",
        full_name="Ada Lovelace",
        hashed_password=User.hash_password("correct-horse"),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def other_user(db):
    user = User(
        email="grace@example.com",
        username="grace",
        full_name="Grace Hopper",
        hashed_password=User.hash_password("battery-staple"),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def event_type(db, owner):
    event_type = EventType(
        user_id=owner.id,
        name="30 Minute Meeting",
        slug="30-minute-meeting",
        description="Quick intro call",
        duration_minutes=30,
        location="Online",
        buffer_minutes=0,
        min_notice_hours=24,
        max_days_in_advance=60,
    )
    db.add(event_type)
    db.commit()
    db.refresh(event_type)
    return event_type


@pytest.fixture
def monday_rule(db, owner):
    """Monday 09:00-17:00 (storage day 1)."""
    rule = AvailabilityRule(user_id=owner.id, day_of_week=1, start_time=time(9, 0), end_time=time(17, 0))
    db.add(rule)
    db.commit()
    return rule


@pytest.fixture
def add_booking(db):
    """Factory for bookings placed directly in the store."""

    def _add(event_type, start, status=BookingStatus.CONFIRMED, guest_email="guest@example.com"):
        booking = Booking(
            event_type_id=event_type.id,
            guest_name="Existing Guest",
            guest_email=guest_email,
            start_time=start,
            end_time=start + timedelta(minutes=event_type.duration_minutes),
            status=status,
        )
        db.add(booking)
        db.commit()
        db.refresh(booking)
        return booking

    return _add

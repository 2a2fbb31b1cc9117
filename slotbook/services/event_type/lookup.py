# ===== slotbook/services/event_type/lookup.py =====
from typing import Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from slotbook.core.exceptions import NotFoundError
from slotbook.models import EventType, User


def find_bookable_event_type(db: Session, username: str, slug: str) -> Tuple[User, EventType]:
    """
    Resolve a public booking page: active user plus active event type.
    Username and slug match case-insensitively. Raises NotFoundError.
    """
    user = db.query(User).filter(
        func.lower(User.username) == username.strip().lower(),
        User.is_active.is_(True)
    ).first()

    if user is None:
        raise NotFoundError("User or event type not found")

    event_type = db.query(EventType).filter(
        EventType.user_id == user.id,
        func.lower(EventType.slug) == slug.strip().lower(),
        EventType.is_active.is_(True)
    ).first()

    if event_type is None:
        raise NotFoundError("User or event type not found")

    return user, event_type


def event_type_info(event_type: EventType) -> dict:
    """Public display fields of an event type"""
    return {
        "name": event_type.name,
        "slug": event_type.slug,
        "duration_minutes": event_type.duration_minutes,
        "location": event_type.location,
        "description": event_type.description,
    }

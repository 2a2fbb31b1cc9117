# ===== slotbook/services/event_type/event_type_service.py =====
import logging
import re
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from slotbook.core.exceptions import NotFoundError, ValidationError
from slotbook.models import EventType
from slotbook.schemas.event_type import EventTypeCreate, EventTypeUpdate

logger = logging.getLogger(__name__)

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")

SLUG_TAKEN_MESSAGE = "Event type with this slug already exists"

# field -> (min, max, label)
BOUNDS = {
    "duration_minutes": (5, 480, "Duration"),
    "buffer_minutes": (0, 120, "Buffer"),
    "min_notice_hours": (0, 168, "Minimum notice"),
    "max_days_in_advance": (1, 365, "Booking horizon"),
}


def slugify(name: str) -> str:
    """'30 Minute Meeting' -> '30-minute-meeting'; falls back to 'event'"""
    slug = _NON_SLUG_CHARS.sub("-", name.lower()).strip("-")
    return slug or "event"


class EventTypeService:
    """Owner-scoped CRUD for event types"""

    @staticmethod
    def create_event_type(db: Session, user_id: UUID, request: EventTypeCreate) -> Dict:
        values = request.model_dump()
        EventTypeService._validate_bounds(values)

        if request.slug:
            slug = EventTypeService._checked_slug(db, user_id, request.slug)
        else:
            slug = EventTypeService._unique_slug(db, user_id, slugify(request.name))

        values["slug"] = slug
        values["location"] = request.location.value

        try:
            event_type = EventType(user_id=user_id, **values)
            db.add(event_type)
            db.commit()
        except IntegrityError:
            # Another request took the slug between the check and the insert
            db.rollback()
            logger.info(f"Slug '{slug}' taken concurrently for user {user_id}")
            raise ValidationError(SLUG_TAKEN_MESSAGE)
        except Exception:
            db.rollback()
            raise

        db.refresh(event_type)
        logger.info(f"Created event type '{slug}' for user {user_id}")
        return EventTypeService._serialize(event_type)

    @staticmethod
    def list_event_types(db: Session, user_id: UUID, active_only: bool = False) -> List[Dict]:
        query = db.query(EventType).filter(EventType.user_id == user_id)
        if active_only:
            query = query.filter(EventType.is_active.is_(True))

        event_types = query.order_by(EventType.created_at.desc()).all()
        return [EventTypeService._serialize(event_type) for event_type in event_types]

    @staticmethod
    def get_event_type(db: Session, user_id: UUID, event_type_id: UUID) -> Dict:
        return EventTypeService._serialize(EventTypeService._owned(db, user_id, event_type_id))

    @staticmethod
    def update_event_type(db: Session, user_id: UUID, event_type_id: UUID, request: EventTypeUpdate) -> Dict:
        """Apply only the fields present in the request"""
        event_type = EventTypeService._owned(db, user_id, event_type_id)
        changes = request.model_dump(exclude_unset=True, exclude_none=True)

        merged = {field: changes.get(field, getattr(event_type, field)) for field in BOUNDS}
        EventTypeService._validate_bounds(merged)

        if "slug" in changes and changes["slug"].lower() != event_type.slug:
            changes["slug"] = EventTypeService._checked_slug(db, user_id, changes["slug"], exclude_id=event_type.id)
        else:
            changes.pop("slug", None)

        if "location" in changes:
            changes["location"] = changes["location"].value

        try:
            for field, value in changes.items():
                setattr(event_type, field, value)
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ValidationError(SLUG_TAKEN_MESSAGE)
        except Exception:
            db.rollback()
            raise

        db.refresh(event_type)
        return EventTypeService._serialize(event_type)

    @staticmethod
    def delete_event_type(db: Session, user_id: UUID, event_type_id: UUID):
        """Delete an event type together with its bookings"""
        event_type = EventTypeService._owned(db, user_id, event_type_id)

        db.delete(event_type)
        db.commit()
        logger.info(f"Deleted event type {event_type_id} for user {user_id}")

    # ========================================================================
    # Helpers
    # ========================================================================

    @staticmethod
    def _owned(db: Session, user_id: UUID, event_type_id: UUID) -> EventType:
        event_type = db.query(EventType).filter(
            EventType.id == event_type_id,
            EventType.user_id == user_id
        ).first()

        if not event_type:
            raise NotFoundError("Event type not found")
        return event_type

    @staticmethod
    def _validate_bounds(values: Dict):
        for field, (low, high, label) in BOUNDS.items():
            value = values.get(field)
            if value is None:
                continue
            if not low <= value <= high:
                raise ValidationError(f"{label} must be between {low} and {high}")

    @staticmethod
    def _slug_taken(db: Session, user_id: UUID, slug: str, exclude_id: Optional[UUID] = None) -> bool:
        query = db.query(EventType.id).filter(EventType.user_id == user_id, EventType.slug == slug)
        if exclude_id is not None:
            query = query.filter(EventType.id != exclude_id)
        return query.first() is not None

    @staticmethod
    def _checked_slug(db: Session, user_id: UUID, slug: str, exclude_id: Optional[UUID] = None) -> str:
        slug = slug.strip().lower()
        if not SLUG_PATTERN.match(slug):
            raise ValidationError("Slug may only contain lowercase letters, digits and single hyphens")
        if EventTypeService._slug_taken(db, user_id, slug, exclude_id):
            raise ValidationError(SLUG_TAKEN_MESSAGE)
        return slug

    @staticmethod
    def _unique_slug(db: Session, user_id: UUID, base: str) -> str:
        slug = base
        suffix = 2
        while EventTypeService._slug_taken(db, user_id, slug):
            slug = f"{base}-{suffix}"
            suffix += 1
        return slug

    @staticmethod
    def _serialize(event_type: EventType) -> Dict:
        return {
            "id": str(event_type.id),
            "user_id": str(event_type.user_id),
            "name": event_type.name,
            "slug": event_type.slug,
            "description": event_type.description,
            "duration_minutes": event_type.duration_minutes,
            "location": event_type.location,
            "location_details": event_type.location_details,
            "color": event_type.color,
            "buffer_minutes": event_type.buffer_minutes,
            "min_notice_hours": event_type.min_notice_hours,
            "max_days_in_advance": event_type.max_days_in_advance,
            "is_active": event_type.is_active,
            "created_at": event_type.created_at.isoformat() if event_type.created_at else None,
            "updated_at": event_type.updated_at.isoformat() if event_type.updated_at else None,
        }

# ============================================================================
# FILE: slotbook/services/user/user_service.py
# Registration, login and profile for calendar owners
# ============================================================================
import logging
import re
from typing import Dict, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from slotbook.core.exceptions import NotFoundError, ValidationError
from slotbook.models import AvailabilityRule, EventType, User
from slotbook.schemas.user import USERNAME_PATTERN, ProfileUpdate, RegisterRequest
from slotbook.services.availability.weekdays import day_name

logger = logging.getLogger(__name__)

_USERNAME_RE = re.compile(USERNAME_PATTERN)


class UserService:
    """Service layer for user operations."""

    @staticmethod
    def register(db: Session, request: RegisterRequest) -> User:
        """
        Create a new user with hashed password.
        Raises ValidationError if the email or username is taken or the username is malformed.
        """
        email = str(request.email).lower().strip()
        username = UserService._normalize_username(request.username)

        if UserService.get_user_by_email(db, email):
            raise ValidationError("Email already registered")

        if UserService.get_user_by_username(db, username):
            raise ValidationError("Username already taken")

        user = User(
            email=email,
            username=username,
            full_name=request.full_name.strip(),
            hashed_password=User.hash_password(request.password),
            is_active=True
        )

        try:
            db.add(user)
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(user)
        logger.info(f"Registered user {user.username}")
        return user

    @staticmethod
    def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
        """
        Authenticate a user by email and password.
        Returns User if valid, None if invalid credentials.
        """
        user = UserService.get_user_by_email(db, email)

        if not user or not user.is_active:
            return None

        if not user.verify_password(password):
            return None

        return user

    @staticmethod
    def get_user_by_id(db: Session, user_id: UUID) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email.lower().strip()).first()

    @staticmethod
    def get_user_by_username(db: Session, username: str) -> Optional[User]:
        return db.query(User).filter(func.lower(User.username) == username.lower().strip()).first()

    @staticmethod
    def update_profile(db: Session, user: User, request: ProfileUpdate) -> Dict:
        if request.username is not None:
            username = UserService._normalize_username(request.username)
            if username != user.username:
                if UserService.get_user_by_username(db, username):
                    raise ValidationError("Username already taken")
                user.username = username

        if request.full_name is not None:
            user.full_name = request.full_name.strip()

        try:
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(user)
        return UserService.serialize_profile(user)

    @staticmethod
    def serialize_profile(user: User) -> Dict:
        integration = user.calendar_integration
        return {
            "id": str(user.id),
            "email": user.email,
            "username": user.username,
            "full_name": user.full_name,
            "is_active": user.is_active,
            "calendar_connected": bool(integration and integration.is_active),
            "created_at": user.created_at.isoformat() if user.created_at else None,
        }

    # ========================================================================
    # Public pages
    # ========================================================================

    @staticmethod
    def public_profile(db: Session, username: str) -> Dict:
        """Username, name and active event types (by name) for a public page"""
        user = UserService.get_user_by_username(db, username)
        if not user or not user.is_active:
            raise NotFoundError("User not found")

        event_types = db.query(EventType).filter(
            EventType.user_id == user.id,
            EventType.is_active.is_(True)
        ).order_by(EventType.name).all()

        return {
            "username": user.username,
            "full_name": user.full_name,
            "event_types": [UserService._public_event_type(event_type) for event_type in event_types],
        }

    @staticmethod
    def public_event_type(db: Session, user: User, event_type: EventType) -> Dict:
        """Event type card plus the owner's weekly windows"""
        rules = db.query(AvailabilityRule).filter(
            AvailabilityRule.user_id == user.id
        ).order_by(AvailabilityRule.day_of_week, AvailabilityRule.start_time).all()

        return {
            "username": user.username,
            "full_name": user.full_name,
            "event_type": UserService._public_event_type(event_type),
            "availability": [
                {
                    "day_of_week": rule.day_of_week,
                    "day_of_week_name": day_name(rule.day_of_week),
                    "start_time": rule.start_time.isoformat(),
                    "end_time": rule.end_time.isoformat(),
                }
                for rule in rules
            ],
        }

    @staticmethod
    def _public_event_type(event_type: EventType) -> Dict:
        return {
            "name": event_type.name,
            "slug": event_type.slug,
            "description": event_type.description,
            "duration_minutes": event_type.duration_minutes,
            "location": event_type.location,
            "color": event_type.color,
        }

    @staticmethod
    def _normalize_username(username: str) -> str:
        username = username.strip().lower()
        if not _USERNAME_RE.match(username):
            raise ValidationError(
                "Username must be 3-50 characters: lowercase letters, digits, hyphens or underscores"
            )
        return username

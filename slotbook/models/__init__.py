# slotbook/models/__init__.py
from .base import Base
from .user import User
from .availability import AvailabilityRule
from .event_type import EventType
from .booking import Booking, BookingStatus
from .calendar_integration import CalendarIntegration

__all__ = [
    "Base",
    "User",
    "AvailabilityRule",
    "EventType",
    "Booking",
    "BookingStatus",
    "CalendarIntegration",
]

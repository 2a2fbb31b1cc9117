"""
Pydantic schemas for event types (bookable meeting templates)
"""
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

HEX_COLOR_PATTERN = r"^#[0-9a-fA-F]{6}$"


class MeetingLocation(str, Enum):
    ONLINE = "Online"
    IN_PERSON = "In-person"
    PHONE = "Phone"


# ============================================================================
# Request Schemas
# ============================================================================

class EventTypeCreate(BaseModel):
    """
    New event type. Numeric bounds are checked by the service so that every
    caller gets the same ValidationError message.
    """
    name: str = Field(..., min_length=1, max_length=100)
    slug: Optional[str] = Field(None, max_length=100, description="Generated from name when omitted")
    description: Optional[str] = None
    duration_minutes: int = 30
    location: MeetingLocation = MeetingLocation.ONLINE
    location_details: Optional[str] = Field(None, max_length=500)
    color: str = Field("#3b82f6", pattern=HEX_COLOR_PATTERN)
    buffer_minutes: int = 0
    min_notice_hours: int = 24
    max_days_in_advance: int = 60
    is_active: bool = True

    class Config:
        json_schema_extra = {
            "example": {
                "name": "30 Minute Meeting",
                "duration_minutes": 30,
                "location": "Online",
                "location_details": "https://meet.example.com/ada"
            }
        }


class EventTypeUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    slug: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    duration_minutes: Optional[int] = None
    location: Optional[MeetingLocation] = None
    location_details: Optional[str] = Field(None, max_length=500)
    color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
    buffer_minutes: Optional[int] = None
    min_notice_hours: Optional[int] = None
    max_days_in_advance: Optional[int] = None
    is_active: Optional[bool] = None


# ============================================================================
# Response Schemas
# ============================================================================

class EventTypeResponse(BaseModel):
    id: UUID
    user_id: UUID
    name: str
    slug: str
    description: Optional[str] = None
    duration_minutes: int
    location: str
    location_details: Optional[str] = None
    color: str
    buffer_minutes: int
    min_notice_hours: int
    max_days_in_advance: int
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

"""
Pydantic schemas for public booking and owner-side booking management
"""
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


# ============================================================================
# Request Schemas
# ============================================================================

class BookingCreate(BaseModel):
    """Guest submission from a public booking page"""
    guest_name: str = Field(..., min_length=1, max_length=255)
    guest_email: EmailStr
    guest_phone: Optional[str] = Field(None, max_length=20)
    notes: Optional[str] = Field(None, max_length=2000)
    start_time: datetime = Field(..., description="Slot start; naive values are read as UTC")

    class Config:
        json_schema_extra = {
            "example": {
                "guest_name": "Ada Lovelace",
                "guest_email": "ada@example.com",
                "notes": "Quarterly sync",
                "start_time": "2026-03-09T09:00:00"
            }
        }


class BookingCancel(BaseModel):
    reason: Optional[str] = Field(None, max_length=1000)


class BookingFilter(str, Enum):
    UPCOMING = "upcoming"
    PAST = "past"
    CANCELLED = "cancelled"
    ALL = "all"


# ============================================================================
# Response Schemas
# ============================================================================

class BookingConfirmation(BaseModel):
    booking_id: UUID
    guest_name: str
    guest_email: str
    start_time: datetime
    end_time: datetime
    event_type_name: str
    duration_minutes: int
    location: str
    location_details: Optional[str] = None
    status: str
    external_event_id: Optional[str] = None
    message: str


class BookingResponse(BaseModel):
    id: UUID
    event_type_id: UUID
    event_type_name: str
    guest_name: str
    guest_email: str
    guest_phone: Optional[str] = None
    notes: Optional[str] = None
    start_time: datetime
    end_time: datetime
    status: str
    cancellation_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    external_event_id: Optional[str] = None
    created_at: Optional[datetime] = None

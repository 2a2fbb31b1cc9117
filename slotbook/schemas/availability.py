"""
Pydantic schemas for weekly availability rules and day availability
"""
from datetime import date, datetime, time
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


# ============================================================================
# Request Schemas
# ============================================================================

class AvailabilityRuleCreate(BaseModel):
    """One recurring weekly window"""
    day_of_week: int = Field(..., ge=0, le=6, description="0 = Sunday ... 6 = Saturday")
    start_time: time
    end_time: time

    class Config:
        json_schema_extra = {
            "example": {"day_of_week": 1, "start_time": "09:00", "end_time": "17:00"}
        }


class AvailabilityBulkReplace(BaseModel):
    """Full replacement set; an empty list clears the schedule"""
    rules: List[AvailabilityRuleCreate] = Field(default_factory=list)


# ============================================================================
# Response Schemas
# ============================================================================

class AvailabilityRuleResponse(BaseModel):
    id: UUID
    user_id: UUID
    day_of_week: int
    day_of_week_name: str
    start_time: time
    end_time: time
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AvailableSlot(BaseModel):
    start: datetime
    end: datetime


class EventTypeInfo(BaseModel):
    name: str
    slug: str
    duration_minutes: int
    location: str
    description: Optional[str] = None


class DayAvailabilityResponse(BaseModel):
    date: date
    event_type: EventTypeInfo
    available_slots: List[AvailableSlot]

"""
Pydantic schemas for the Google Calendar integration
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class CalendarEntry(BaseModel):
    id: str
    name: str


class IntegrationStatusResponse(BaseModel):
    is_connected: bool
    account_email: Optional[str] = None
    calendar_id: Optional[str] = None
    calendars: List[CalendarEntry] = Field(default_factory=list)
    connected_at: Optional[str] = None


class BusyCalendarSelection(BaseModel):
    """Which of the connected calendars count as busy time"""
    calendar_ids: List[str] = Field(default_factory=list)


class AuthorizationUrlResponse(BaseModel):
    authorization_url: str


class LiveCalendarEntry(CalendarEntry):
    primary: bool = False


class BusyIntervalsRequest(BaseModel):
    """Owner-side free/busy lookup; the range may span at most 90 days"""
    start_date: datetime
    end_date: datetime
    calendar_ids: Optional[List[str]] = Field(
        None, description="Calendars to query; defaults to the selected busy calendars"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "start_date": "2026-03-09T00:00:00Z",
                "end_date": "2026-03-16T00:00:00Z",
                "calendar_ids": ["primary"]
            }
        }


class BusyIntervalResponse(BaseModel):
    start: datetime
    end: datetime
    summary: Optional[str] = None
    calendar_id: str

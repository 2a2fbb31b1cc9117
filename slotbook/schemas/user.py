"""
Pydantic schemas for registration, login and the owner profile
"""
from datetime import datetime, time
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

USERNAME_PATTERN = r"^[a-z0-9_-]{3,50}$"


# ============================================================================
# Request Schemas
# ============================================================================

class RegisterRequest(BaseModel):
    email: EmailStr
    username: str = Field(..., min_length=3, max_length=50)
    full_name: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=8, max_length=128)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=1, max_length=100)
    username: Optional[str] = Field(None, min_length=3, max_length=50)


# ============================================================================
# Response Schemas
# ============================================================================

class UserProfileResponse(BaseModel):
    id: UUID
    email: str
    username: str
    full_name: str
    is_active: bool
    calendar_connected: bool = False
    created_at: Optional[datetime] = None


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserProfileResponse


class PublicEventTypeSummary(BaseModel):
    name: str
    slug: str
    description: Optional[str] = None
    duration_minutes: int
    location: str
    color: str


class PublicProfileResponse(BaseModel):
    username: str
    full_name: str
    event_types: List[PublicEventTypeSummary]


class PublicAvailabilityWindow(BaseModel):
    day_of_week: int
    day_of_week_name: str
    start_time: time
    end_time: time


class PublicEventTypeDetails(BaseModel):
    username: str
    full_name: str
    event_type: PublicEventTypeSummary
    availability: List[PublicAvailabilityWindow]

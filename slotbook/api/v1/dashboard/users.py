# ============================================================================
# FILE: slotbook/api/v1/dashboard/users.py
# ============================================================================
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from slotbook.api.dependencies import get_current_user
from slotbook.config.database import get_db
from slotbook.models.user import User
from slotbook.schemas.user import ProfileUpdate, UserProfileResponse
from slotbook.services.user.user_service import UserService

router = APIRouter(tags=["Users"])


@router.get("/me", response_model=UserProfileResponse)
async def get_profile(current_user: User = Depends(get_current_user)):
    return UserService.serialize_profile(current_user)


@router.patch("/me", response_model=UserProfileResponse)
async def update_profile(
        request: ProfileUpdate,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    return UserService.update_profile(db, current_user, request)

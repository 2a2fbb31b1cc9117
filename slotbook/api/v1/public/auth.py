# ============================================================================
# FILE: slotbook/api/v1/public/auth.py
# Public authentication endpoints - register and login
# ============================================================================
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from slotbook.api.dependencies import create_access_token, get_current_user
from slotbook.config.database import get_db
from slotbook.config.settings import get_settings
from slotbook.models.user import User
from slotbook.schemas.user import LoginRequest, RegisterRequest, TokenResponse, UserProfileResponse
from slotbook.services.user.user_service import UserService

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _token_response(user: User) -> dict:
    settings = get_settings()
    return {
        "access_token": create_access_token({"sub": str(user.id), "email": user.email}),
        "token_type": "bearer",
        "expires_in": settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        "user": UserService.serialize_profile(user),
    }


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest, db: Session = Depends(get_db)):
    """Create an account and sign in"""
    user = UserService.register(db, request)
    return _token_response(user)


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest, db: Session = Depends(get_db)):
    user = UserService.authenticate_user(db, request.email, request.password)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return _token_response(user)


@router.get("/me", response_model=UserProfileResponse)
async def whoami(current_user: User = Depends(get_current_user)):
    return UserService.serialize_profile(current_user)

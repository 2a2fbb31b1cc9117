# ============================================================================
# FILE: slotbook/api/v1/dashboard/event_types.py
# Session authenticated endpoints - thin HTTP layer
# ============================================================================
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from slotbook.api.dependencies import get_current_user
from slotbook.config.database import get_db
from slotbook.models.user import User
from slotbook.schemas.event_type import EventTypeCreate, EventTypeResponse, EventTypeUpdate
from slotbook.services.event_type.event_type_service import EventTypeService

router = APIRouter(tags=["Event Types"])


@router.post("", response_model=EventTypeResponse, status_code=status.HTTP_201_CREATED)
async def create_event_type(
        request: EventTypeCreate,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    return EventTypeService.create_event_type(db, current_user.id, request)


@router.get("", response_model=List[EventTypeResponse])
async def list_event_types(
        active_only: bool = Query(False),
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    return EventTypeService.list_event_types(db, current_user.id, active_only=active_only)


@router.get("/{event_type_id}", response_model=EventTypeResponse)
async def get_event_type(
        event_type_id: UUID,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    return EventTypeService.get_event_type(db, current_user.id, event_type_id)


@router.patch("/{event_type_id}", response_model=EventTypeResponse)
async def update_event_type(
        event_type_id: UUID,
        request: EventTypeUpdate,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    return EventTypeService.update_event_type(db, current_user.id, event_type_id, request)


@router.delete("/{event_type_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event_type(
        event_type_id: UUID,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    EventTypeService.delete_event_type(db, current_user.id, event_type_id)

# ============================================================================
# FILE: slotbook/api/v1/dashboard/availability.py
# Weekly availability rules for the signed-in user
# ============================================================================
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from slotbook.api.dependencies import get_current_user
from slotbook.config.database import get_db
from slotbook.models.user import User
from slotbook.schemas.availability import (
    AvailabilityBulkReplace,
    AvailabilityRuleCreate,
    AvailabilityRuleResponse,
)
from slotbook.services.availability.availability_service import AvailabilityService

router = APIRouter(tags=["Availability"])


@router.get("", response_model=List[AvailabilityRuleResponse])
async def list_availability(
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    return AvailabilityService.list_rules(db, current_user.id)


@router.post("", response_model=AvailabilityRuleResponse, status_code=status.HTTP_201_CREATED)
async def create_availability(
        request: AvailabilityRuleCreate,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    return AvailabilityService.create_rule(db, current_user.id, request)


@router.put("", response_model=List[AvailabilityRuleResponse])
async def replace_availability(
        request: AvailabilityBulkReplace,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """Replace the whole weekly schedule in one transaction"""
    return AvailabilityService.replace_rules(db, current_user.id, request.rules)


@router.delete("/{rule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_availability(
        rule_id: UUID,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    if not AvailabilityService.delete_rule(db, current_user.id, rule_id):
        raise HTTPException(status_code=404, detail="Availability rule not found")

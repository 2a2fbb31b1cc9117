# ===== slotbook/services/availability/availability_service.py =====
from typing import Dict, List, Optional, Sequence
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from slotbook.core.exceptions import ValidationError
from slotbook.models import AvailabilityRule, User
from slotbook.schemas.availability import AvailabilityRuleCreate
from slotbook.services.availability.slot_generator import overlaps
from slotbook.services.availability.weekdays import day_name

logger = logging.getLogger(__name__)


class AvailabilityService:
    """Weekly availability rules: create, list, delete and bulk replace"""

    @staticmethod
    def create_rule(db: Session, user_id: UUID, request: AvailabilityRuleCreate) -> Dict:
        """Add one window. Raises ValidationError on a bad range or an overlap."""
        AvailabilityService._validate_window(request)

        try:
            AvailabilityService._lock_user(db, user_id)

            existing = db.query(AvailabilityRule).filter(
                AvailabilityRule.user_id == user_id,
                AvailabilityRule.day_of_week == request.day_of_week
            ).all()

            if any(overlaps(request.start_time, request.end_time, rule.start_time, rule.end_time)
                   for rule in existing):
                raise ValidationError("This time slot overlaps with existing availability")

            rule = AvailabilityRule(
                user_id=user_id,
                day_of_week=request.day_of_week,
                start_time=request.start_time,
                end_time=request.end_time
            )
            db.add(rule)
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(rule)
        return AvailabilityService._serialize_rule(rule)

    @staticmethod
    def list_rules(db: Session, user_id: UUID) -> List[Dict]:
        rules = db.query(AvailabilityRule).filter(
            AvailabilityRule.user_id == user_id
        ).order_by(AvailabilityRule.day_of_week, AvailabilityRule.start_time).all()

        return [AvailabilityService._serialize_rule(rule) for rule in rules]

    @staticmethod
    def delete_rule(db: Session, user_id: UUID, rule_id: UUID) -> bool:
        """Returns False when the rule does not exist or belongs to someone else"""
        rule = db.query(AvailabilityRule).filter(
            AvailabilityRule.id == rule_id,
            AvailabilityRule.user_id == user_id
        ).first()

        if not rule:
            return False

        db.delete(rule)
        db.commit()
        return True

    @staticmethod
    def replace_rules(db: Session, user_id: UUID, requests: Sequence[AvailabilityRuleCreate]) -> List[Dict]:
        """
        Replace the user's whole weekly schedule.

        The submitted set is validated up front (ranges, and overlaps within the
        set); the delete and the inserts then run in a single transaction, so
        concurrent readers see either the old schedule or the new one.
        """
        for request in requests:
            AvailabilityService._validate_window(request)

        by_day: Dict[int, List[AvailabilityRuleCreate]] = {}
        for request in requests:
            by_day.setdefault(request.day_of_week, []).append(request)

        for day, windows in by_day.items():
            windows = sorted(windows, key=lambda w: w.start_time)
            for previous, current in zip(windows, windows[1:]):
                if overlaps(previous.start_time, previous.end_time, current.start_time, current.end_time):
                    raise ValidationError(f"Overlapping availability on {day_name(day)}")

        try:
            AvailabilityService._lock_user(db, user_id)

            db.query(AvailabilityRule).filter(
                AvailabilityRule.user_id == user_id
            ).delete(synchronize_session=False)

            for request in requests:
                db.add(AvailabilityRule(
                    user_id=user_id,
                    day_of_week=request.day_of_week,
                    start_time=request.start_time,
                    end_time=request.end_time
                ))

            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info(f"Replaced availability for user {user_id} with {len(requests)} rule(s)")
        return AvailabilityService.list_rules(db, user_id)

    @staticmethod
    def _validate_window(request: AvailabilityRuleCreate):
        if not 0 <= request.day_of_week <= 6:
            raise ValidationError("day_of_week must be between 0 (Sunday) and 6 (Saturday)")
        if request.start_time >= request.end_time:
            raise ValidationError(f"Invalid time range for {day_name(request.day_of_week)}: start must be before end")

    @staticmethod
    def _lock_user(db: Session, user_id: UUID) -> Optional[User]:
        """Serialize schedule writers for one user (row lock where the database supports it)"""
        return db.query(User).filter(User.id == user_id).with_for_update().first()

    @staticmethod
    def _serialize_rule(rule: AvailabilityRule) -> Dict:
        return {
            "id": str(rule.id),
            "user_id": str(rule.user_id),
            "day_of_week": rule.day_of_week,
            "day_of_week_name": day_name(rule.day_of_week),
            "start_time": rule.start_time.isoformat(),
            "end_time": rule.end_time.isoformat(),
            "created_at": rule.created_at.isoformat() if rule.created_at else None,
            "updated_at": rule.updated_at.isoformat() if rule.updated_at else None,
        }

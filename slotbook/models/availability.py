# ===== slotbook/models/availability.py =====
from sqlalchemy import Column, Integer, Time, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from slotbook.models.base import Base
import uuid


class AvailabilityRule(Base):
    """Recurring weekly window during which a user accepts bookings"""
    __tablename__ = "availability_rules"
    __table_args__ = (
        CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_availability_rules_day_of_week"),
        CheckConstraint("start_time < end_time", name="ck_availability_rules_time_range"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    day_of_week = Column(Integer, nullable=False)  # 0=Sunday, 6=Saturday
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="availability_rules")

    def __repr__(self):
        return f"<AvailabilityRule(user_id={self.user_id}, day={self.day_of_week}, {self.start_time}-{self.end_time})>"

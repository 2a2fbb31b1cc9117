# ===== slotbook/models/event_type.py =====
from sqlalchemy import Column, String, Integer, Text, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from slotbook.models.base import Base
import uuid


class EventType(Base):
    """Bookable meeting template owned by a user"""
    __tablename__ = "event_types"
    __table_args__ = (
        UniqueConstraint("user_id", "slug", name="uq_event_types_user_slug"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(100), nullable=False)
    slug = Column(String(100), nullable=False)  # lowercase, unique per user
    description = Column(Text, nullable=True)

    duration_minutes = Column(Integer, nullable=False, default=30)
    location = Column(String(50), nullable=False, default="Online")  # Online, In-person, Phone
    location_details = Column(String(500), nullable=True)  # meeting link, address, etc.
    color = Column(String(7), nullable=False, default="#3b82f6")

    # Advanced settings
    buffer_minutes = Column(Integer, nullable=False, default=0)  # before and after each meeting
    min_notice_hours = Column(Integer, nullable=False, default=24)
    max_days_in_advance = Column(Integer, nullable=False, default=60)

    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="event_types")
    bookings = relationship(
        "Booking",
        back_populates="event_type",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<EventType(slug={self.slug}, duration={self.duration_minutes})>"

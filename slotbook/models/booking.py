# ===== slotbook/models/booking.py =====
from sqlalchemy import DDL, Column, String, Text, DateTime, ForeignKey, CheckConstraint, event
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from slotbook.models.base import Base
import uuid


class BookingStatus:
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    CANCELLED = "Cancelled"
    NO_SHOW = "NoShow"
    COMPLETED = "Completed"

    ALL = (PENDING, CONFIRMED, CANCELLED, NO_SHOW, COMPLETED)


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_bookings_time_range"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    event_type_id = Column(UUID(as_uuid=True), ForeignKey("event_types.id", ondelete="CASCADE"), nullable=False, index=True)

    # Guest info
    guest_name = Column(String(255), nullable=False)
    guest_email = Column(String(255), nullable=False)
    guest_phone = Column(String(20), nullable=True)
    notes = Column(Text, nullable=True)

    # Naive UTC, fixed once the booking exists
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False)

    status = Column(String(50), nullable=False, default=BookingStatus.CONFIRMED)
    cancellation_reason = Column(Text, nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    # Calendar sync
    external_event_id = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    event_type = relationship("EventType", back_populates="bookings")

    @property
    def is_cancelled(self) -> bool:
        return self.status == BookingStatus.CANCELLED

    def __repr__(self):
        return f"<Booking(id={self.id}, start={self.start_time}, status={self.status})>"


# No two live bookings of one event type may overlap. Needs btree_gist; the
# alembic migration adds the same constraint for migrated databases.
NO_OVERLAP_CONSTRAINT = DDL(
    "ALTER TABLE bookings "
    "ADD CONSTRAINT ex_bookings_no_overlap "
    "EXCLUDE USING gist ("
    "event_type_id WITH =, "
    "tsrange(start_time, end_time, '[)') WITH &&"
    f") WHERE (status <> '{BookingStatus.CANCELLED}')"
)

event.listen(Booking.__table__, "after_create", NO_OVERLAP_CONSTRAINT.execute_if(dialect="postgresql"))

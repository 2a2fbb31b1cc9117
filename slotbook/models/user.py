# ============================================================================
# FILE: slotbook/models/user.py
# Account that owns availability rules, event types and a calendar link
# ============================================================================
from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from passlib.context import CryptContext
import uuid
from slotbook.models.base import Base

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class User(Base):
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)
    username = Column(String(50), unique=True, nullable=False, index=True)  # always lowercase
    hashed_password = Column(String(255), nullable=False)
    full_name = Column(String(100), nullable=False, default="")

    is_active = Column(Boolean, default=True, nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    availability_rules = relationship(
        "AvailabilityRule",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    event_types = relationship(
        "EventType",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    calendar_integration = relationship(
        "CalendarIntegration",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )

    def verify_password(self, plain_password: str) -> bool:
        """Verify a plain password against the hashed password."""
        return pwd_context.verify(plain_password, self.hashed_password)

    @staticmethod
    def hash_password(plain_password: str) -> str:
        """Hash a plain password."""
        return pwd_context.hash(plain_password)

    def __repr__(self):
        return f"<User {self.username}>"

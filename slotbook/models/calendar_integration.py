# ===== slotbook/models/calendar_integration.py =====
from sqlalchemy import Column, String, Boolean, DateTime, LargeBinary, ForeignKey, JSON
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from slotbook.models.base import Base
import uuid


class CalendarIntegration(Base):
    """External calendar link; at most one per user"""
    __tablename__ = "calendar_integrations"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)

    provider = Column(String(50), nullable=False, default="google")
    is_active = Column(Boolean, nullable=False, default=True)

    # OAuth tokens, Fernet-encrypted
    access_token_encrypted = Column(LargeBinary, nullable=False)
    refresh_token_encrypted = Column(LargeBinary, nullable=True)
    token_expires_at = Column(DateTime(timezone=True), nullable=False)

    account_email = Column(String(255), nullable=True)
    calendar_id = Column(String(255), nullable=True)  # defaults to 'primary'

    # Provider-specific config: calendar_list, busy_calendar_ids
    provider_config = Column(JSON, default=dict)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="calendar_integration")

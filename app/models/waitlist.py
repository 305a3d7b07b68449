"""Walk-in waitlist model"""

import uuid
import enum
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.database import Base


class WaitlistStatus(str, enum.Enum):
    WAITING = "waiting"
    NOTIFIED = "notified"
    SEATED = "seated"
    LEFT = "left"
    CANCELLED = "cancelled"


class WaitlistPriority(str, enum.Enum):
    NORMAL = "normal"
    VIP = "vip"


QUEUED_STATUSES = (WaitlistStatus.WAITING.value, WaitlistStatus.NOTIFIED.value)
TERMINAL_STATUSES = (
    WaitlistStatus.SEATED.value,
    WaitlistStatus.LEFT.value,
    WaitlistStatus.CANCELLED.value,
)


class WaitlistEntry(Base):
    """Walk-in party waiting for a table"""
    __tablename__ = "waitlist_entries"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    restaurant_id = Column(UUID(as_uuid=True), ForeignKey("restaurants.id"), nullable=False, index=True)

    # Party
    name = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=False)
    party_size = Column(Integer, nullable=False)
    notes = Column(Text)

    status = Column(String(20), nullable=False, default=WaitlistStatus.WAITING.value)
    priority = Column(String(10), nullable=False, default=WaitlistPriority.NORMAL.value)
    estimated_wait_minutes = Column(Integer)

    # Set when the party is seated
    table_id = Column(UUID(as_uuid=True), ForeignKey("tables.id"))

    notified_at = Column(DateTime)
    seated_at = Column(DateTime)
    removed_at = Column(DateTime)  # soft delete
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    restaurant = relationship("Restaurant", back_populates="waitlist_entries")

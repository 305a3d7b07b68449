"""Reservation model"""

import uuid
import enum
from datetime import datetime
from sqlalchemy import (
    Column, String, Integer, Boolean, Date, DateTime, Time, ForeignKey, Text, Index, text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.database import Base


class ReservationStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    ARRIVED = "arrived"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


# Statuses that free the slot for a new booking
INACTIVE_STATUSES = (ReservationStatus.CANCELLED.value, ReservationStatus.NO_SHOW.value)

# Statuses that block a table in the availability view
BLOCKING_STATUSES = (
    ReservationStatus.PENDING.value,
    ReservationStatus.CONFIRMED.value,
    ReservationStatus.ARRIVED.value,
)

FINISHED_STATUSES = (
    ReservationStatus.COMPLETED.value,
    ReservationStatus.CANCELLED.value,
    ReservationStatus.NO_SHOW.value,
)

_ACTIVE_SLOT_PREDICATE = text("status NOT IN ('cancelled', 'no_show')")


class Reservation(Base):
    """Table reservations"""
    __tablename__ = "reservations"
    __table_args__ = (
        # At most one active reservation per table slot, enforced by the database
        Index(
            "uq_reservations_active_slot",
            "table_id",
            "reservation_date",
            "reservation_time",
            unique=True,
            postgresql_where=_ACTIVE_SLOT_PREDICATE,
            sqlite_where=_ACTIVE_SLOT_PREDICATE,
        ),
        Index("ix_reservations_restaurant_date", "restaurant_id", "reservation_date"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    restaurant_id = Column(UUID(as_uuid=True), ForeignKey("restaurants.id"), nullable=False)
    customer_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    table_id = Column(UUID(as_uuid=True), ForeignKey("tables.id"), nullable=False)

    # Slot
    reservation_date = Column(Date, nullable=False)
    reservation_time = Column(Time, nullable=False)
    guest_count = Column(Integer, nullable=False)

    # Status
    status = Column(String(20), nullable=False, default=ReservationStatus.PENDING.value)

    # Details
    occasion = Column(String(100))
    special_request = Column(Text)
    code = Column(String(32), unique=True, nullable=False)

    # Deposit
    deposit_amount_cents = Column(Integer, default=0)
    deposit_paid = Column(Boolean, default=False, nullable=False)
    deposit_paid_at = Column(DateTime)
    payment_reference = Column(String(255))

    # Lifecycle stamps
    arrived_at = Column(DateTime)
    completed_at = Column(DateTime)
    cancelled_at = Column(DateTime)
    cancelled_by = Column(UUID(as_uuid=True))
    cancellation_reason = Column(Text)

    # SMS reminder
    reminder_sent_at = Column(DateTime)

    # Metadata
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    restaurant = relationship("Restaurant", back_populates="reservations")
    table = relationship("Table", back_populates="reservations")
    customer = relationship("User", back_populates="reservations")

    @property
    def is_active(self) -> bool:
        return self.status not in INACTIVE_STATUSES

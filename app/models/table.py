"""Dining table model"""

import uuid
import enum
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.database import Base


class TableStatus(str, enum.Enum):
    """Cached display status of a physical table"""
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    RESERVED = "reserved"
    PENDING = "pending"
    DISABLED = "disabled"


class Table(Base):
    """Physical table in a restaurant.

    ``status`` is a convenience cache for the floor map. Bookability is
    decided from the reservations, never from this column.
    """
    __tablename__ = "tables"
    __table_args__ = (
        UniqueConstraint("restaurant_id", "number", name="uq_tables_restaurant_number"),
        CheckConstraint("capacity >= 1", name="ck_tables_capacity_positive"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    restaurant_id = Column(UUID(as_uuid=True), ForeignKey("restaurants.id"), nullable=False, index=True)

    number = Column(Integer, nullable=False)
    capacity = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default=TableStatus.AVAILABLE.value)
    zone = Column(String(50), default="main")

    # Floor map layout
    shape = Column(String(20), default="round")  # round, square, rectangle
    position_x = Column(Integer, default=0)
    position_y = Column(Integer, default=0)
    width = Column(Integer, default=80)
    height = Column(Integer, default=80)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    restaurant = relationship("Restaurant", back_populates="tables")
    reservations = relationship("Reservation", back_populates="table")

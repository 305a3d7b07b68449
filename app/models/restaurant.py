"""Restaurant-related models"""

import uuid
from datetime import datetime, time
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Integer, Text, Time
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.database import Base

SETTINGS_DEFAULTS = {
    "open_time": time(12, 0),
    "close_time": time(23, 0),
    "peak_start_hour": 19,
    "peak_end_hour": 21,
    "deposit_amount_cents": 20000,
    "seating_duration_minutes": 120,
    "default_wait_minutes": 15,
    "max_party_size": 12,
}


class Restaurant(Base):
    """Restaurant using the platform"""
    __tablename__ = "restaurants"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    timezone = Column(String(50), default="America/Mexico_City")
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    settings = relationship("RestaurantSettings", back_populates="restaurant", uselist=False)
    staff_contacts = relationship("StaffContact", back_populates="restaurant")
    tables = relationship("Table", back_populates="restaurant")
    reservations = relationship("Reservation", back_populates="restaurant")
    waitlist_entries = relationship("WaitlistEntry", back_populates="restaurant")
    users = relationship("User", back_populates="restaurant")


class RestaurantSettings(Base):
    """Restaurant-specific settings"""
    __tablename__ = "restaurant_settings"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    restaurant_id = Column(UUID(as_uuid=True), ForeignKey("restaurants.id"), unique=True, nullable=False)

    # Business information
    address = Column(Text)
    city = Column(String(100))
    phone = Column(String(20))

    # Opening hours
    open_time = Column(Time, default=SETTINGS_DEFAULTS["open_time"])
    close_time = Column(Time, default=SETTINGS_DEFAULTS["close_time"])

    # Deposits are required for slots inside the peak window (inclusive hours)
    peak_start_hour = Column(Integer, default=SETTINGS_DEFAULTS["peak_start_hour"])
    peak_end_hour = Column(Integer, default=SETTINGS_DEFAULTS["peak_end_hour"])
    deposit_amount_cents = Column(Integer, default=SETTINGS_DEFAULTS["deposit_amount_cents"])

    # A reservation blocks its table this many minutes either side of its time
    seating_duration_minutes = Column(Integer, default=SETTINGS_DEFAULTS["seating_duration_minutes"])

    # Waitlist
    default_wait_minutes = Column(Integer, default=SETTINGS_DEFAULTS["default_wait_minutes"])

    max_party_size = Column(Integer, default=SETTINGS_DEFAULTS["max_party_size"])

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    restaurant = relationship("Restaurant", back_populates="settings")

    def __init__(self, **kwargs):
        # Column defaults only apply on INSERT; unsaved settings need them too
        for key, value in SETTINGS_DEFAULTS.items():
            kwargs.setdefault(key, value)
        super().__init__(**kwargs)

    def is_peak(self, hour: int) -> bool:
        return self.peak_start_hour <= hour <= self.peak_end_hour


class StaffContact(Base):
    """Staff contacts for notifications"""
    __tablename__ = "staff_contacts"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    restaurant_id = Column(UUID(as_uuid=True), ForeignKey("restaurants.id"), nullable=False)
    name = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=False)
    email = Column(String(255))
    role = Column(String(50))  # manager, host
    notify_on_reservation = Column(Boolean, default=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    restaurant = relationship("Restaurant", back_populates="staff_contacts")

"""Restaurant schemas"""

from datetime import datetime, time
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, Field


class RestaurantCreate(BaseModel):
    """Create restaurant request"""
    name: str
    timezone: str = "America/Mexico_City"


class RestaurantUpdate(BaseModel):
    """Update restaurant request"""
    name: Optional[str] = None
    timezone: Optional[str] = None
    is_active: Optional[bool] = None


class RestaurantResponse(BaseModel):
    """Restaurant response"""
    id: UUID
    name: str
    timezone: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class RestaurantSettingsUpdate(BaseModel):
    """Update restaurant settings"""
    address: Optional[str] = None
    city: Optional[str] = None
    phone: Optional[str] = None
    open_time: Optional[time] = None
    close_time: Optional[time] = None
    peak_start_hour: Optional[int] = Field(None, ge=0, le=23)
    peak_end_hour: Optional[int] = Field(None, ge=0, le=23)
    deposit_amount_cents: Optional[int] = Field(None, ge=0)
    seating_duration_minutes: Optional[int] = Field(None, ge=0)
    default_wait_minutes: Optional[int] = Field(None, ge=0)
    max_party_size: Optional[int] = Field(None, ge=1)


class RestaurantSettingsResponse(BaseModel):
    """Restaurant settings response"""
    restaurant_id: UUID
    address: Optional[str] = None
    city: Optional[str] = None
    phone: Optional[str] = None
    open_time: time
    close_time: time
    peak_start_hour: int
    peak_end_hour: int
    deposit_amount_cents: int
    seating_duration_minutes: int
    default_wait_minutes: int
    max_party_size: int

    class Config:
        from_attributes = True


class TimeSlotResponse(BaseModel):
    """Bookable time slot"""
    time: time
    is_peak: bool
    requires_deposit: bool
    deposit_amount_cents: int

    class Config:
        from_attributes = True


class DashboardResponse(BaseModel):
    """Staff dashboard counters"""
    reservations_today: int
    pending_reservations: int
    occupied_tables: int
    total_tables: int
    occupancy_percent: int
    deposit_income_cents: int

"""Waitlist schemas"""

from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, Field

from app.models.waitlist import WaitlistStatus, WaitlistPriority


class WaitlistEntryCreate(BaseModel):
    """Add a walk-in party"""
    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    party_size: int = Field(..., ge=1)
    notes: Optional[str] = None
    priority: WaitlistPriority = WaitlistPriority.NORMAL
    estimated_wait_minutes: Optional[int] = Field(None, ge=0)


class WaitlistStatusUpdate(BaseModel):
    """Move an entry along the queue"""
    status: WaitlistStatus
    table_id: Optional[UUID] = None


class WaitlistEntryResponse(BaseModel):
    """Waitlist entry response"""
    id: UUID
    restaurant_id: UUID
    name: str
    phone: str
    party_size: int
    notes: Optional[str]
    status: WaitlistStatus
    priority: WaitlistPriority
    estimated_wait_minutes: Optional[int]
    table_id: Optional[UUID]
    notified_at: Optional[datetime]
    seated_at: Optional[datetime]
    created_at: datetime

    class Config:
        from_attributes = True


class WaitlistSummary(BaseModel):
    """Today's waitlist counts"""
    waiting: int
    notified: int
    seated: int
    total: int

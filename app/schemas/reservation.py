"""Reservation schemas"""

from datetime import date, datetime, time
from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel, Field

from app.models.reservation import ReservationStatus


class ReservationCreate(BaseModel):
    """Create reservation request"""
    restaurant_id: UUID
    table_id: UUID
    reservation_date: date
    reservation_time: time
    guest_count: int
    occasion: Optional[str] = None
    special_request: Optional[str] = None


class ReservationStatusUpdate(BaseModel):
    """Staff status change"""
    status: ReservationStatus


class ReservationCancel(BaseModel):
    """Cancellation request"""
    reason: Optional[str] = None


class DepositRecord(BaseModel):
    """Deposit reported as paid by the payment provider"""
    amount_cents: int = Field(..., gt=0)
    payment_reference: Optional[str] = None


class ReservationResponse(BaseModel):
    """Reservation response"""
    id: UUID
    restaurant_id: UUID
    customer_id: UUID
    table_id: UUID
    code: str
    reservation_date: date
    reservation_time: time
    guest_count: int
    status: ReservationStatus
    occasion: Optional[str]
    special_request: Optional[str]
    deposit_amount_cents: int
    deposit_paid: bool
    deposit_paid_at: Optional[datetime]
    payment_reference: Optional[str]
    arrived_at: Optional[datetime]
    completed_at: Optional[datetime]
    cancelled_at: Optional[datetime]
    cancellation_reason: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ReservationListResponse(BaseModel):
    """Paginated reservation list"""
    items: List[ReservationResponse]
    total: int
    page: int
    page_size: int

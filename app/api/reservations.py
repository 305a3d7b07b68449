"""Reservation API endpoints"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.reservation import ReservationStatus
from app.models.user import User
from app.schemas.reservation import (
    ReservationCreate,
    ReservationStatusUpdate,
    ReservationCancel,
    DepositRecord,
    ReservationResponse,
    ReservationListResponse,
)
from app.api.auth import get_current_active_user, verify_restaurant_access
from app.services import reservation_service

# Mounted at /reservations
router = APIRouter()

# Mounted at /restaurants/{restaurant_id}/reservations
restaurant_router = APIRouter()


@restaurant_router.get("", response_model=ReservationListResponse)
async def list_restaurant_reservations(
    restaurant_id: UUID,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    status: Optional[ReservationStatus] = None,
    date: Optional[str] = Query(None, description="today, tomorrow or YYYY-MM-DD"),
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """List a restaurant's reservations with pagination"""
    await verify_restaurant_access(restaurant_id, current_user)

    items, total = await reservation_service.list_restaurant_reservations(
        db, restaurant_id, date_filter=date, status=status, page=page, page_size=page_size
    )
    return ReservationListResponse(
        items=items,
        total=total,
        page=page,
        page_size=page_size,
    )


@router.post("", response_model=ReservationResponse, status_code=201)
async def create_reservation(
    reservation_data: ReservationCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Book a table"""
    return await reservation_service.create_reservation(
        db,
        current_user,
        restaurant_id=reservation_data.restaurant_id,
        table_id=reservation_data.table_id,
        reservation_date=reservation_data.reservation_date,
        reservation_time=reservation_data.reservation_time,
        guest_count=reservation_data.guest_count,
        occasion=reservation_data.occasion,
        special_request=reservation_data.special_request,
    )


@router.get("/my", response_model=List[ReservationResponse])
async def list_my_reservations(
    status: Optional[ReservationStatus] = None,
    upcoming: bool = False,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """The current user's reservations, newest first"""
    return await reservation_service.list_customer_reservations(
        db, current_user.id, status=status, upcoming=upcoming
    )


@router.get("/{reservation_id}", response_model=ReservationResponse)
async def get_reservation(
    reservation_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Get reservation details"""
    return await reservation_service.get_reservation(db, reservation_id, current_user)


@router.patch("/{reservation_id}/status", response_model=ReservationResponse)
async def update_reservation_status(
    reservation_id: UUID,
    status_data: ReservationStatusUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Move a reservation along its lifecycle"""
    return await reservation_service.update_status(
        db, reservation_id, status_data.status, current_user
    )


@router.post("/{reservation_id}/cancel", response_model=ReservationResponse)
async def cancel_reservation(
    reservation_id: UUID,
    cancel_data: Optional[ReservationCancel] = None,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Cancel a reservation"""
    return await reservation_service.cancel_reservation(
        db, reservation_id, current_user, reason=cancel_data.reason if cancel_data else None
    )


@router.post("/{reservation_id}/arrive", response_model=ReservationResponse)
async def mark_arrived(
    reservation_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Check in the party"""
    return await reservation_service.mark_arrived(db, reservation_id, current_user)


@router.post("/{reservation_id}/deposit", response_model=ReservationResponse)
async def record_deposit(
    reservation_id: UUID,
    deposit_data: DepositRecord,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Record a paid deposit"""
    return await reservation_service.record_deposit(
        db,
        reservation_id,
        deposit_data.amount_cents,
        current_user,
        payment_reference=deposit_data.payment_reference,
    )

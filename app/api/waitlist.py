"""Walk-in waitlist API endpoints"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.user import User
from app.models.waitlist import WaitlistStatus
from app.schemas.waitlist import (
    WaitlistEntryCreate,
    WaitlistStatusUpdate,
    WaitlistEntryResponse,
    WaitlistSummary,
)
from app.api.auth import get_current_active_user, verify_restaurant_access
from app.services import waitlist_service

router = APIRouter()


@router.get("", response_model=List[WaitlistEntryResponse])
async def list_waitlist(
    restaurant_id: UUID,
    status: Optional[WaitlistStatus] = None,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Waiting parties in serving order"""
    await verify_restaurant_access(restaurant_id, current_user)
    return await waitlist_service.list_queue(db, restaurant_id, status=status)


@router.get("/summary", response_model=WaitlistSummary)
async def get_waitlist_summary(
    restaurant_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Today's waitlist counts"""
    await verify_restaurant_access(restaurant_id, current_user)
    return await waitlist_service.summary(db, restaurant_id)


@router.post("", response_model=WaitlistEntryResponse, status_code=status.HTTP_201_CREATED)
async def add_to_waitlist(
    restaurant_id: UUID,
    entry_data: WaitlistEntryCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Add a walk-in party"""
    await verify_restaurant_access(restaurant_id, current_user)
    return await waitlist_service.add_entry(
        db, restaurant_id, actor=current_user, **entry_data.model_dump()
    )


@router.patch("/{entry_id}/status", response_model=WaitlistEntryResponse)
async def update_waitlist_status(
    restaurant_id: UUID,
    entry_id: UUID,
    status_data: WaitlistStatusUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Notify, seat or drop a waiting party"""
    await verify_restaurant_access(restaurant_id, current_user)
    return await waitlist_service.update_entry_status(
        db,
        entry_id,
        restaurant_id,
        status_data.status,
        actor=current_user,
        table_id=status_data.table_id,
    )


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_from_waitlist(
    restaurant_id: UUID,
    entry_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Remove a party from the waitlist"""
    await verify_restaurant_access(restaurant_id, current_user)
    await waitlist_service.remove_entry(db, entry_id, restaurant_id, actor=current_user)

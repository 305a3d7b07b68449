"""Table management and availability API endpoints"""

from datetime import date, time
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.table import TableStatus
from app.models.user import User, UserRole
from app.schemas.table import (
    TableCreate,
    TableUpdate,
    TableStatusUpdate,
    TableResponse,
    TableAvailabilityResponse,
)
from app.api.auth import get_current_active_user, verify_restaurant_access, verify_restaurant_admin
from app.services import availability_service, table_service

router = APIRouter()

# Statuses plain staff may set from the floor view
STAFF_SETTABLE_STATUSES = (TableStatus.AVAILABLE, TableStatus.OCCUPIED)


@router.get("", response_model=List[TableResponse])
async def list_tables(
    restaurant_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """List tables ordered by number"""
    await verify_restaurant_access(restaurant_id, current_user)
    return await table_service.list_tables(db, restaurant_id)


@router.post("", response_model=TableResponse, status_code=status.HTTP_201_CREATED)
async def create_table(
    restaurant_id: UUID,
    table_data: TableCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Add a table to the floor plan"""
    await verify_restaurant_admin(restaurant_id, current_user)
    return await table_service.create_table(db, restaurant_id, **table_data.model_dump())


@router.get("/available", response_model=List[TableAvailabilityResponse])
async def get_available_tables(
    restaurant_id: UUID,
    on_date: date = Query(..., alias="date"),
    at_time: time = Query(..., alias="time"),
    guests: int = Query(..., ge=1),
    db: AsyncSession = Depends(get_db),
):
    """Tables that fit the party, labelled for the requested slot"""
    labelled = await availability_service.get_available_tables(
        db, restaurant_id, on_date, at_time, guests
    )
    return [
        TableAvailabilityResponse(
            **TableResponse.model_validate(item.table).model_dump(),
            availability_status=item.availability_status,
            is_selectable=item.is_selectable,
        )
        for item in labelled
    ]


@router.get("/{table_id}", response_model=TableResponse)
async def get_table(
    restaurant_id: UUID,
    table_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Get table details"""
    await verify_restaurant_access(restaurant_id, current_user)
    return await table_service.get_table(db, table_id, restaurant_id)


@router.put("/{table_id}", response_model=TableResponse)
async def update_table(
    restaurant_id: UUID,
    table_id: UUID,
    table_data: TableUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Update table layout, capacity or zone"""
    await verify_restaurant_admin(restaurant_id, current_user)
    return await table_service.update_table(
        db, table_id, restaurant_id, **table_data.model_dump(exclude_unset=True)
    )


@router.delete("/{table_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_table(
    restaurant_id: UUID,
    table_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete a table without reservation history"""
    await verify_restaurant_admin(restaurant_id, current_user)
    await table_service.delete_table(db, table_id, restaurant_id)


@router.patch("/{table_id}/status", response_model=TableResponse)
async def set_table_status(
    restaurant_id: UUID,
    table_id: UUID,
    status_data: TableStatusUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Override a table's status from the floor view"""
    await verify_restaurant_access(restaurant_id, current_user)

    if (
        not current_user.has_permission(UserRole.RESTAURANT_ADMIN)
        and status_data.status not in STAFF_SETTABLE_STATUSES
    ):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Staff can only mark tables available or occupied",
        )

    # Scope check before the unconditional write
    await table_service.get_table(db, table_id, restaurant_id)
    return await table_service.set_status(db, table_id, status_data.status, actor=current_user)

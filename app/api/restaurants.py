"""Restaurant management API endpoints"""

from datetime import date
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.database import get_db, commit
from app.models.restaurant import Restaurant, RestaurantSettings
from app.models.user import User, UserRole
from app.schemas.auth import UserCreate, UserResponse
from app.schemas.restaurant import (
    RestaurantCreate,
    RestaurantUpdate,
    RestaurantResponse,
    RestaurantSettingsUpdate,
    RestaurantSettingsResponse,
    TimeSlotResponse,
    DashboardResponse,
)
from app.api.auth import (
    get_current_active_user,
    get_password_hash,
    require_role,
    verify_restaurant_access,
    verify_restaurant_admin,
)
from app.services import availability_service

router = APIRouter()
logger = structlog.get_logger()


@router.get("", response_model=List[RestaurantResponse])
async def list_restaurants(
    skip: int = 0,
    limit: int = 100,
    db: AsyncSession = Depends(get_db),
):
    """List active restaurants"""
    result = await db.execute(
        select(Restaurant)
        .where(Restaurant.is_active == True)
        .order_by(Restaurant.name)
        .offset(skip)
        .limit(limit)
    )
    return result.scalars().all()


@router.post("", response_model=RestaurantResponse, status_code=status.HTTP_201_CREATED)
async def create_restaurant(
    restaurant_data: RestaurantCreate,
    current_user: User = Depends(require_role(UserRole.SUPER_ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Create a new restaurant (SuperAdmin only)"""
    restaurant = Restaurant(**restaurant_data.model_dump())
    db.add(restaurant)
    await db.flush()

    # Create default settings
    db.add(RestaurantSettings(restaurant_id=restaurant.id))
    await commit(db)
    await db.refresh(restaurant)

    logger.info("Restaurant created", restaurant_id=str(restaurant.id))
    return restaurant


@router.get("/{restaurant_id}", response_model=RestaurantResponse)
async def get_restaurant(
    restaurant_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Get restaurant details"""
    restaurant = await db.get(Restaurant, restaurant_id)
    if not restaurant:
        raise HTTPException(status_code=404, detail="Restaurant not found")
    return restaurant


@router.put("/{restaurant_id}", response_model=RestaurantResponse)
async def update_restaurant(
    restaurant_id: UUID,
    restaurant_data: RestaurantUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Update restaurant"""
    await verify_restaurant_admin(restaurant_id, current_user)

    restaurant = await db.get(Restaurant, restaurant_id)
    if not restaurant:
        raise HTTPException(status_code=404, detail="Restaurant not found")

    for field, value in restaurant_data.model_dump(exclude_unset=True).items():
        setattr(restaurant, field, value)

    await commit(db)
    await db.refresh(restaurant)

    return restaurant


@router.get("/{restaurant_id}/settings", response_model=RestaurantSettingsResponse)
async def get_restaurant_settings(
    restaurant_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Get restaurant settings"""
    await verify_restaurant_access(restaurant_id, current_user)
    return await availability_service.get_restaurant_settings(db, restaurant_id)


@router.put("/{restaurant_id}/settings", response_model=RestaurantSettingsResponse)
async def update_restaurant_settings(
    restaurant_id: UUID,
    settings_data: RestaurantSettingsUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Update restaurant settings"""
    await verify_restaurant_admin(restaurant_id, current_user)

    settings = await availability_service.get_restaurant_settings(db, restaurant_id)
    updates = settings_data.model_dump(exclude_unset=True)

    peak_start = updates.get("peak_start_hour", settings.peak_start_hour)
    peak_end = updates.get("peak_end_hour", settings.peak_end_hour)
    if peak_start > peak_end:
        raise HTTPException(status_code=400, detail="peak_start_hour must not be after peak_end_hour")

    if settings.id is None:
        db.add(settings)

    for field, value in updates.items():
        setattr(settings, field, value)

    await commit(db)
    await db.refresh(settings)

    logger.info("Restaurant settings updated", restaurant_id=str(restaurant_id))
    return settings


@router.get("/{restaurant_id}/timeslots", response_model=List[TimeSlotResponse])
async def list_time_slots(
    restaurant_id: UUID,
    on_date: date = Query(..., alias="date"),
    db: AsyncSession = Depends(get_db),
):
    """Bookable slots for a day with their deposit requirement"""
    return await availability_service.get_time_slots(db, restaurant_id, on_date)


@router.get("/{restaurant_id}/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    restaurant_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Counters for the staff dashboard"""
    await verify_restaurant_access(restaurant_id, current_user)
    return await availability_service.get_dashboard(db, restaurant_id)


@router.post("/{restaurant_id}/staff", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_staff_user(
    restaurant_id: UUID,
    user_data: UserCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Create a staff or admin account for the restaurant"""
    await verify_restaurant_admin(restaurant_id, current_user)

    if user_data.role not in (UserRole.STAFF, UserRole.RESTAURANT_ADMIN):
        raise HTTPException(status_code=400, detail="Role must be staff or restaurant_admin")

    if await db.get(Restaurant, restaurant_id) is None:
        raise HTTPException(status_code=404, detail="Restaurant not found")

    result = await db.execute(select(User).where(User.email == user_data.email))
    if result.scalar_one_or_none():
        raise HTTPException(status_code=400, detail="Email already registered")

    user = User(
        email=user_data.email,
        hashed_password=get_password_hash(user_data.password),
        full_name=user_data.full_name,
        phone=user_data.phone,
        role=user_data.role,
        restaurant_id=restaurant_id,
    )
    db.add(user)
    await commit(db)
    await db.refresh(user)

    logger.info("Staff user created", restaurant_id=str(restaurant_id), user_id=str(user.id))
    return user

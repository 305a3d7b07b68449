"""Tests for double-booking protection"""

import asyncio
import pytest
from datetime import time
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from uuid import uuid4

from app.core.errors import Conflict
from app.database import Base
from app.models.reservation import Reservation, INACTIVE_STATUSES
from app.models.restaurant import Restaurant, RestaurantSettings
from app.models.table import Table
from app.models.user import User, UserRole
from app.services import reservation_service


async def active_count(db, table_id, on_date, at_time):
    return await db.scalar(
        select(func.count(Reservation.id)).where(
            Reservation.table_id == table_id,
            Reservation.reservation_date == on_date,
            Reservation.reservation_time == at_time,
            Reservation.status.not_in(INACTIVE_STATUSES),
        )
    )


@pytest.mark.asyncio
async def test_unique_index_rejects_duplicate_slot(
    test_db, test_restaurant, test_tables, test_customer, other_customer, booking_date, monkeypatch
):
    """With the window check out of the way the database still refuses a second active row"""
    async def no_blocking(*args, **kwargs):
        return None

    monkeypatch.setattr(reservation_service, "find_blocking_reservation", no_blocking)

    restaurant_id = test_restaurant.id
    table_id = test_tables[1].id
    at_time = time(18, 0)

    await reservation_service.create_reservation(
        test_db, test_customer,
        restaurant_id=restaurant_id, table_id=table_id,
        reservation_date=booking_date, reservation_time=at_time, guest_count=2,
    )

    with pytest.raises(Conflict):
        await reservation_service.create_reservation(
            test_db, other_customer,
            restaurant_id=restaurant_id, table_id=table_id,
            reservation_date=booking_date, reservation_time=at_time, guest_count=2,
        )

    assert await active_count(test_db, table_id, booking_date, at_time) == 1


@pytest.mark.asyncio
async def test_code_collision_is_regenerated(
    test_db, test_restaurant, test_tables, test_customer, booking_date, monkeypatch
):
    """A clashing code is replaced instead of failing the booking"""
    first = await reservation_service.create_reservation(
        test_db, test_customer,
        restaurant_id=test_restaurant.id, table_id=test_tables[0].id,
        reservation_date=booking_date, reservation_time=time(12, 0), guest_count=2,
    )
    taken_code = first.code
    restaurant_id = test_restaurant.id
    table_id = test_tables[2].id

    codes = iter([taken_code, "TB-000000000001"])
    monkeypatch.setattr(reservation_service, "generate_code", lambda: next(codes))

    second = await reservation_service.create_reservation(
        test_db, test_customer,
        restaurant_id=restaurant_id, table_id=table_id,
        reservation_date=booking_date, reservation_time=time(12, 0), guest_count=2,
    )
    assert second.code == "TB-000000000001"


@pytest.mark.asyncio
async def test_concurrent_creates_single_winner(tmp_path, booking_date):
    """Two simultaneous bookings of one slot from separate sessions: exactly one wins"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'race.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as db:
        restaurant = Restaurant(id=uuid4(), name="Race Bistro")
        db.add(restaurant)
        await db.flush()
        db.add(RestaurantSettings(restaurant_id=restaurant.id))
        table = Table(restaurant_id=restaurant.id, number=1, capacity=4)
        db.add(table)
        customers = [
            User(email=f"racer{i}@example.com", hashed_password="x", role=UserRole.CUSTOMER)
            for i in range(2)
        ]
        for customer in customers:
            db.add(customer)
        await db.commit()

    at_time = time(20, 0)

    async def attempt(customer):
        async with session_factory() as db:
            try:
                await reservation_service.create_reservation(
                    db, customer,
                    restaurant_id=restaurant.id, table_id=table.id,
                    reservation_date=booking_date, reservation_time=at_time, guest_count=2,
                )
                return "ok"
            except Conflict:
                return "conflict"

    outcomes = await asyncio.gather(*(attempt(customer) for customer in customers))
    assert sorted(outcomes) == ["conflict", "ok"]

    async with session_factory() as db:
        assert await active_count(db, table.id, booking_date, at_time) == 1

    await engine.dispose()

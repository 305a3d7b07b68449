"""
Availability query: which tables can be booked for a date, time and party size.

Read-only. The labels are computed from the reservation set; the cached
``Table.status`` only contributes the ``blocked`` label for disabled tables.
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Tuple
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFound
from app.models.restaurant import Restaurant, RestaurantSettings
from app.models.reservation import Reservation, ReservationStatus, BLOCKING_STATUSES
from app.models.table import Table, TableStatus

AVAILABLE = "available"
RESERVED = "reserved"
OCCUPIED = "occupied"
BLOCKED = "blocked"


@dataclass
class TableAvailability:
    table: Table
    availability_status: str

    @property
    def is_selectable(self) -> bool:
        return self.availability_status == AVAILABLE


@dataclass
class TimeSlot:
    time: time
    is_peak: bool
    requires_deposit: bool
    deposit_amount_cents: int


def within_window(reserved_at: datetime, requested: datetime, window_minutes: int) -> bool:
    """True when the two moments are closer than the seating window.

    A window of zero or less only matches the exact same moment.
    """
    if window_minutes <= 0:
        return reserved_at == requested
    return abs(reserved_at - requested) < timedelta(minutes=window_minutes)


def window_dates(on_date: date, window_minutes: int) -> Tuple[date, date]:
    """First and last reservation dates a window around ``on_date`` can reach"""
    span = timedelta(days=max(window_minutes, 0) // (24 * 60) + 1)
    return on_date - span, on_date + span


async def get_restaurant_settings(db: AsyncSession, restaurant_id: UUID) -> RestaurantSettings:
    """Settings for an existing restaurant, falling back to defaults"""
    restaurant = await db.get(Restaurant, restaurant_id)
    if restaurant is None:
        raise NotFound("Restaurant not found")

    result = await db.execute(
        select(RestaurantSettings).where(RestaurantSettings.restaurant_id == restaurant_id)
    )
    settings = result.scalar_one_or_none()
    return settings or RestaurantSettings(restaurant_id=restaurant_id)


async def blocking_reservations(
    db: AsyncSession,
    restaurant_id: UUID,
    on_date: date,
    at_time: time,
    window_minutes: int,
) -> Dict[UUID, Reservation]:
    """Active reservations near the requested time, keyed by table.

    The window crosses midnight, so neighbouring dates are searched too.
    When a table has more than one, an arrived party wins.
    """
    requested = datetime.combine(on_date, at_time)
    first_date, last_date = window_dates(on_date, window_minutes)
    result = await db.execute(
        select(Reservation).where(
            Reservation.restaurant_id == restaurant_id,
            Reservation.reservation_date.between(first_date, last_date),
            Reservation.status.in_(BLOCKING_STATUSES),
        )
    )
    by_table: Dict[UUID, Reservation] = {}
    for reservation in result.scalars().all():
        reserved_at = datetime.combine(reservation.reservation_date, reservation.reservation_time)
        if not within_window(reserved_at, requested, window_minutes):
            continue
        current = by_table.get(reservation.table_id)
        if current is None or reservation.status == ReservationStatus.ARRIVED.value:
            by_table[reservation.table_id] = reservation
    return by_table


def label_table(table: Table, reservation) -> str:
    if reservation is not None:
        if reservation.status == ReservationStatus.ARRIVED.value:
            return OCCUPIED
        return RESERVED
    if table.status == TableStatus.DISABLED.value:
        return BLOCKED
    return AVAILABLE


async def get_available_tables(
    db: AsyncSession,
    restaurant_id: UUID,
    on_date: date,
    at_time: time,
    guest_count: int,
) -> List[TableAvailability]:
    """Every table that fits the party, labelled for the requested slot"""
    settings = await get_restaurant_settings(db, restaurant_id)

    result = await db.execute(
        select(Table)
        .where(
            Table.restaurant_id == restaurant_id,
            Table.capacity >= guest_count,
        )
        .order_by(Table.number.asc())
    )
    tables = result.scalars().all()

    reservations = await blocking_reservations(
        db, restaurant_id, on_date, at_time, settings.seating_duration_minutes
    )

    return [
        TableAvailability(table=table, availability_status=label_table(table, reservations.get(table.id)))
        for table in tables
    ]


async def get_time_slots(db: AsyncSession, restaurant_id: UUID, on_date: date) -> List[TimeSlot]:
    """Hourly booking slots between opening and closing time"""
    settings = await get_restaurant_settings(db, restaurant_id)

    slots = []
    for hour in range(settings.open_time.hour, settings.close_time.hour):
        is_peak = settings.is_peak(hour)
        deposit = settings.deposit_amount_cents if is_peak else 0
        slots.append(TimeSlot(
            time=time(hour, 0),
            is_peak=is_peak,
            requires_deposit=deposit > 0,
            deposit_amount_cents=deposit,
        ))
    return slots


def deposit_for(settings: RestaurantSettings, at_time: time) -> int:
    """Deposit in cents required to book at the given time"""
    if settings.is_peak(at_time.hour):
        return settings.deposit_amount_cents or 0
    return 0


async def get_dashboard(db: AsyncSession, restaurant_id: UUID) -> dict:
    """Counters for the staff dashboard"""
    if await db.get(Restaurant, restaurant_id) is None:
        raise NotFound("Restaurant not found")

    today = date.today()
    month_start = datetime.combine(today.replace(day=1), time.min)

    reservations_today = await db.scalar(
        select(func.count(Reservation.id)).where(
            Reservation.restaurant_id == restaurant_id,
            Reservation.reservation_date == today,
            Reservation.status.in_(BLOCKING_STATUSES),
        )
    )
    pending = await db.scalar(
        select(func.count(Reservation.id)).where(
            Reservation.restaurant_id == restaurant_id,
            Reservation.status == ReservationStatus.PENDING.value,
        )
    )
    occupied = await db.scalar(
        select(func.count(Table.id)).where(
            Table.restaurant_id == restaurant_id,
            Table.status == TableStatus.OCCUPIED.value,
        )
    )
    total_tables = await db.scalar(
        select(func.count(Table.id)).where(Table.restaurant_id == restaurant_id)
    )
    deposit_income = await db.scalar(
        select(func.coalesce(func.sum(Reservation.deposit_amount_cents), 0)).where(
            Reservation.restaurant_id == restaurant_id,
            Reservation.deposit_paid == True,
            Reservation.deposit_paid_at >= month_start,
        )
    )

    return {
        "reservations_today": reservations_today or 0,
        "pending_reservations": pending or 0,
        "occupied_tables": occupied or 0,
        "total_tables": total_tables or 0,
        "occupancy_percent": round((occupied or 0) / total_tables * 100) if total_tables else 0,
        "deposit_income_cents": deposit_income or 0,
    }

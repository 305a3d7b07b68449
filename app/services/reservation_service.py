"""
Reservation lifecycle: booking, status transitions and their effect on tables.

Double booking is prevented at two levels:

* ``uq_reservations_active_slot``, a partial unique index on
  (table_id, reservation_date, reservation_time) over active rows, is the
  authoritative guard across workers. An insert that violates it becomes a
  Conflict.
* A per-table ``asyncio.Lock`` serializes check-and-insert inside one worker,
  so within a worker the seating-window check cannot race either. Across
  workers only the exact slot is guarded: two processes can still book
  overlapping but different times, such as 19:00 and 19:30.
"""
import asyncio
import secrets
import uuid
from collections import defaultdict
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.config import settings
from app.core.errors import (
    Conflict, Forbidden, InvalidState, InvalidTransition, NotFound, StorageError, ValidationFailed,
)
from app.database import commit
from app.models.audit import audit_entry
from app.models.reservation import (
    Reservation, ReservationStatus, INACTIVE_STATUSES, FINISHED_STATUSES,
)
from app.models.table import Table, TableStatus
from app.models.user import User
from app.services import availability_service, notification_service, table_service

logger = structlog.get_logger()

S = ReservationStatus

ALLOWED_TRANSITIONS: Dict[ReservationStatus, frozenset] = {
    S.PENDING: frozenset({S.CONFIRMED, S.CANCELLED, S.NO_SHOW}),
    S.CONFIRMED: frozenset({S.ARRIVED, S.CANCELLED, S.NO_SHOW}),
    S.ARRIVED: frozenset({S.COMPLETED}),
    S.COMPLETED: frozenset(),
    S.CANCELLED: frozenset(),
    S.NO_SHOW: frozenset(),
}

# Target statuses that hand an occupied table back
RELEASING_STATUSES = frozenset({S.COMPLETED, S.CANCELLED, S.NO_SHOW})

_table_locks: Dict[UUID, asyncio.Lock] = defaultdict(asyncio.Lock)


def generate_code() -> str:
    return f"{settings.reservation_code_prefix}-{secrets.token_hex(6).upper()}"


def can_transition(current: ReservationStatus, target: ReservationStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


async def _load(db: AsyncSession, reservation_id: UUID) -> Reservation:
    reservation = await db.get(Reservation, reservation_id)
    if reservation is None:
        raise NotFound("Reservation not found")
    return reservation


def _ensure_can_manage(actor: User, reservation: Reservation) -> None:
    if not actor.can_manage_restaurant(reservation.restaurant_id):
        raise Forbidden("Only staff of this restaurant can manage its reservations")


def _ensure_can_view(actor: User, reservation: Reservation) -> None:
    if reservation.customer_id != actor.id and not actor.can_manage_restaurant(reservation.restaurant_id):
        raise Forbidden("You do not have access to this reservation")


async def slot_taken(db: AsyncSession, table_id: UUID, on_date: date, at_time: time) -> bool:
    """Whether an active reservation holds exactly this table slot"""
    count = await db.scalar(
        select(func.count(Reservation.id)).where(
            Reservation.table_id == table_id,
            Reservation.reservation_date == on_date,
            Reservation.reservation_time == at_time,
            Reservation.status.not_in(INACTIVE_STATUSES),
        )
    )
    return bool(count)


async def find_blocking_reservation(
    db: AsyncSession,
    table_id: UUID,
    on_date: date,
    at_time: time,
    window_minutes: int,
) -> Optional[Reservation]:
    """An active reservation on the table within the seating window, if any"""
    requested = datetime.combine(on_date, at_time)
    first_date, last_date = availability_service.window_dates(on_date, window_minutes)
    result = await db.execute(
        select(Reservation).where(
            Reservation.table_id == table_id,
            Reservation.reservation_date.between(first_date, last_date),
            Reservation.status.not_in(INACTIVE_STATUSES),
        )
    )
    for reservation in result.scalars().all():
        reserved_at = datetime.combine(reservation.reservation_date, reservation.reservation_time)
        if availability_service.within_window(reserved_at, requested, window_minutes):
            return reservation
    return None


async def _release_table(db: AsyncSession, table_id: UUID) -> None:
    """Free the table only if it is occupied.

    Any other status was set by staff or by another booking and is left alone.
    """
    table = await db.get(Table, table_id)
    if table is not None and table.status == TableStatus.OCCUPIED.value:
        table.status = TableStatus.AVAILABLE.value
        await db.flush()


async def create_reservation(
    db: AsyncSession,
    actor: User,
    restaurant_id: UUID,
    table_id: UUID,
    reservation_date: date,
    reservation_time: time,
    guest_count: int,
    occasion: Optional[str] = None,
    special_request: Optional[str] = None,
) -> Reservation:
    """Book a table for the actor. The new reservation is ``pending``."""
    if guest_count is None or guest_count < 1:
        raise ValidationFailed("guest_count must be at least 1", field="guest_count")

    restaurant_settings = await availability_service.get_restaurant_settings(db, restaurant_id)
    max_party = restaurant_settings.max_party_size
    if max_party and guest_count > max_party:
        raise ValidationFailed(
            f"Parties larger than {max_party} must contact the restaurant",
            field="guest_count",
        )

    table = await db.get(Table, table_id)
    if table is None:
        raise NotFound("Table not found")
    if table.restaurant_id != restaurant_id:
        raise ValidationFailed("Table does not belong to this restaurant", field="table_id")
    if guest_count > table.capacity:
        raise ValidationFailed(
            f"Table {table.number} seats at most {table.capacity} guests", field="guest_count"
        )
    if table.status == TableStatus.DISABLED.value:
        raise InvalidState("This table is not available for booking")

    # A failed insert rolls the session back and expires every loaded object,
    # so everything needed afterwards is read now.
    window = restaurant_settings.seating_duration_minutes
    deposit = availability_service.deposit_for(restaurant_settings, reservation_time)
    reservation_id = uuid.uuid4()
    audit = audit_entry(
        "reservation_created", "reservation", reservation_id, restaurant_id, actor=actor,
        after={"status": S.PENDING.value, "table_id": str(table_id)},
    )
    customer_id = actor.id

    async with _table_locks[table_id]:
        blocking = await find_blocking_reservation(db, table_id, reservation_date, reservation_time, window)
        if blocking is not None:
            logger.info(
                "Reservation conflict",
                table_id=str(table_id),
                date=reservation_date.isoformat(),
                time=reservation_time.isoformat(),
                blocking_id=str(blocking.id),
            )
            raise Conflict()

        for _ in range(settings.reservation_code_attempts):
            reservation = Reservation(
                id=reservation_id,
                restaurant_id=restaurant_id,
                customer_id=customer_id,
                table_id=table_id,
                reservation_date=reservation_date,
                reservation_time=reservation_time,
                guest_count=guest_count,
                occasion=occasion or None,
                special_request=special_request or None,
                status=S.PENDING.value,
                deposit_amount_cents=deposit,
                deposit_paid=False,
                code=generate_code(),
            )
            db.add(reservation)
            try:
                await db.flush()
            except IntegrityError as e:
                await db.rollback()
                if await slot_taken(db, table_id, reservation_date, reservation_time):
                    logger.info("Reservation conflict on insert", table_id=str(table_id))
                    raise Conflict() from e
                logger.warning("Reservation code collision, regenerating", table_id=str(table_id))
                continue

            await table_service.set_status(db, table_id, TableStatus.PENDING, flush_only=True)
            db.add(audit)
            await commit(db)
            break
        else:
            raise StorageError("Could not allocate a reservation code")

    await db.refresh(reservation)

    logger.info(
        "Reservation created",
        reservation_id=str(reservation.id),
        code=reservation.code,
        table_id=str(table_id),
        date=reservation_date.isoformat(),
        time=reservation_time.isoformat(),
        guests=guest_count,
    )

    await notification_service.notify_reservation_created(db, reservation)
    return reservation


def _stamp(reservation: Reservation, status: ReservationStatus, actor: User) -> None:
    now = datetime.utcnow()
    reservation.status = status.value
    if status == S.ARRIVED:
        reservation.arrived_at = now
    elif status == S.COMPLETED:
        reservation.completed_at = now
    elif status == S.CANCELLED:
        reservation.cancelled_at = now
        reservation.cancelled_by = actor.id


async def update_status(
    db: AsyncSession,
    reservation_id: UUID,
    new_status: ReservationStatus,
    actor: User,
) -> Reservation:
    """Move a reservation along the lifecycle and cascade to its table"""
    reservation = await _load(db, reservation_id)
    _ensure_can_manage(actor, reservation)

    target = ReservationStatus(new_status)
    current = ReservationStatus(reservation.status)
    if not can_transition(current, target):
        raise InvalidTransition(current.value, target.value)

    _stamp(reservation, target, actor)

    if target == S.ARRIVED:
        await table_service.set_status(db, reservation.table_id, TableStatus.OCCUPIED, flush_only=True)
    elif target in RELEASING_STATUSES:
        await _release_table(db, reservation.table_id)

    db.add(audit_entry(
        "reservation_status_changed", "reservation", reservation.id, reservation.restaurant_id,
        actor=actor, before={"status": current.value}, after={"status": target.value},
    ))
    await commit(db)
    await db.refresh(reservation)

    logger.info(
        "Reservation status updated",
        reservation_id=str(reservation.id),
        previous=current.value,
        status=target.value,
    )
    return reservation


async def mark_arrived(db: AsyncSession, reservation_id: UUID, actor: User) -> Reservation:
    """Check in a confirmed party; the table becomes occupied"""
    return await update_status(db, reservation_id, S.ARRIVED, actor)


async def cancel_reservation(
    db: AsyncSession,
    reservation_id: UUID,
    actor: User,
    reason: Optional[str] = None,
) -> Reservation:
    """Cancel on behalf of the customer or restaurant staff"""
    reservation = await _load(db, reservation_id)

    if reservation.customer_id != actor.id and not actor.can_manage_restaurant(reservation.restaurant_id):
        raise Forbidden("You do not have permission to cancel this reservation")

    if reservation.status in FINISHED_STATUSES:
        raise InvalidState("This reservation cannot be cancelled")

    previous = reservation.status
    _stamp(reservation, S.CANCELLED, actor)
    reservation.cancellation_reason = reason or "No reason provided"

    await _release_table(db, reservation.table_id)

    db.add(audit_entry(
        "reservation_cancelled", "reservation", reservation.id, reservation.restaurant_id,
        actor=actor, before={"status": previous}, after={"status": S.CANCELLED.value},
        reason=reservation.cancellation_reason,
    ))
    await commit(db)
    await db.refresh(reservation)

    logger.info(
        "Reservation cancelled",
        reservation_id=str(reservation.id),
        previous=previous,
        by=str(actor.id),
    )
    return reservation


async def record_deposit(
    db: AsyncSession,
    reservation_id: UUID,
    amount_cents: int,
    actor: User,
    payment_reference: Optional[str] = None,
) -> Reservation:
    """Record a deposit the payment provider reported as paid.

    A pending reservation is confirmed by its deposit.
    """
    reservation = await _load(db, reservation_id)
    _ensure_can_manage(actor, reservation)

    if reservation.deposit_paid:
        raise InvalidState("Deposit already recorded for this reservation")
    if reservation.status in FINISHED_STATUSES:
        raise InvalidState("Cannot record a deposit on a finished reservation")
    if amount_cents is None or amount_cents <= 0:
        raise ValidationFailed("amount_cents must be positive", field="amount_cents")

    previous = reservation.status
    reservation.deposit_paid = True
    reservation.deposit_amount_cents = amount_cents
    reservation.deposit_paid_at = datetime.utcnow()
    reservation.payment_reference = payment_reference

    if reservation.status == S.PENDING.value:
        _stamp(reservation, S.CONFIRMED, actor)

    db.add(audit_entry(
        "reservation_deposit_recorded", "reservation", reservation.id, reservation.restaurant_id,
        actor=actor, before={"status": previous}, after={"status": reservation.status},
        amount_cents=amount_cents, payment_reference=payment_reference,
    ))
    await commit(db)
    await db.refresh(reservation)

    logger.info(
        "Reservation deposit recorded",
        reservation_id=str(reservation.id),
        amount_cents=amount_cents,
        status=reservation.status,
    )
    return reservation


async def get_reservation(db: AsyncSession, reservation_id: UUID, actor: User) -> Reservation:
    reservation = await _load(db, reservation_id)
    _ensure_can_view(actor, reservation)
    return reservation


async def list_customer_reservations(
    db: AsyncSession,
    customer_id: UUID,
    status: Optional[ReservationStatus] = None,
    upcoming: bool = False,
) -> List[Reservation]:
    """A customer's reservations, newest slot first"""
    query = select(Reservation).where(Reservation.customer_id == customer_id)

    if status:
        query = query.where(Reservation.status == ReservationStatus(status).value)

    if upcoming:
        query = query.where(Reservation.reservation_date >= date.today())

    query = query.order_by(Reservation.reservation_date.desc(), Reservation.reservation_time.desc())
    result = await db.execute(query)
    return list(result.scalars().all())


def resolve_date_filter(value: Optional[str]) -> Optional[date]:
    """'today', 'tomorrow' or an ISO date"""
    if not value:
        return None
    if value == "today":
        return date.today()
    if value == "tomorrow":
        return date.today() + timedelta(days=1)
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationFailed("date must be 'today', 'tomorrow' or YYYY-MM-DD", field="date")


async def list_restaurant_reservations(
    db: AsyncSession,
    restaurant_id: UUID,
    date_filter: Optional[str] = None,
    status: Optional[ReservationStatus] = None,
    page: int = 1,
    page_size: int = 20,
) -> Tuple[List[Reservation], int]:
    """Reservations for the staff view in service order"""
    query = select(Reservation).where(Reservation.restaurant_id == restaurant_id)
    count_query = select(func.count(Reservation.id)).where(Reservation.restaurant_id == restaurant_id)

    on_date = resolve_date_filter(date_filter)
    if on_date:
        query = query.where(Reservation.reservation_date == on_date)
        count_query = count_query.where(Reservation.reservation_date == on_date)

    if status:
        query = query.where(Reservation.status == ReservationStatus(status).value)
        count_query = count_query.where(Reservation.status == ReservationStatus(status).value)

    total = await db.scalar(count_query)

    offset = (page - 1) * page_size
    query = (
        query.order_by(Reservation.reservation_date.asc(), Reservation.reservation_time.asc())
        .offset(offset)
        .limit(page_size)
    )
    result = await db.execute(query)
    return list(result.scalars().all()), total or 0

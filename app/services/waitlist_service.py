"""
Walk-in waitlist for a restaurant.

Entries are never hard-deleted; removing one stamps ``removed_at`` so the
history is still there for the daily summary.
"""
from datetime import date, datetime, time, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, func, case
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.core.errors import InvalidState, NotFound, ValidationFailed
from app.database import commit
from app.models.audit import audit_entry
from app.models.table import Table
from app.models.user import User
from app.models.waitlist import (
    WaitlistEntry, WaitlistStatus, WaitlistPriority, QUEUED_STATUSES, TERMINAL_STATUSES,
)
from app.services import availability_service, notification_service

logger = structlog.get_logger()


async def get_entry(
    db: AsyncSession,
    entry_id: UUID,
    restaurant_id: UUID,
    include_removed: bool = False,
) -> WaitlistEntry:
    query = select(WaitlistEntry).where(
        WaitlistEntry.id == entry_id,
        WaitlistEntry.restaurant_id == restaurant_id,
    )
    if not include_removed:
        query = query.where(WaitlistEntry.removed_at.is_(None))
    result = await db.execute(query)
    entry = result.scalar_one_or_none()
    if entry is None:
        raise NotFound("Waitlist entry not found")
    return entry


async def list_queue(
    db: AsyncSession,
    restaurant_id: UUID,
    status: Optional[WaitlistStatus] = None,
) -> List[WaitlistEntry]:
    """Entries in serving order: VIP first, then first come first served.

    Without a status filter only parties still waiting or notified are listed.
    """
    query = select(WaitlistEntry).where(
        WaitlistEntry.restaurant_id == restaurant_id,
        WaitlistEntry.removed_at.is_(None),
    )
    if status:
        query = query.where(WaitlistEntry.status == WaitlistStatus(status).value)
    else:
        query = query.where(WaitlistEntry.status.in_(QUEUED_STATUSES))

    vip_first = case((WaitlistEntry.priority == WaitlistPriority.VIP.value, 0), else_=1)
    result = await db.execute(query.order_by(vip_first, WaitlistEntry.created_at.asc()))
    return list(result.scalars().all())


async def add_entry(
    db: AsyncSession,
    restaurant_id: UUID,
    name: str,
    phone: str,
    party_size: int,
    actor: Optional[User] = None,
    notes: Optional[str] = None,
    priority: WaitlistPriority = WaitlistPriority.NORMAL,
    estimated_wait_minutes: Optional[int] = None,
) -> WaitlistEntry:
    restaurant_settings = await availability_service.get_restaurant_settings(db, restaurant_id)

    if not name or not phone:
        raise ValidationFailed("Name and phone are required", field="name" if not name else "phone")
    if party_size is None or party_size < 1:
        raise ValidationFailed("party_size must be at least 1", field="party_size")
    max_party = restaurant_settings.max_party_size
    if max_party and party_size > max_party:
        raise ValidationFailed(
            f"Parties larger than {max_party} must contact the restaurant",
            field="party_size",
        )

    entry = WaitlistEntry(
        restaurant_id=restaurant_id,
        name=name,
        phone=phone,
        party_size=party_size,
        notes=notes,
        priority=WaitlistPriority(priority).value,
        status=WaitlistStatus.WAITING.value,
        estimated_wait_minutes=(
            estimated_wait_minutes
            if estimated_wait_minutes is not None
            else restaurant_settings.default_wait_minutes
        ),
    )
    db.add(entry)
    await db.flush()
    db.add(audit_entry(
        "waitlist_entry_added", "waitlist_entry", entry.id, restaurant_id,
        actor=actor, after={"status": entry.status, "party_size": party_size},
    ))
    await commit(db)
    await db.refresh(entry)

    logger.info("Waitlist entry added", entry_id=str(entry.id), party_size=party_size)
    return entry


async def update_entry_status(
    db: AsyncSession,
    entry_id: UUID,
    restaurant_id: UUID,
    new_status: WaitlistStatus,
    actor: Optional[User] = None,
    table_id: Optional[UUID] = None,
) -> WaitlistEntry:
    """Move an entry along the queue.

    ``notified`` texts the party. ``seated`` records the table they were given
    without touching the table's status.
    """
    entry = await get_entry(db, entry_id, restaurant_id)
    target = WaitlistStatus(new_status)

    if entry.status in TERMINAL_STATUSES:
        raise InvalidState(f"Waitlist entry is already {entry.status}")

    previous = entry.status
    now = datetime.utcnow()

    if target == WaitlistStatus.SEATED:
        if table_id is not None:
            table = await db.get(Table, table_id)
            if table is None or table.restaurant_id != restaurant_id:
                raise NotFound("Table not found")
            entry.table_id = table_id
        entry.seated_at = now
    elif target == WaitlistStatus.NOTIFIED:
        entry.notified_at = now

    entry.status = target.value

    db.add(audit_entry(
        "waitlist_status_changed", "waitlist_entry", entry.id, restaurant_id,
        actor=actor, before={"status": previous}, after={"status": target.value},
    ))
    await commit(db)
    await db.refresh(entry)

    logger.info(
        "Waitlist entry updated",
        entry_id=str(entry.id),
        previous=previous,
        status=target.value,
    )

    if target == WaitlistStatus.NOTIFIED:
        await notification_service.notify_waitlist_ready(db, entry)

    return entry


async def remove_entry(
    db: AsyncSession,
    entry_id: UUID,
    restaurant_id: UUID,
    actor: Optional[User] = None,
) -> None:
    """Soft delete; removing an entry twice is a no-op"""
    entry = await get_entry(db, entry_id, restaurant_id, include_removed=True)
    if entry.removed_at is not None:
        return

    entry.removed_at = datetime.utcnow()
    if entry.status in QUEUED_STATUSES:
        entry.status = WaitlistStatus.CANCELLED.value

    db.add(audit_entry(
        "waitlist_entry_removed", "waitlist_entry", entry.id, restaurant_id, actor=actor,
    ))
    await commit(db)
    logger.info("Waitlist entry removed", entry_id=str(entry_id))


def _to_utc(local: datetime) -> datetime:
    return local.astimezone(timezone.utc).replace(tzinfo=None)


async def summary(db: AsyncSession, restaurant_id: UUID, on_date: Optional[date] = None) -> dict:
    """Counts per status for entries created on the given local day (today by default)"""
    on_date = on_date or date.today()
    # created_at is naive UTC; convert the local day bounds to match
    start = _to_utc(datetime.combine(on_date, time.min))
    end = _to_utc(datetime.combine(on_date, time.max))

    result = await db.execute(
        select(WaitlistEntry.status, func.count(WaitlistEntry.id))
        .where(
            WaitlistEntry.restaurant_id == restaurant_id,
            WaitlistEntry.created_at >= start,
            WaitlistEntry.created_at <= end,
        )
        .group_by(WaitlistEntry.status)
    )
    counts = {status: count for status, count in result.all()}

    return {
        "waiting": counts.get(WaitlistStatus.WAITING.value, 0),
        "notified": counts.get(WaitlistStatus.NOTIFIED.value, 0),
        "seated": counts.get(WaitlistStatus.SEATED.value, 0),
        "total": sum(counts.values()),
    }

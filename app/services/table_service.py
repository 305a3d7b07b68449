"""
Table state store: physical tables and their cached display status.

``set_status`` does not validate transitions. Staff must be able to mark a
table disabled or occupied whatever its reservations say.
"""
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.core.errors import Conflict, InvalidState, NotFound
from app.database import commit
from app.models.audit import audit_entry
from app.models.reservation import Reservation
from app.models.table import Table, TableStatus
from app.models.user import User

logger = structlog.get_logger()


async def get_table(db: AsyncSession, table_id: UUID, restaurant_id: Optional[UUID] = None) -> Table:
    query = select(Table).where(Table.id == table_id)
    if restaurant_id is not None:
        query = query.where(Table.restaurant_id == restaurant_id)
    result = await db.execute(query)
    table = result.scalar_one_or_none()
    if table is None:
        raise NotFound("Table not found")
    return table


async def list_tables(db: AsyncSession, restaurant_id: UUID) -> List[Table]:
    result = await db.execute(
        select(Table)
        .where(Table.restaurant_id == restaurant_id)
        .order_by(Table.number.asc())
    )
    return list(result.scalars().all())


async def create_table(db: AsyncSession, restaurant_id: UUID, **fields) -> Table:
    table = Table(restaurant_id=restaurant_id, status=TableStatus.AVAILABLE.value, **fields)
    db.add(table)
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        raise Conflict(f"Table number {fields.get('number')} already exists") from e
    await commit(db)
    await db.refresh(table)

    logger.info("Table created", table_id=str(table.id), number=table.number)
    return table


async def update_table(db: AsyncSession, table_id: UUID, restaurant_id: UUID, **fields) -> Table:
    table = await get_table(db, table_id, restaurant_id)
    for field, value in fields.items():
        setattr(table, field, value)
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        raise Conflict(f"Table number {fields.get('number')} already exists") from e
    await commit(db)
    await db.refresh(table)
    return table


async def set_status(
    db: AsyncSession,
    table_id: UUID,
    new_status: TableStatus,
    actor: Optional[User] = None,
    flush_only: bool = False,
) -> Table:
    """Unconditionally write a table's status.

    The reservation engine calls this with ``flush_only`` so the write lands
    in its own transaction.
    """
    table = await db.get(Table, table_id)
    if table is None:
        raise NotFound("Table not found")

    previous = table.status
    table.status = TableStatus(new_status).value

    if flush_only:
        await db.flush()
        return table

    db.add(audit_entry(
        "table_status_set", "table", table.id, table.restaurant_id,
        actor=actor, before={"status": previous}, after={"status": table.status},
    ))
    await commit(db)
    await db.refresh(table)

    logger.info(
        "Table status set",
        table_id=str(table.id),
        previous=previous,
        status=table.status,
    )
    return table


async def delete_table(db: AsyncSession, table_id: UUID, restaurant_id: UUID) -> None:
    """Delete a table that no reservation points at.

    Reservations are never deleted, so a table with history can only be
    disabled.
    """
    table = await get_table(db, table_id, restaurant_id)

    result = await db.execute(
        select(func.count(Reservation.id)).where(Reservation.table_id == table.id)
    )
    if result.scalar():
        raise InvalidState("Table has reservations and cannot be deleted; disable it instead")

    await db.delete(table)
    await commit(db)
    logger.info("Table deleted", table_id=str(table_id))

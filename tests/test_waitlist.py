"""Tests for the walk-in waitlist"""

import pytest
from datetime import date, timedelta
from httpx import AsyncClient
from sqlalchemy import select

from app.core.errors import InvalidState, NotFound, ValidationFailed
from app.models.restaurant import RestaurantSettings
from app.models.waitlist import WaitlistPriority, WaitlistStatus
from app.services import waitlist_service


async def add(db, restaurant, name, **extra):
    return await waitlist_service.add_entry(
        db, restaurant.id, name=name, phone="+15550002222", party_size=extra.pop("party_size", 2), **extra
    )


@pytest.mark.asyncio
async def test_add_entry_defaults(test_db, test_restaurant):
    entry = await add(test_db, test_restaurant, "Garcia")

    assert entry.status == WaitlistStatus.WAITING.value
    assert entry.priority == WaitlistPriority.NORMAL.value
    assert entry.estimated_wait_minutes == 15


@pytest.mark.asyncio
async def test_add_entry_custom_wait(test_db, test_restaurant):
    entry = await add(test_db, test_restaurant, "Lopez", estimated_wait_minutes=40)
    assert entry.estimated_wait_minutes == 40


@pytest.mark.asyncio
async def test_queue_order_vip_first_then_fifo(test_db, test_restaurant):
    first = await add(test_db, test_restaurant, "First")
    second = await add(test_db, test_restaurant, "Second")
    vip = await add(test_db, test_restaurant, "Vip", priority=WaitlistPriority.VIP)

    queue = await waitlist_service.list_queue(test_db, test_restaurant.id)
    assert [e.id for e in queue] == [vip.id, first.id, second.id]


@pytest.mark.asyncio
async def test_notify_then_seat(test_db, test_restaurant, test_tables):
    entry = await add(test_db, test_restaurant, "Martinez", party_size=4)

    entry = await waitlist_service.update_entry_status(
        test_db, entry.id, test_restaurant.id, WaitlistStatus.NOTIFIED
    )
    assert entry.status == "notified"
    assert entry.notified_at is not None

    queue = await waitlist_service.list_queue(test_db, test_restaurant.id)
    assert [e.id for e in queue] == [entry.id]

    entry = await waitlist_service.update_entry_status(
        test_db, entry.id, test_restaurant.id, WaitlistStatus.SEATED, table_id=test_tables[1].id
    )
    assert entry.status == "seated"
    assert entry.seated_at is not None
    assert entry.table_id == test_tables[1].id

    assert await waitlist_service.list_queue(test_db, test_restaurant.id) == []


@pytest.mark.asyncio
async def test_seating_does_not_change_table(test_db, test_restaurant, test_tables):
    entry = await add(test_db, test_restaurant, "Ruiz")
    await waitlist_service.update_entry_status(
        test_db, entry.id, test_restaurant.id, WaitlistStatus.SEATED, table_id=test_tables[0].id
    )
    await test_db.refresh(test_tables[0])
    assert test_tables[0].status == "available"


@pytest.mark.asyncio
@pytest.mark.parametrize("terminal", [WaitlistStatus.SEATED, WaitlistStatus.LEFT, WaitlistStatus.CANCELLED])
async def test_terminal_entries_are_final(test_db, test_restaurant, terminal):
    entry = await add(test_db, test_restaurant, "Done")
    await waitlist_service.update_entry_status(test_db, entry.id, test_restaurant.id, terminal)

    with pytest.raises(InvalidState):
        await waitlist_service.update_entry_status(
            test_db, entry.id, test_restaurant.id, WaitlistStatus.WAITING
        )


@pytest.mark.asyncio
async def test_remove_is_soft_and_idempotent(test_db, test_restaurant):
    entry = await add(test_db, test_restaurant, "Gone")

    await waitlist_service.remove_entry(test_db, entry.id, test_restaurant.id)
    await waitlist_service.remove_entry(test_db, entry.id, test_restaurant.id)

    await test_db.refresh(entry)
    assert entry.removed_at is not None
    assert entry.status == "cancelled"
    assert await waitlist_service.list_queue(test_db, test_restaurant.id) == []

    with pytest.raises(NotFound):
        await waitlist_service.get_entry(test_db, entry.id, test_restaurant.id)


@pytest.mark.asyncio
async def test_entry_scoped_to_restaurant(test_db, test_restaurant, other_restaurant):
    entry = await add(test_db, test_restaurant, "Scoped")

    with pytest.raises(NotFound):
        await waitlist_service.update_entry_status(
            test_db, entry.id, other_restaurant.id, WaitlistStatus.NOTIFIED
        )


@pytest.mark.asyncio
async def test_summary_counts(test_db, test_restaurant):
    await add(test_db, test_restaurant, "A")
    notified = await add(test_db, test_restaurant, "B")
    seated = await add(test_db, test_restaurant, "C")
    await waitlist_service.update_entry_status(test_db, notified.id, test_restaurant.id, WaitlistStatus.NOTIFIED)
    await waitlist_service.update_entry_status(test_db, seated.id, test_restaurant.id, WaitlistStatus.SEATED)

    summary = await waitlist_service.summary(test_db, test_restaurant.id)
    assert summary == {"waiting": 1, "notified": 1, "seated": 1, "total": 3}


@pytest.mark.asyncio
async def test_summary_uses_local_calendar_day(test_db, test_restaurant):
    """The default day is the server's local date, like the reservation filters"""
    await add(test_db, test_restaurant, "Today")

    today = await waitlist_service.summary(test_db, test_restaurant.id, on_date=date.today())
    yesterday = await waitlist_service.summary(
        test_db, test_restaurant.id, on_date=date.today() - timedelta(days=1)
    )

    assert today == await waitlist_service.summary(test_db, test_restaurant.id)
    assert today["total"] == 1
    assert yesterday["total"] == 0


@pytest.mark.asyncio
async def test_add_entry_over_party_limit(test_db, test_restaurant):
    result = await test_db.execute(
        select(RestaurantSettings).where(RestaurantSettings.restaurant_id == test_restaurant.id)
    )
    result.scalar_one().max_party_size = 4
    await test_db.commit()

    with pytest.raises(ValidationFailed) as exc_info:
        await add(test_db, test_restaurant, "Big Group", party_size=5)
    assert exc_info.value.field == "party_size"

    entry = await add(test_db, test_restaurant, "Four", party_size=4)
    assert entry.party_size == 4


@pytest.mark.asyncio
async def test_waitlist_api_flow(client: AsyncClient, test_restaurant, test_staff, auth_headers):
    headers = auth_headers(test_staff)
    base = f"/restaurants/{test_restaurant.id}/waitlist"

    response = await client.post(
        base,
        json={"name": "Walk In", "phone": "+15550003333", "party_size": 3},
        headers=headers,
    )
    assert response.status_code == 201
    entry = response.json()
    assert entry["status"] == "waiting"
    assert entry["estimated_wait_minutes"] == 15

    response = await client.patch(f"{base}/{entry['id']}/status", json={"status": "notified"}, headers=headers)
    assert response.status_code == 200
    assert response.json()["status"] == "notified"

    response = await client.get(f"{base}/summary", headers=headers)
    assert response.status_code == 200
    assert response.json()["notified"] == 1

    response = await client.delete(f"{base}/{entry['id']}", headers=headers)
    assert response.status_code == 204

    response = await client.get(base, headers=headers)
    assert response.json() == []


@pytest.mark.asyncio
async def test_waitlist_requires_staff(client: AsyncClient, test_restaurant, test_customer, auth_headers):
    response = await client.get(
        f"/restaurants/{test_restaurant.id}/waitlist",
        headers=auth_headers(test_customer),
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_waitlist_rejects_empty_party(client: AsyncClient, test_restaurant, test_staff, auth_headers):
    response = await client.post(
        f"/restaurants/{test_restaurant.id}/waitlist",
        json={"name": "Nobody", "phone": "+15550004444", "party_size": 0},
        headers=auth_headers(test_staff),
    )
    assert response.status_code == 422

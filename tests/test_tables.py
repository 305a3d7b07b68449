"""Tests for table management and staff overrides"""

import pytest
from datetime import time
from httpx import AsyncClient
from sqlalchemy import select

from app.core.errors import Conflict, InvalidState, NotFound
from app.models.audit import AuditLog
from app.models.table import TableStatus
from app.services import reservation_service, table_service


@pytest.mark.asyncio
async def test_set_status_is_unconditional(test_db, test_tables, test_staff):
    """Any status can be written over any other"""
    table = test_tables[0]
    for status in (TableStatus.DISABLED, TableStatus.OCCUPIED, TableStatus.RESERVED, TableStatus.AVAILABLE):
        table = await table_service.set_status(test_db, table.id, status, actor=test_staff)
        assert table.status == status.value


@pytest.mark.asyncio
async def test_set_status_is_audited(test_db, test_tables, test_staff):
    table = test_tables[0]
    await table_service.set_status(test_db, table.id, TableStatus.OCCUPIED, actor=test_staff)

    result = await test_db.execute(select(AuditLog).where(AuditLog.resource_id == table.id))
    entry = result.scalar_one()
    assert entry.action == "table_status_set"
    assert entry.data_json["before"] == {"status": "available"}
    assert entry.data_json["after"] == {"status": "occupied"}


@pytest.mark.asyncio
async def test_set_status_missing_table(test_db):
    from uuid import uuid4

    with pytest.raises(NotFound):
        await table_service.set_status(test_db, uuid4(), TableStatus.AVAILABLE)


@pytest.mark.asyncio
async def test_duplicate_table_number(test_db, test_restaurant, test_tables):
    with pytest.raises(Conflict):
        await table_service.create_table(test_db, test_restaurant.id, number=1, capacity=4)


@pytest.mark.asyncio
async def test_delete_table_with_reservations(test_db, test_restaurant, test_tables, test_customer, booking_date):
    table = test_tables[0]
    await reservation_service.create_reservation(
        test_db, test_customer,
        restaurant_id=test_restaurant.id, table_id=table.id,
        reservation_date=booking_date, reservation_time=time(13, 0), guest_count=2,
    )

    with pytest.raises(InvalidState):
        await table_service.delete_table(test_db, table.id, test_restaurant.id)


@pytest.mark.asyncio
async def test_tables_api_lists_in_order(client: AsyncClient, test_restaurant, test_tables, test_staff, auth_headers):
    response = await client.get(
        f"/restaurants/{test_restaurant.id}/tables",
        headers=auth_headers(test_staff),
    )
    assert response.status_code == 200
    assert [t["number"] for t in response.json()] == [1, 2, 3]


@pytest.mark.asyncio
async def test_admin_creates_updates_and_deletes_table(
    client: AsyncClient, test_restaurant, test_admin, auth_headers
):
    headers = auth_headers(test_admin)
    response = await client.post(
        f"/restaurants/{test_restaurant.id}/tables",
        json={"number": 10, "capacity": 4, "zone": "terrace"},
        headers=headers,
    )
    assert response.status_code == 201
    table = response.json()
    assert table["status"] == "available"
    assert table["zone"] == "terrace"

    response = await client.put(
        f"/restaurants/{test_restaurant.id}/tables/{table['id']}",
        json={"capacity": 6, "position_x": 120},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["capacity"] == 6
    assert response.json()["position_x"] == 120

    response = await client.delete(
        f"/restaurants/{test_restaurant.id}/tables/{table['id']}",
        headers=headers,
    )
    assert response.status_code == 204

    response = await client.get(
        f"/restaurants/{test_restaurant.id}/tables/{table['id']}",
        headers=headers,
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_staff_cannot_create_table(client: AsyncClient, test_restaurant, test_staff, auth_headers):
    response = await client.post(
        f"/restaurants/{test_restaurant.id}/tables",
        json={"number": 11, "capacity": 2},
        headers=auth_headers(test_staff),
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_duplicate_number_api_conflict(client: AsyncClient, test_restaurant, test_tables, test_admin, auth_headers):
    response = await client.post(
        f"/restaurants/{test_restaurant.id}/tables",
        json={"number": 2, "capacity": 2},
        headers=auth_headers(test_admin),
    )
    assert response.status_code == 409


@pytest.mark.asyncio
@pytest.mark.parametrize("status, expected", [
    ("occupied", 200),
    ("available", 200),
    ("disabled", 403),
    ("reserved", 403),
])
async def test_staff_status_override_rules(
    client: AsyncClient, test_restaurant, test_tables, test_staff, auth_headers, status, expected
):
    response = await client.patch(
        f"/restaurants/{test_restaurant.id}/tables/{test_tables[0].id}/status",
        json={"status": status},
        headers=auth_headers(test_staff),
    )
    assert response.status_code == expected


@pytest.mark.asyncio
async def test_admin_can_disable_table(client: AsyncClient, test_restaurant, test_tables, test_admin, auth_headers):
    response = await client.patch(
        f"/restaurants/{test_restaurant.id}/tables/{test_tables[0].id}/status",
        json={"status": "disabled"},
        headers=auth_headers(test_admin),
    )
    assert response.status_code == 200
    assert response.json()["status"] == "disabled"


@pytest.mark.asyncio
async def test_status_override_other_restaurant(
    client: AsyncClient, test_restaurant, test_tables, other_staff, auth_headers
):
    response = await client.patch(
        f"/restaurants/{test_restaurant.id}/tables/{test_tables[0].id}/status",
        json={"status": "occupied"},
        headers=auth_headers(other_staff),
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_available_tables_is_public(client: AsyncClient, test_restaurant, test_tables, booking_date):
    response = await client.get(
        f"/restaurants/{test_restaurant.id}/tables/available",
        params={"date": booking_date.isoformat(), "time": "20:00", "guests": 3},
    )
    assert response.status_code == 200
    data = response.json()
    assert [t["number"] for t in data] == [2, 3]
    assert all(t["availability_status"] == "available" and t["is_selectable"] for t in data)


@pytest.mark.asyncio
async def test_available_tables_requires_guests(client: AsyncClient, test_restaurant, booking_date):
    response = await client.get(
        f"/restaurants/{test_restaurant.id}/tables/available",
        params={"date": booking_date.isoformat(), "time": "20:00"},
    )
    assert response.status_code == 422

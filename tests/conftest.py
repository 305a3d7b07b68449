"""Test configuration and fixtures"""

import os

os.environ.setdefault("NOTIFICATIONS_ENABLED", "false")

import pytest
from datetime import date, timedelta
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from uuid import uuid4

from app.main import app
from app.database import Base, get_db
from app.models.restaurant import Restaurant, RestaurantSettings
from app.models.table import Table
from app.models.user import User, UserRole
from app.api.auth import create_access_token, get_password_hash


# Test database URL (use in-memory SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
def booking_date():
    """A date comfortably in the future"""
    return date.today() + timedelta(days=7)


@pytest.fixture
async def test_db():
    """Create test database"""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


async def make_restaurant(db, name="Test Restaurant"):
    restaurant = Restaurant(id=uuid4(), name=name)
    db.add(restaurant)
    await db.flush()

    db.add(RestaurantSettings(
        restaurant_id=restaurant.id,
        address="123 Test St",
        city="Test City",
    ))
    await db.commit()
    return restaurant


async def make_user(db, email, role, restaurant_id=None, phone=None):
    user = User(
        id=uuid4(),
        restaurant_id=restaurant_id,
        email=email,
        hashed_password=get_password_hash("testpass123"),
        full_name=email.split("@")[0].title(),
        phone=phone,
        role=role,
        is_active=True,
        is_verified=True,
    )
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
async def test_restaurant(test_db):
    """Create a test restaurant with default settings"""
    return await make_restaurant(test_db)


@pytest.fixture
async def other_restaurant(test_db):
    """A second restaurant for scoping tests"""
    return await make_restaurant(test_db, name="Other Restaurant")


@pytest.fixture
async def test_tables(test_db, test_restaurant):
    """Tables 1-3 seating 2, 4 and 6"""
    tables = [
        Table(restaurant_id=test_restaurant.id, number=1, capacity=2),
        Table(restaurant_id=test_restaurant.id, number=2, capacity=4),
        Table(restaurant_id=test_restaurant.id, number=3, capacity=6),
    ]
    for table in tables:
        test_db.add(table)
    await test_db.commit()
    return tables


@pytest.fixture
async def test_customer(test_db):
    return await make_user(test_db, "guest@tablebook.dev", UserRole.CUSTOMER, phone="+15550001111")


@pytest.fixture
async def other_customer(test_db):
    return await make_user(test_db, "other@tablebook.dev", UserRole.CUSTOMER)


@pytest.fixture
async def test_staff(test_db, test_restaurant):
    return await make_user(test_db, "host@tablebook.dev", UserRole.STAFF, test_restaurant.id)


@pytest.fixture
async def test_admin(test_db, test_restaurant):
    return await make_user(test_db, "manager@tablebook.dev", UserRole.RESTAURANT_ADMIN, test_restaurant.id)


@pytest.fixture
async def other_staff(test_db, other_restaurant):
    return await make_user(test_db, "host@other.com", UserRole.STAFF, other_restaurant.id)


@pytest.fixture
async def test_super_admin(test_db):
    return await make_user(test_db, "admin@tablebook.dev", UserRole.SUPER_ADMIN)


@pytest.fixture
async def client(test_db):
    """Create test client with overridden database"""
    async def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def authenticated_client(client, test_customer):
    """Client authenticated as the test customer"""
    token = create_access_token(test_customer)
    client.headers["Authorization"] = f"Bearer {token}"
    return client


@pytest.fixture
def auth_headers():
    """Build bearer headers for any user"""
    def _headers(user):
        return {"Authorization": f"Bearer {create_access_token(user)}"}
    return _headers

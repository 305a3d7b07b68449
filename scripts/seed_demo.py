#!/usr/bin/env python3
"""
Seed script to create a demo restaurant with its floor plan
"""

import asyncio
import uuid
from datetime import time

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# (number, capacity, zone, shape, x, y)
DEMO_TABLES = [
    (1, 2, "terrace", "round", 40, 40),
    (2, 2, "terrace", "round", 160, 40),
    (3, 4, "main", "square", 40, 180),
    (4, 4, "main", "square", 160, 180),
    (5, 4, "main", "square", 280, 180),
    (6, 6, "main", "rectangle", 40, 320),
    (7, 6, "main", "rectangle", 220, 320),
    (8, 8, "private", "rectangle", 420, 320),
]


async def seed_demo_data():
    """Seed demo data for development"""
    from app.database import SessionLocal, engine, Base
    from app.models.restaurant import Restaurant, RestaurantSettings, StaffContact
    from app.models.table import Table, TableStatus
    from app.models.user import User, UserRole

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with SessionLocal() as db:
        # Check if demo restaurant already exists
        from sqlalchemy import select
        result = await db.execute(
            select(Restaurant).where(Restaurant.name == "La Terraza")
        )
        existing = result.scalar_one_or_none()

        if existing:
            print("Demo data already exists. Skipping...")
            return

        print("Creating demo restaurant...")

        restaurant = Restaurant(
            id=uuid.uuid4(),
            name="La Terraza",
            timezone="America/Mexico_City",
        )
        db.add(restaurant)
        await db.flush()

        print(f"Created restaurant: {restaurant.name} (ID: {restaurant.id})")

        db.add(RestaurantSettings(
            restaurant_id=restaurant.id,
            address="Av. Reforma 222",
            city="Ciudad de Mexico",
            phone="+525512345678",
            open_time=time(12, 0),
            close_time=time(23, 0),
        ))

        db.add(StaffContact(
            restaurant_id=restaurant.id,
            name="Lucia",
            phone="+525598765432",
            email="lucia@laterraza.mx",
            role="manager",
            notify_on_reservation=True,
        ))

        # Users
        db.add(User(
            id=uuid.uuid4(),
            email="admin@tablebook.dev",
            hashed_password=pwd_context.hash("admin123"),
            full_name="System Admin",
            role=UserRole.SUPER_ADMIN,
            is_active=True,
            is_verified=True,
        ))
        db.add(User(
            id=uuid.uuid4(),
            restaurant_id=restaurant.id,
            email="lucia@laterraza.mx",
            hashed_password=pwd_context.hash("lucia123"),
            full_name="Lucia Hernandez",
            role=UserRole.RESTAURANT_ADMIN,
            is_active=True,
            is_verified=True,
        ))
        db.add(User(
            id=uuid.uuid4(),
            restaurant_id=restaurant.id,
            email="host@laterraza.mx",
            hashed_password=pwd_context.hash("host1234"),
            full_name="Host Stand",
            role=UserRole.STAFF,
            is_active=True,
            is_verified=True,
        ))
        db.add(User(
            id=uuid.uuid4(),
            email="guest@example.com",
            hashed_password=pwd_context.hash("guest123"),
            full_name="Demo Guest",
            phone="+525511112222",
            role=UserRole.CUSTOMER,
            is_active=True,
            is_verified=True,
        ))

        print("Creating tables...")

        for number, capacity, zone, shape, x, y in DEMO_TABLES:
            db.add(Table(
                restaurant_id=restaurant.id,
                number=number,
                capacity=capacity,
                zone=zone,
                shape=shape,
                position_x=x,
                position_y=y,
                status=TableStatus.AVAILABLE.value,
            ))

        await db.commit()

        print(f"""
Demo data created successfully!

Restaurant: La Terraza
  ID: {restaurant.id}

Users:
  Super Admin:
    Email: admin@tablebook.dev
    Password: admin123

  Restaurant Admin:
    Email: lucia@laterraza.mx
    Password: lucia123

  Staff:
    Email: host@laterraza.mx
    Password: host1234

  Customer:
    Email: guest@example.com
    Password: guest123

Tables: {len(DEMO_TABLES)} created
""")


if __name__ == "__main__":
    asyncio.run(seed_demo_data())

"""Seed script for StockPilot demo data."""

import asyncio
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from stockpilot.core.db import AsyncSessionLocal
from stockpilot.core.security import hash_password
from stockpilot.models import Category, InventoryMaterial, Product, User
from stockpilot.models.user import UserRole

CATEGORIES = [
    ("Chicken", "#d97706"),
    ("Rice Meals", "#16a34a"),
    ("Drinks", "#2563eb"),
    ("Sides", "#9333ea"),
]

# (name, category, price, quantity)
PRODUCTS = [
    ("1pc Fried Chicken", "Chicken", "89.00", 40),
    ("2pc Fried Chicken", "Chicken", "169.00", 30),
    ("Chicken Inasal", "Rice Meals", "129.00", 25),
    ("Pork Sisig Rice", "Rice Meals", "119.00", 20),
    ("Iced Tea", "Drinks", "35.00", 60),
    ("Bottled Water", "Drinks", "20.00", 80),
    ("French Fries", "Sides", "55.00", 35),
    ("Extra Rice", "Sides", "20.00", 100),
]

# (name, price, quantity)
MATERIALS = [
    ("Whole Chicken", "210.00", 50),
    ("Rice (kg)", "52.00", 75),
    ("Cooking Oil (L)", "98.00", 20),
    ("Paper Cups", "1.50", 500),
    ("Takeout Boxes", "4.00", 300),
]

USERS = [
    ("admin", "Store Admin", UserRole.ADMIN),
    ("cashier", "Front Cashier", UserRole.STAFF),
]


async def seed_users(db: AsyncSession) -> None:
    """Create the demo admin and cashier (password: changeme123)."""
    result = await db.execute(select(User).limit(1))
    if result.scalar_one_or_none():
        print("ℹ️  Users already exist, skipping...")
        return

    for username, display_name, role in USERS:
        db.add(
            User(
                username=username,
                display_name=display_name,
                hashed_password=hash_password("changeme123"),
                role=role.value,
                is_active=True,
            )
        )
    await db.flush()
    print(f"✅ Created {len(USERS)} users")


async def seed_catalog(db: AsyncSession) -> None:
    """Create categories, products and materials."""
    result = await db.execute(select(Product).limit(1))
    if result.scalar_one_or_none():
        print("ℹ️  Catalog already exists, skipping...")
        return

    categories = {name: Category(name=name, color=color) for name, color in CATEGORIES}
    db.add_all(categories.values())
    await db.flush()

    for name, category, price, quantity in PRODUCTS:
        db.add(
            Product(
                name=name,
                category_id=categories[category].id,
                price=Decimal(price),
                quantity=quantity,
            )
        )

    for name, price, quantity in MATERIALS:
        db.add(InventoryMaterial(name=name, price=Decimal(price), quantity=quantity))

    await db.flush()
    print(
        f"✅ Created {len(CATEGORIES)} categories, {len(PRODUCTS)} products, "
        f"{len(MATERIALS)} materials"
    )


async def seed() -> None:
    async with AsyncSessionLocal() as db:
        await seed_users(db)
        await seed_catalog(db)
        await db.commit()
    print("✅ Seed complete")


def main() -> None:
    asyncio.run(seed())


if __name__ == "__main__":
    main()

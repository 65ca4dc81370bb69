"""Seed script for store sample data.

Creates sample categories, products, an admin and a customer account so you
can try the checkout flow end-to-end.

Usage:
    python -m services.store_service.seed_store_data
"""

import asyncio
from decimal import Decimal

from libs.auth.security import hash_password
from libs.common.config import get_settings
from libs.db.config import build_engine, build_session_factory
from services.store_service.models import Category, Product, User, UserRole
from sqlalchemy import func, select

CATEGORIES = [
    ("Bouquets", "Beautiful handcrafted flower bouquets"),
    ("Home Decor", "Decorative flowers for your home"),
    ("Gifts", "Perfect gift arrangements"),
    ("Wedding", "Elegant wedding florals"),
]

# (name, description, price, category name, stock)
PRODUCTS = [
    (
        "Rose Elegance Bouquet",
        "A stunning arrangement of handcrafted roses in elegant pink and white "
        "tones. Perfect for special occasions.",
        Decimal("2500.00"),
        "Bouquets",
        20,
    ),
    (
        "Bohemian Dreams",
        "A beautiful mix of wildflowers and rustic elements, bringing a bohemian "
        "touch to any space.",
        Decimal("3200.00"),
        "Home Decor",
        15,
    ),
    (
        "Peony Paradise",
        "Luxurious peony arrangement in soft pastel colors. Handcrafted with "
        "attention to detail.",
        Decimal("2800.00"),
        "Bouquets",
        12,
    ),
    (
        "Sunflower Bliss",
        "Bright and cheerful sunflower arrangement that brings warmth and joy to "
        "any room.",
        Decimal("2200.00"),
        "Gifts",
        18,
    ),
]

# (name, email, password, role)
ACCOUNTS = [
    ("Admin User", "admin@buneko.com", "admin123", UserRole.ADMIN),
    ("John Doe", "customer@example.com", "customer123", UserRole.CUSTOMER),
]


async def seed_store_data():
    engine = build_engine(get_settings())
    session_factory = build_session_factory(engine)

    try:
        async with session_factory() as db:
            print("Seeding store data...")

            count = await db.scalar(select(func.count(Category.id)))
            if count:
                print(f"Store data already exists ({count} categories). Skipping seed.")
                return

            # =================================================================
            # 1. CATEGORIES
            # =================================================================
            categories = {
                name: Category(name=name, description=description)
                for name, description in CATEGORIES
            }
            db.add_all(categories.values())
            await db.flush()
            print(f"Created {len(categories)} categories")

            # =================================================================
            # 2. PRODUCTS
            # =================================================================
            for name, description, price, category, stock in PRODUCTS:
                db.add(
                    Product(
                        name=name,
                        description=description,
                        price=price,
                        category_id=categories[category].id,
                        stock=stock,
                    )
                )
            print(f"Created {len(PRODUCTS)} products")

            # =================================================================
            # 3. ACCOUNTS
            # =================================================================
            for name, email, password, role in ACCOUNTS:
                exists = await db.scalar(select(User.id).where(User.email == email))
                if exists:
                    print(f"Account {email} already exists")
                    continue
                db.add(
                    User(
                        name=name,
                        email=email,
                        password=hash_password(password),
                        role=role,
                    )
                )
                print(f"Created {role.value}: {email} / {password}")

            await db.commit()
            print("Store data seeded successfully!")
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed_store_data())

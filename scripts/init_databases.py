#!/usr/bin/env python3
"""
Database initialization script.

1. Optionally drops the products table (--reset)
2. Creates the table and its indexes
3. Optionally inserts sample products (--seed)
4. Displays a summary
"""
import argparse
import asyncio
import sys
from decimal import Decimal
from pathlib import Path

# Add parent directory to path to import catalog modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from loguru import logger
from sqlalchemy import text

from catalog.config import settings
from catalog.db.postgres import check_connection, close_db, drop_db, get_session, init_db
from catalog.db.repository import count_products, create_product, list_categories, list_tags


SAMPLE_PRODUCTS = [
    {
        "name": "iPhone 17 Pro",
        "category": "Electronics",
        "price": Decimal("1099.00"),
        "image_url": "https://images.unsplash.com/photo-1764746218363-6cb017fcd926?w=400",
        "attributes": {"brand": "Apple", "screen": "6.3 inches", "storage": "256GB", "color": "Cosmic Orange", "chip": "A19 Pro"},
        "tags": ["smartphone", "premium", "apple", "5g"],
        "description": "Latest iPhone with A19 Pro chip and professional camera system for stunning photos",
    },
    {
        "name": "MacBook Pro M4 14-inch",
        "category": "Electronics",
        "price": Decimal("1999.00"),
        "image_url": "https://m.media-amazon.com/images/I/61eA9PkZ07L._AC_UY436_FMwebp_QL65_.jpg?w=400",
        "attributes": {"brand": "Apple", "cpu": "M4", "ram": "16GB", "storage": "512GB", "display": "Liquid Retina XDR"},
        "tags": ["laptop", "premium", "apple", "professional"],
        "description": "Powerful laptop for professionals with M4 chip and stunning Liquid Retina XDR display",
    },
    {
        "name": "AirPods Pro",
        "category": "Electronics",
        "price": Decimal("249.00"),
        "image_url": "https://images.unsplash.com/photo-1588156979435-379b9d365296?w=400",
        "attributes": {"brand": "Apple", "noise_cancellation": True, "battery_life": "6 hours", "charging_case": "MagSafe"},
        "tags": ["audio", "premium", "apple", "wireless"],
        "description": "Premium wireless earbuds with active noise cancellation and spatial audio support",
    },
    {
        "name": "Samsung Galaxy S23 Ultra",
        "category": "Electronics",
        "price": Decimal("1100.00"),
        "image_url": "https://images.unsplash.com/photo-1678911820864-e2c567c655d7?w=400",
        "attributes": {"brand": "Samsung", "screen": "6.8 inches", "storage": "256GB", "camera": "200MP", "s_pen": True},
        "tags": ["smartphone", "premium", "samsung", "android"],
        "description": "Flagship Android smartphone with 200MP camera, S Pen, and powerful performance",
    },
    {
        "name": "The Great Gatsby",
        "category": "Books",
        "price": Decimal("12.99"),
        "image_url": "https://images.unsplash.com/photo-1615413833480-6e8427dbcc5e?w=400",
        "attributes": {"author": "F. Scott Fitzgerald", "pages": 180, "year": 1925, "publisher": "Scribner", "isbn": "978-0743273565"},
        "tags": ["fiction", "classic", "american", "literature"],
        "description": "Classic American novel about the Jazz Age, wealth, and the American Dream in the 1920s",
    },
    {
        "name": "1984",
        "category": "Books",
        "price": Decimal("14.99"),
        "image_url": "https://images.unsplash.com/photo-1622609184693-58079bb6742f?w=400",
        "attributes": {"author": "George Orwell", "pages": 328, "year": 1949, "publisher": "Secker & Warburg", "isbn": "978-0451524935"},
        "tags": ["fiction", "dystopian", "classic", "political"],
        "description": "Dystopian novel about totalitarianism, surveillance, and the dangers of authoritarian government",
    },
    {
        "name": "Atomic Habits",
        "category": "Books",
        "price": Decimal("12.99"),
        "image_url": "https://images.unsplash.com/photo-1686764288887-dae4e7d50d58?w=400",
        "attributes": {"author": "James Clear", "pages": 320, "year": 2018, "publisher": "Avery", "isbn": "978-0735211292"},
        "tags": ["self-help", "productivity", "non-fiction", "bestseller"],
        "description": "Proven framework for improving every day by building better habits and breaking bad ones",
    },
    {
        "name": "Sony WH-1000XM4",
        "category": "Electronics",
        "price": Decimal("349.99"),
        "image_url": "https://images.unsplash.com/photo-1758118107816-ddddfa3a1f44?w=400",
        "attributes": {"brand": "Sony", "noise_cancellation": True, "battery_life": "30 hours", "type": "Over-ear", "bluetooth": "5.0"},
        "tags": ["audio", "premium", "wireless", "headphones"],
        "description": "Industry-leading noise canceling headphones with exceptional sound quality and comfort",
    },
    {
        "name": "Dell XPS 15",
        "category": "Electronics",
        "price": Decimal("1599.99"),
        "image_url": "https://images.unsplash.com/photo-1622286346003-c5c7e63b1088?w=400",
        "attributes": {"brand": "Dell", "cpu": "Intel i7-13700H", "ram": "16GB", "storage": "512GB SSD", "gpu": "RTX 4060"},
        "tags": ["laptop", "windows", "professional", "gaming"],
        "description": "Premium Windows laptop with stunning display and powerful performance for creative professionals",
    },
    {
        "name": "Thinking, Fast and Slow",
        "category": "Books",
        "price": Decimal("18.99"),
        "image_url": "https://images.unsplash.com/photo-1558025623-2aafbebe8daf?w=400",
        "attributes": {"author": "Daniel Kahneman", "pages": 512, "year": 2011, "publisher": "Farrar, Straus and Giroux", "isbn": "978-0374533557"},
        "tags": ["psychology", "non-fiction", "science", "bestseller"],
        "description": "Explores the two systems that drive the way we think and make decisions",
    },
]


async def init_postgresql(reset: bool) -> bool:
    """
    Create (and optionally recreate) the products table.

    Returns:
        True if successful, False otherwise
    """
    print("\n" + "="*60)
    print("📊 INITIALIZING POSTGRESQL DATABASE")
    print("="*60)

    try:
        print(f"\n🔗 Connecting to PostgreSQL...")
        print(f"   Host: {settings.postgres_host}")
        print(f"   Port: {settings.postgres_port}")
        print(f"   Database: {settings.postgres_db}")
        print(f"   User: {settings.postgres_user}")
        await check_connection()

        if reset:
            print(f"\n🗑️  Dropping existing tables...")
            await drop_db()

        print(f"\n📋 Creating tables and indexes...")
        await init_db()

        async with get_session() as session:
            result = await session.execute(
                text("SELECT indexname FROM pg_indexes WHERE tablename = 'products' ORDER BY indexname")
            )
            indexes = [row[0] for row in result.fetchall()]

        print(f"\n✅ PostgreSQL initialized successfully!")
        print(f"\n📊 Indexes on products:")
        for index in indexes:
            print(f"   • {index}")

        return True

    except Exception as e:
        print(f"\n❌ Failed to initialize PostgreSQL: {e}")
        logger.error(f"PostgreSQL initialization error: {e}")
        return False


async def seed_products() -> bool:
    """
    Insert the sample products.

    Returns:
        True if successful, False otherwise
    """
    print("\n" + "="*60)
    print("📝 INSERTING SAMPLE PRODUCTS")
    print("="*60)

    try:
        async with get_session() as session:
            for product_data in SAMPLE_PRODUCTS:
                await create_product(session, dict(product_data))

        async with get_session() as session:
            total = await count_products(session)
            categories = await list_categories(session)
            tags = await list_tags(session)

        print(f"\n✅ {len(SAMPLE_PRODUCTS)} sample products inserted ({total} in table)")
        print(f"   Categories: {', '.join(categories)}")
        print(f"   Tags: {len(tags)} distinct")
        return True

    except Exception as e:
        print(f"\n❌ Failed to insert sample products: {e}")
        logger.error(f"Seeding error: {e}")
        return False


def display_summary(postgres_success: bool, seed_success: bool, seeded: bool) -> None:
    print("\n" + "="*60)
    print("📋 INITIALIZATION SUMMARY")
    print("="*60)

    print(f"\n{'✅' if postgres_success else '❌'} PostgreSQL: {'SUCCESS' if postgres_success else 'FAILED'}")
    if seeded:
        print(f"{'✅' if seed_success else '❌'} Sample data: {'SUCCESS' if seed_success else 'FAILED'}")

    if postgres_success and seed_success:
        print("\n🎉 Database ready!")
        print("\n📝 Next steps:")
        print("   1. Start the API server: uvicorn catalog.api.main:app --reload")
        print(f"   2. Browse products: http://{settings.api_host}:{settings.api_port}{settings.api_prefix}/products")
    else:
        print("\n⚠️  Initialization failed.")
        print("   Please check the error messages above and fix the issues.")

    print("\n" + "="*60 + "\n")


async def main(args: argparse.Namespace) -> int:
    print("\n" + "="*60)
    print("🚀 DATABASE INITIALIZATION SCRIPT")
    print("="*60)
    print(f"\n📦 Project: {settings.app_name}")
    print(f"🔖 Version: {settings.app_version}")

    try:
        postgres_success = await init_postgresql(reset=args.reset)

        seed_success = True
        if postgres_success and args.seed:
            seed_success = await seed_products()

        display_summary(postgres_success, seed_success, seeded=args.seed)
    finally:
        await close_db()

    return 0 if postgres_success and seed_success else 1


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create the product catalog schema")
    parser.add_argument("--reset", action="store_true", help="Drop the products table first")
    parser.add_argument("--seed", action="store_true", help="Insert sample products")
    return parser.parse_args()


if __name__ == "__main__":
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        level=settings.log_level
    )

    try:
        sys.exit(asyncio.run(main(parse_args())))
    except KeyboardInterrupt:
        print("\n\n⚠️  Initialization cancelled by user.")
        sys.exit(1)

import asyncio
import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from decimal import Decimal

from sqlalchemy import select, func

from config.logging_setup import setup_logging
from database.base import async_session_factory, init_db
from database.models.product import Product
from services.rental_service import RentalService

DEMO_PRODUCTS = [
    {
        "id": "prod-1",
        "name": "Professional DSLR Camera",
        "category": "Cameras",
        "rates": ("500", "2500", "12000", "60000", "600000"),
        "quantity_on_hand": 5,
    },
    {
        "id": "prod-2",
        "name": "Professional Video Camera",
        "category": "Cameras",
        "rates": ("800", "4000", "20000", "96000", "960000"),
        "quantity_on_hand": 3,
    },
    {
        "id": "prod-3",
        "name": "Portable PA System",
        "category": "Audio",
        "rates": ("300", "1500", "7500", "36000", "360000"),
        "quantity_on_hand": 8,
    },
    {
        "id": "prod-4",
        "name": "LED Lighting Kit",
        "category": "Lighting",
        "rates": ("200", "1000", "5000", "24000", "240000"),
        "quantity_on_hand": 6,
    },
    {
        "id": "prod-5",
        "name": "Projector HD",
        "category": "Projectors",
        "rates": ("400", "2000", "10000", "48000", "480000"),
        "quantity_on_hand": 4,
    },
]


async def add_demo_products(vendor_id: str = "vendor-1"):
    """Seed a small demo catalog"""
    setup_logging()
    await init_db()

    async with async_session_factory() as session:
        count = (await session.execute(select(func.count()).select_from(Product))).scalar()

    if count > 0:
        print(f"Catalog already has {count} products, nothing to add.")
        return

    service = RentalService()
    for data in DEMO_PRODUCTS:
        hourly, daily, weekly, monthly, yearly = (Decimal(rate) for rate in data["rates"])
        product = Product(
            id=data["id"],
            name=data["name"],
            category=data["category"],
            vendor_id=vendor_id,
            rate_hourly=hourly,
            rate_daily=daily,
            rate_weekly=weekly,
            rate_monthly=monthly,
            rate_yearly=yearly,
            quantity_on_hand=data["quantity_on_hand"],
            quantity_with_customer=0,
        )
        await service.add_product(product)
        print(f"✅ {product.name}: {daily}/day, {product.quantity_on_hand} units")

    print(f"\n🎉 Added {len(DEMO_PRODUCTS)} products")


if __name__ == "__main__":
    asyncio.run(add_demo_products())

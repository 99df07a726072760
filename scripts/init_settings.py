import asyncio
import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config.logging_setup import setup_logging
from database.base import init_db
from services.settings_service import SettingsService


async def init_default_settings():
    """Create the tables and the default company profile / rental rules"""
    setup_logging()
    await init_db()

    service = SettingsService()
    config = await service.get_company_config()
    rules = await service.get_rental_rules()

    print("✅ Settings ready")
    print(f"🏢 Company: {config.name}")
    print(f"🧾 Tax rate: {config.tax_rate}%")
    print(f"🔒 Security deposit: {config.security_deposit_percent}%")
    print(f"⏰ Late fee: {config.late_fee_per_day} {config.currency}/day")
    print(f"📅 Max rental: {rules.max_rental_days} days, booking {rules.advance_booking_days} days ahead")


if __name__ == "__main__":
    asyncio.run(init_default_settings())

#!/usr/bin/env python3
"""Setup script for the VIP transfer API."""

import asyncio
import logging
import sys
from decimal import Decimal
from pathlib import Path

# Add the server directory to the Python path
server_dir = Path(__file__).parent.parent / "server"
sys.path.insert(0, str(server_dir))

from alembic import command
from alembic.config import Config
from sqlalchemy import func, select
from vip_transfer.core.clock import utcnow
from vip_transfer.core.config import settings
from vip_transfer.core.database import async_session_factory, close_db
from vip_transfer.models import CurrencyRate, HeroSlide, Region, SiteSetting, Vehicle
from vip_transfer.services.settings_service import describe_setting

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


SAMPLE_VEHICLES = [
    {
        "name": "Mercedes Vito VIP",
        "type": "Minivan",
        "brand": "Mercedes-Benz",
        "model": "Vito",
        "passenger_capacity": 6,
        "luggage_capacity": 6,
        "minimum_price": Decimal("45"),
        "sort_order": 1,
    },
    {
        "name": "Mercedes Sprinter VIP",
        "type": "Minibus",
        "brand": "Mercedes-Benz",
        "model": "Sprinter",
        "passenger_capacity": 12,
        "luggage_capacity": 12,
        "minimum_price": Decimal("75"),
        "sort_order": 2,
    },
    {
        "name": "Mercedes E-Class",
        "type": "Sedan",
        "brand": "Mercedes-Benz",
        "model": "E 220",
        "passenger_capacity": 3,
        "luggage_capacity": 3,
        "minimum_price": Decimal("40"),
        "sort_order": 3,
    },
]

SAMPLE_REGIONS = [
    ("Kemer", "Kemer", Decimal("45"), 45.0, 50),
    ("Belek", "Belek", Decimal("40"), 35.0, 35),
    ("Side", "Side", Decimal("55"), 65.0, 60),
    ("Alanya", "Alanya", Decimal("85"), 125.0, 110),
    ("Lara", "Lara", Decimal("30"), 15.0, 20),
]

SAMPLE_SETTINGS = {
    "hero_title": "VIP Airport Transfer",
    "hero_title_tr": "VIP Havalimanı Transferi",
    "hero_subtitle": "Comfortable rides from Antalya Airport",
    "hero_subtitle_tr": "Antalya Havalimanından konforlu yolculuk",
    "contact_phone": settings.contact_phone,
    "contact_email": settings.contact_email,
}


async def setup_database():
    """Setup the database with the migrated schema."""
    logger.info("Setting up database...")

    try:
        alembic_cfg = Config(str(server_dir / "db" / "alembic.ini"))
        alembic_cfg.set_main_option("script_location", str(server_dir / "db" / "alembic"))

        logger.info("Running database migrations...")
        await asyncio.to_thread(command.upgrade, alembic_cfg, "head")
        logger.info("Database migrations completed")

    except Exception as e:
        logger.error(f"Database setup failed: {e}")
        raise


async def create_sample_data():
    """Create the starter catalog, fallback rates and homepage copy."""
    logger.info("Creating sample data...")

    async with async_session_factory() as db:
        try:
            existing = await db.scalar(select(func.count()).select_from(Vehicle))
            if existing:
                logger.info("Sample data already exists, skipping...")
                return

            now = utcnow()
            for values in SAMPLE_VEHICLES:
                db.add(Vehicle(currency="EUR", is_active=1, created_at=now, **values))

            for order, (name, name_en, price, distance, minutes) in enumerate(SAMPLE_REGIONS, start=1):
                db.add(Region(
                    name=name,
                    name_en=name_en,
                    price=price,
                    currency="EUR",
                    distance_km=distance,
                    estimated_duration_minutes=minutes,
                    sort_order=order,
                    is_active=1,
                    created_at=now,
                ))

            for code, rate in (
                ("TRY", settings.default_rate_try),
                ("USD", settings.default_rate_usd),
                ("GBP", settings.default_rate_gbp),
            ):
                db.add(CurrencyRate(currency_code=code, rate=Decimal(str(rate)), updated_at=now))

            for key, value in SAMPLE_SETTINGS.items():
                db.add(SiteSetting(key=key, value=value, description=describe_setting(key), updated_at=now))

            db.add(HeroSlide(image_url="/images/hero/antalya-airport.jpg", sort_order=1, is_active=1, created_at=now))

            await db.commit()
            logger.info("Sample data created successfully!")

        except Exception as e:
            await db.rollback()
            logger.error(f"Failed to create sample data: {e}")
            raise


async def main():
    """Main setup function."""
    logger.info("Starting VIP transfer API setup...")

    await setup_database()
    await create_sample_data()
    await close_db()

    logger.info("Setup completed successfully!")
    logger.info("You can now start the API server with: cd server && uvicorn vip_transfer.main:app --reload")


if __name__ == "__main__":
    asyncio.run(main())

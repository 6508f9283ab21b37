"""
Seed the service catalog with the standard price list.
Existing codes are updated in place, so the script can be re-run safely.
"""
import asyncio
from decimal import Decimal

from tuneledger.core.config import get_settings
from tuneledger.core.logging import configure_logging
from tuneledger.domain.catalog import CatalogService
from tuneledger.infrastructure.database.session import dispose_engine, get_session, init_db

CATALOG = [
    ("stage1", "Stage 1", "Safe power increase with stock hardware", "Performance Tuning", Decimal("150.00")),
    ("stage2", "Stage 2", "Increased power for modified intake/exhaust", "Performance Tuning", Decimal("200.00")),
    ("dpf_off", "DPF OFF", "Diesel particulate filter removal", "Emissions", Decimal("100.00")),
    ("egr_off", "EGR OFF", "Exhaust gas recirculation disable", "Emissions", Decimal("80.00")),
    ("adblue_off", "AdBlue OFF", "AdBlue/SCR system disable", "Emissions", Decimal("120.00")),
    ("pops_bangs", "Pops & Bangs", "Exhaust crackle/pop sounds on deceleration", "Special Features", Decimal("100.00")),
    ("launch_control", "Launch Control", "Launch control activation", "Special Features", Decimal("80.00")),
    ("speed_limiter", "Speed Limiter OFF", "Remove electronic speed limiter", "Special Features", Decimal("60.00")),
]


async def seed_catalog() -> None:
    configure_logging(get_settings())
    await init_db()

    async for db in get_session():
        service = CatalogService.with_session(db)
        for sort_order, (code, name, description, category, price) in enumerate(CATALOG):
            await service.add_item(
                code=code,
                name=name,
                price=price,
                description=description,
                category=category,
                sort_order=sort_order,
            )
    await dispose_engine()

    print(f"Catalog seeded with {len(CATALOG)} services")


if __name__ == "__main__":
    asyncio.run(seed_catalog())

"""
Seed a small catalog for development without partner credentials.
Run: python -m scripts.seed_catalog  (from backend/)
"""

import asyncio

from app.catalog.locations import location_info
from app.db.session import async_session
from app.esim_access.pricing import retail_price
from app.repositories import countries as country_repository
from app.repositories import packages as package_repository

GB = 1024 ** 3

# (package_code, name, location_code, location_name, wholesale cents, volume, days)
SEED_PACKAGES = [
    ("JP-1GB-7D", "Japan 1GB 7Days", "JP", "Japan", 250, 1 * GB, 7),
    ("JP-5GB-30D", "Japan 5GB 30Days", "JP", "Japan", 900, 5 * GB, 30),
    ("US-3GB-15D", "United States 3GB 15Days", "US", "United States", 600, 3 * GB, 15),
    ("FR-1GB-7D", "France 1GB 7Days", "FR", "France", 200, 1 * GB, 7),
    ("TH-10GB-30D", "Thailand 10GB 30Days", "TH", "Thailand", 1100, 10 * GB, 30),
    ("EU42-5GB-30D", "Europe 5GB 30Days", "EU-42", "Europe", 1500, 5 * GB, 30),
    ("AS12-3GB-15D", "Asia 3GB 15Days", "AS-12", "Asia", 1200, 3 * GB, 15),
]


async def seed():
    """Insert seed packages and their locations."""
    tallies: dict[str, tuple[str, int, int]] = {}
    async with async_session() as session:
        for code, name, location_code, location_name, price, volume, duration in SEED_PACKAGES:
            retail = retail_price(price)
            await package_repository.upsert(
                session,
                package_code=code,
                name=name,
                location_code=location_code,
                location_name=location_name,
                price=price,
                retail_price=retail,
                currency_code="USD",
                volume=volume,
                duration=duration,
            )
            _, count, min_price = tallies.get(location_code, (location_name, 0, retail))
            tallies[location_code] = (location_name, count + 1, min(min_price, retail))
            print(f"  Package: {code} ({retail / 100:.2f} USD)")

        for location_code, (location_name, count, min_price) in tallies.items():
            info = location_info(location_code, location_name)
            await country_repository.upsert_from_sync(
                session,
                code=location_code,
                min_price=min_price,
                package_count=count,
                **info,
            )
            print(f"  Location: {location_code} -> {info['name']}")
        await session.commit()
    print(f"Seeded {len(SEED_PACKAGES)} packages in {len(tallies)} locations.")


if __name__ == "__main__":
    asyncio.run(seed())

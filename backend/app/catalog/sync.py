"""
Catalog sync — mirror the partner package list into local tables.

One run:
    1. warm the country-name cache (best effort)
    2. list partner packages
    3. upsert every package with wholesale + retail cents
    4. upsert one country/bundle row per location with fresh aggregates

Admin-managed bundle fields are never overwritten.  The caller owns the
transaction.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from app.catalog.country_names import fetch_country_names
from app.catalog.locations import location_info, normalize_location_code
from app.core.config import settings
from app.core.constants import DEFAULT_CURRENCY
from app.core.errors import PackageNotFoundError
from app.core.logging import get_logger
from app.esim_access.client import EsimAccessClient
from app.esim_access.pricing import api_price_to_cents, retail_price
from app.repositories import countries as country_repository
from app.repositories import packages as package_repository

logger = get_logger(__name__)


@dataclass
class _LocationTally:
    name: str
    min_price: int
    count: int = 1


@dataclass
class SyncResult:
    synced: int = 0
    countries: int = 0
    created: int = 0
    location_codes: list[str] = field(default_factory=list)

    def as_dict(self) -> dict[str, int]:
        return {"synced": self.synced, "countries": self.countries}


async def sync_packages(
    db: AsyncSession,
    client: EsimAccessClient,
    *,
    location_code: str | None = None,
    names_transport: httpx.AsyncBaseTransport | None = None,
) -> SyncResult:
    log = logger.bind(location_code=location_code)
    country_names = await fetch_country_names(transport=names_transport)

    partner_packages = await client.list_packages(
        location_code=location_code,
        page_size=None if location_code else settings.CATALOG_SYNC_PAGE_SIZE,
    )
    log.info("Partner catalog fetched", packages=len(partner_packages))

    result = SyncResult()
    tallies: dict[str, _LocationTally] = {}

    for pkg in partner_packages:
        wholesale = api_price_to_cents(pkg.price)
        retail = retail_price(wholesale)
        code = normalize_location_code(pkg.location_code)

        _, created = await package_repository.upsert(
            db,
            package_code=pkg.package_code,
            name=pkg.name,
            location_code=code,
            location_name=pkg.location_name or pkg.location_code,
            price=wholesale,
            retail_price=retail,
            currency_code=pkg.currency_code or DEFAULT_CURRENCY,
            volume=pkg.volume,
            duration=pkg.duration,
            active_type=pkg.active_type,
            description=pkg.description,
        )
        result.synced += 1
        result.created += int(created)

        tally = tallies.get(code)
        if tally is None:
            tallies[code] = _LocationTally(name=pkg.location_name, min_price=retail)
        else:
            tally.count += 1
            tally.min_price = min(tally.min_price, retail)

    for code, tally in tallies.items():
        info = location_info(code, tally.name, country_names)
        await country_repository.upsert_from_sync(
            db,
            code=code,
            min_price=tally.min_price,
            package_count=tally.count,
            **info,
        )

    result.countries = len(tallies)
    result.location_codes = sorted(tallies)
    log.info(
        "Catalog sync complete",
        synced=result.synced,
        new_packages=result.created,
        countries=result.countries,
    )
    return result


async def fetch_package_from_api(client: EsimAccessClient, package_code: str) -> dict:
    """Preview one partner package with prices converted to cents."""
    packages = await client.list_packages(package_code=package_code)
    if not packages:
        raise PackageNotFoundError(package_code)

    pkg = packages[0]
    wholesale = api_price_to_cents(pkg.price)
    return {
        "package_code": pkg.package_code,
        "name": pkg.name,
        "location_code": pkg.location_code,
        "location_name": pkg.location_name or pkg.location_code,
        "price": wholesale,
        "retail_price": retail_price(wholesale),
        "currency_code": pkg.currency_code or DEFAULT_CURRENCY,
        "volume": pkg.volume,
        "duration": pkg.duration,
        "active_type": pkg.active_type,
        "description": pkg.description,
    }

"""
Storefront catalog reads.

Package counts and minimum prices are computed live from the packages
table; the values stored on a country row are only a fallback for
locations that currently have no packages.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.catalog.locations import flag_emoji
from app.core.constants import DEFAULT_REGION, MAX_FEATURED_COUNTRIES
from app.db.models.country import Country
from app.db.models.package import Package
from app.repositories import countries as country_repository
from app.repositories import packages as package_repository


def country_to_dict(country: Country, aggregates: dict[str, tuple[int, int]] | None = None) -> dict[str, Any]:
    data = {
        "id": country.id,
        "code": country.code,
        "name": country.name,
        "region": country.region,
        "flag_emoji": country.flag_emoji,
        "min_price": country.min_price,
        "package_count": country.package_count,
        "popular": country.popular,
        "custom_name": country.custom_name,
        "slug": country.slug,
        "included_countries": country.included_countries,
        "description": country.description,
    }
    if aggregates is not None:
        count, min_price = aggregates.get(country.code, (0, None))
        data["package_count"] = count
        data["min_price"] = min_price if min_price is not None else country.min_price
    return data


def _synthesize_from_packages(packages: list[Package]) -> list[dict[str, Any]]:
    """Country entries derived from two-letter package locations."""
    by_code: dict[str, dict[str, Any]] = {}
    for pkg in packages:
        code = pkg.location_code
        if len(code) != 2:
            continue
        entry = by_code.get(code)
        if entry is None:
            by_code[code] = {
                "id": None,
                "code": code,
                "name": pkg.location_name or code,
                "region": DEFAULT_REGION,
                "flag_emoji": flag_emoji(code),
                "min_price": pkg.retail_price,
                "package_count": 1,
                "popular": False,
            }
        else:
            entry["package_count"] += 1
            entry["min_price"] = min(entry["min_price"], pkg.retail_price)
    return list(by_code.values())


async def list_countries(db: AsyncSession) -> list[dict[str, Any]]:
    countries = await country_repository.list_countries(db)
    if not countries:
        packages = await package_repository.list_all(db)
        return _synthesize_from_packages(packages)
    aggregates = await country_repository.location_aggregates(db)
    return [country_to_dict(c, aggregates) for c in countries]


async def list_countries_by_region(db: AsyncSession, region: str) -> list[dict[str, Any]]:
    countries = await country_repository.list_countries(db, region=region)
    return [country_to_dict(c) for c in countries]


async def list_marquee_countries(db: AsyncSession) -> list[dict[str, str]]:
    countries = await country_repository.list_countries(db)
    picked = [c for c in countries if c.name and len(c.name) > 2 and c.flag_emoji]
    return [
        {"name": c.name, "flag_emoji": c.flag_emoji}
        for c in picked[:MAX_FEATURED_COUNTRIES]
    ]


async def list_popular_countries(db: AsyncSession) -> list[dict[str, Any]]:
    countries = await country_repository.list_popular(db)
    aggregates = await country_repository.location_aggregates(db)
    return [country_to_dict(c, aggregates) for c in countries[:MAX_FEATURED_COUNTRIES]]


async def get_country(db: AsyncSession, code: str) -> dict[str, Any] | None:
    code = code.upper()
    country = await country_repository.get_by_code(db, code)
    if country is None:
        return None
    aggregates = await country_repository.location_aggregates(db)
    return country_to_dict(country, aggregates)


async def list_packages_for_location(db: AsyncSession, code: str) -> list[Package]:
    return await package_repository.list_by_location(db, code.upper())


async def get_package(db: AsyncSession, package_code: str) -> Package | None:
    return await package_repository.get_by_code(db, package_code)


async def get_packages(db: AsyncSession, package_codes: list[str]) -> list[Package]:
    """Packages in request order; unknown codes are skipped."""
    found = await package_repository.get_by_codes(db, package_codes)
    return [found[code] for code in package_codes if code in found]


async def search_packages(db: AsyncSession, query: str) -> list[Package]:
    return await package_repository.search(db, query)


# ── Bundles ───────────────────────────────────


async def _resolve_bundle(db: AsyncSession, code_or_slug: str) -> Country | None:
    bundle = await country_repository.get_by_slug(db, code_or_slug)
    if bundle is None:
        bundle = await country_repository.get_by_code(db, code_or_slug)
    return bundle


async def list_bundles(db: AsyncSession) -> list[dict[str, Any]]:
    bundles = await country_repository.list_bundles(db)
    aggregates = await country_repository.location_aggregates(db)
    return [country_to_dict(b, aggregates) for b in bundles]


async def get_bundle(db: AsyncSession, code_or_slug: str) -> dict[str, Any] | None:
    bundle = await _resolve_bundle(db, code_or_slug)
    if bundle is None or not bundle.is_bundle:
        return None
    aggregates = await country_repository.location_aggregates(db)
    return country_to_dict(bundle, aggregates)


async def list_bundle_packages(db: AsyncSession, code_or_slug: str) -> list[Package]:
    bundle = await country_repository.get_by_slug(db, code_or_slug)
    location_code = bundle.code if bundle is not None else code_or_slug
    return await package_repository.list_by_location(db, location_code)

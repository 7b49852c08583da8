"""
Country repository — destinations and bundles (the countries table).

Repository rules:
- Pure data-access logic only
- Every function receives AsyncSession explicitly
- Functions flush, but never commit
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.constants import BUNDLE_REGION
from app.db.models.country import Country
from app.db.models.package import Package

# Columns catalog sync owns; admin-managed bundle fields are never in here
SYNC_FIELDS = frozenset({"name", "region", "flag_emoji", "min_price", "package_count", "popular"})

ADMIN_FIELDS = frozenset({"name", "region", "flag_emoji", "popular"})


async def get_by_id(db: AsyncSession, country_id: int) -> Country | None:
    return await db.get(Country, country_id)


async def get_by_code(db: AsyncSession, code: str) -> Country | None:
    result = await db.execute(select(Country).where(Country.code == code))
    return result.scalar_one_or_none()


async def get_by_slug(db: AsyncSession, slug: str) -> Country | None:
    result = await db.execute(select(Country).where(Country.slug == slug))
    return result.scalar_one_or_none()


async def list_countries(db: AsyncSession, *, region: str | None = None) -> list[Country]:
    stmt = select(Country).order_by(Country.id)
    if region is not None:
        stmt = stmt.where(Country.region == region)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def list_popular(db: AsyncSession) -> list[Country]:
    stmt = select(Country).where(Country.popular.is_(True)).order_by(Country.id)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def list_bundles(db: AsyncSession) -> list[Country]:
    return await list_countries(db, region=BUNDLE_REGION)


async def create_country(
    db: AsyncSession,
    *,
    code: str,
    name: str,
    region: str | None,
    flag_emoji: str | None,
    popular: bool = False,
    min_price: int | None = None,
    package_count: int = 0,
) -> Country:
    country = Country(
        code=code,
        name=name,
        region=region,
        flag_emoji=flag_emoji,
        popular=popular,
        min_price=min_price,
        package_count=package_count,
    )
    db.add(country)
    await db.flush()
    return country


async def upsert_from_sync(db: AsyncSession, *, code: str, **fields: Any) -> Country:
    """Insert or refresh a location; only SYNC_FIELDS are written."""
    values = {k: v for k, v in fields.items() if k in SYNC_FIELDS}
    country = await get_by_code(db, code)
    if country is None:
        country = Country(code=code, **values)
        db.add(country)
    else:
        for key, value in values.items():
            setattr(country, key, value)
    await db.flush()
    return country


async def update_country(db: AsyncSession, country_id: int, **fields: Any) -> Country | None:
    """Patch admin-editable columns; ``None`` values are skipped."""
    country = await get_by_id(db, country_id)
    if country is None:
        return None
    for key, value in fields.items():
        if key in ADMIN_FIELDS and value is not None:
            setattr(country, key, value)
    await db.flush()
    return country


async def update_bundle_fields(db: AsyncSession, country: Country, **fields: Any) -> Country:
    for key in ("custom_name", "slug", "description", "included_countries"):
        if key in fields:
            setattr(country, key, fields[key])
    await db.flush()
    return country


async def delete_country(db: AsyncSession, country_id: int) -> bool:
    country = await get_by_id(db, country_id)
    if country is None:
        return False
    await db.delete(country)
    await db.flush()
    return True


async def location_aggregates(db: AsyncSession) -> dict[str, tuple[int, int]]:
    """``{location_code: (package_count, min_retail_price)}`` over all packages."""
    stmt = select(
        Package.location_code,
        func.count(Package.id),
        func.min(Package.retail_price),
    ).group_by(Package.location_code)
    result = await db.execute(stmt)
    return {code: (count, min_price) for code, count, min_price in result.all()}

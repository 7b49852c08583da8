"""
Package repository — eSIM data plans mirrored from the partner catalog.

Repository rules:
- Pure data-access logic only
- Every function receives AsyncSession explicitly
- Functions flush, but never commit
"""

from __future__ import annotations

from typing import Any, Iterable

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.constants import MAX_SEARCH_RESULTS
from app.db.models.base import utcnow
from app.db.models.package import Package

PACKAGE_FIELDS = frozenset({
    "name",
    "location_code",
    "location_name",
    "price",
    "retail_price",
    "currency_code",
    "volume",
    "duration",
    "active_type",
    "description",
})


async def get_by_id(db: AsyncSession, package_id: int) -> Package | None:
    return await db.get(Package, package_id)


async def get_by_code(db: AsyncSession, package_code: str) -> Package | None:
    result = await db.execute(select(Package).where(Package.package_code == package_code))
    return result.scalar_one_or_none()


async def get_by_codes(db: AsyncSession, package_codes: Iterable[str]) -> dict[str, Package]:
    """Map of code → package; unknown codes are simply absent."""
    codes = list(dict.fromkeys(package_codes))
    if not codes:
        return {}
    result = await db.execute(select(Package).where(Package.package_code.in_(codes)))
    return {p.package_code: p for p in result.scalars().all()}


async def list_by_location(db: AsyncSession, location_code: str) -> list[Package]:
    """Packages of one location, smallest data volume first, then shortest."""
    stmt = (
        select(Package)
        .where(Package.location_code == location_code)
        .order_by(Package.volume, Package.duration, Package.id)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def list_all(db: AsyncSession) -> list[Package]:
    """All packages ordered for the admin table (location name, then volume)."""
    stmt = select(Package).order_by(Package.location_name, Package.volume, Package.id)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def search(db: AsyncSession, query: str, *, limit: int = MAX_SEARCH_RESULTS) -> list[Package]:
    """Case-insensitive substring match on location name or package name."""
    term = f"%{query.lower()}%"
    stmt = (
        select(Package)
        .where(
            or_(
                func.lower(Package.location_name).like(term),
                func.lower(Package.name).like(term),
            )
        )
        .order_by(Package.id)
        .limit(limit)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def count_packages(db: AsyncSession) -> int:
    result = await db.execute(select(func.count()).select_from(Package))
    return result.scalar_one()


async def upsert(db: AsyncSession, *, package_code: str, **fields: Any) -> tuple[Package, bool]:
    """Insert or overwrite a package by code; stamps last_synced. Returns ``(pkg, created)``."""
    values = {k: v for k, v in fields.items() if k in PACKAGE_FIELDS}
    package = await get_by_code(db, package_code)
    created = package is None
    if created:
        package = Package(package_code=package_code, **values)
        db.add(package)
    else:
        for key, value in values.items():
            setattr(package, key, value)
    package.last_synced = utcnow()
    await db.flush()
    return package, created


async def update_retail(
    db: AsyncSession,
    package_id: int,
    *,
    retail_price: int,
    description: str | None = None,
) -> Package | None:
    package = await get_by_id(db, package_id)
    if package is None:
        return None
    package.retail_price = retail_price
    package.description = description
    package.last_synced = utcnow()
    await db.flush()
    return package


async def delete_package(db: AsyncSession, package_id: int) -> bool:
    package = await get_by_id(db, package_id)
    if package is None:
        return False
    await db.delete(package)
    await db.flush()
    return True


async def delete_by_location(db: AsyncSession, location_code: str) -> int:
    result = await db.execute(delete(Package).where(Package.location_code == location_code))
    await db.flush()
    return result.rowcount or 0

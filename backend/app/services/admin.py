"""
Administrator operations: dashboard numbers, users, orders, eSIMs and
catalog maintenance.  Authorization is enforced by the API dependency;
these functions assume an admin caller.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.catalog.locations import flag_emoji, region_for_country, slugify
from app.catalog.service import country_to_dict
from app.core.constants import RECENT_WINDOW_DAYS, UserRole
from app.core.errors import (
    BadRequestError,
    ConflictError,
    CountryNotFoundError,
    NotFoundError,
    PermissionDeniedError,
    UserNotFoundError,
)
from app.core.logging import get_logger
from app.db.models.base import utcnow
from app.db.models.country import Country
from app.db.models.package import Package
from app.db.models.user import User
from app.repositories import countries as country_repository
from app.repositories import esims as esim_repository
from app.repositories import orders as order_repository
from app.repositories import packages as package_repository
from app.repositories import users as user_repository

logger = get_logger(__name__)


def _user_summary(user: User | None) -> dict[str, Any] | None:
    return {"email": user.email, "name": user.name} if user else None


# ── Dashboard ─────────────────────────────────


async def dashboard_stats(db: AsyncSession) -> dict[str, Any]:
    week_ago = utcnow() - timedelta(days=RECENT_WINDOW_DAYS)
    return {
        "total_users": await user_repository.count_users(db),
        "total_orders": await order_repository.count_orders(db),
        "total_esims": await esim_repository.count_esims(db),
        "total_packages": await package_repository.count_packages(db),
        "total_revenue": await order_repository.fulfilled_revenue(db),
        "recent_orders": await order_repository.count_orders(db, since=week_ago),
        "recent_revenue": await order_repository.fulfilled_revenue(db, since=week_ago),
        "active_esims": await esim_repository.count_esims(db, active_only=True),
        "orders_by_status": await order_repository.counts_by_status(db),
    }


# ── Users ─────────────────────────────────────


async def list_users_with_stats(db: AsyncSession) -> list[dict[str, Any]]:
    users = await user_repository.list_users(db)
    order_stats = await order_repository.user_order_stats(db)
    esim_counts = await esim_repository.counts_by_user(db)
    rows = []
    for user in users:
        order_count, spent = order_stats.get(user.id, (0, 0))
        rows.append({
            "user": user,
            "order_count": order_count,
            "esim_count": esim_counts.get(user.id, 0),
            "total_spent": spent,
        })
    return rows


async def update_user_role(db: AsyncSession, user_id: int, role: UserRole) -> User:
    user = await user_repository.set_role(db, user_id, UserRole(role).value)
    if user is None:
        raise UserNotFoundError(user_id)
    logger.info("User role changed", user_id=user_id, role=user.role)
    return user


async def delete_user(db: AsyncSession, user_id: int) -> None:
    if await user_repository.get_user_by_id(db, user_id) is None:
        raise UserNotFoundError(user_id)
    if await user_repository.has_orders(db, user_id):
        raise ConflictError("Cannot delete user with existing orders")
    await user_repository.delete_user(db, user_id)
    logger.info("User deleted by admin", user_id=user_id)


async def make_admin(db: AsyncSession, *, caller: User, email: str) -> User:
    """
    Promote a user by email.

    Bootstrap rule: while no admin exists, any signed-in user may call
    this; afterwards only admins may.
    """
    if await user_repository.admin_exists(db) and not caller.is_admin:
        raise PermissionDeniedError("Only admins can create new admins")

    target = await user_repository.get_user_by_email(db, email)
    if target is None:
        raise NotFoundError("User not found with that email")
    target.role = UserRole.ADMIN.value
    await db.flush()
    logger.info("User promoted to admin", user_id=target.id, by=caller.id)
    return target


# ── Orders / eSIMs ────────────────────────────


async def list_orders(db: AsyncSession) -> list[dict[str, Any]]:
    rows = await order_repository.list_with_user_summary(db)
    return [
        {"order": order, "user": _user_summary(user), "esim_count": count}
        for order, user, count in rows
    ]


async def list_esims(db: AsyncSession) -> list[dict[str, Any]]:
    rows = await esim_repository.list_with_details(db)
    return [
        {"esim": esim, "user": _user_summary(user), "transaction_id": txn}
        for esim, user, txn in rows
    ]


# ── Packages ──────────────────────────────────


async def update_package(
    db: AsyncSession,
    package_id: int,
    *,
    retail_price: int,
    description: str | None = None,
) -> Package:
    package = await package_repository.update_retail(
        db, package_id, retail_price=retail_price, description=description
    )
    if package is None:
        raise NotFoundError("Package not found")
    return package


async def delete_package(db: AsyncSession, package_id: int) -> None:
    if not await package_repository.delete_package(db, package_id):
        raise NotFoundError("Package not found")


async def add_package_manual(db: AsyncSession, **fields: Any) -> dict[str, Any]:
    """Create or overwrite a package by code, creating its country if needed."""
    location_code = fields["location_code"].upper()
    fields["location_code"] = location_code

    country_created = False
    if await country_repository.get_by_code(db, location_code) is None:
        await country_repository.create_country(
            db,
            code=location_code,
            name=fields["location_name"],
            region=region_for_country(location_code),
            flag_emoji=flag_emoji(location_code),
        )
        country_created = True

    package_code = fields.pop("package_code")
    package, created = await package_repository.upsert(db, package_code=package_code, **fields)
    logger.info(
        "Package saved manually",
        package_code=package_code,
        updated=not created,
        country_created=country_created,
    )
    return {"package": package, "updated": not created, "country_created": country_created}


# ── Countries ─────────────────────────────────


async def create_country(
    db: AsyncSession,
    *,
    code: str,
    name: str,
    region: str,
    flag_emoji: str,
    popular: bool = False,
) -> Country:
    code = code.upper()
    if await country_repository.get_by_code(db, code) is not None:
        raise ConflictError("Country with this code already exists")
    return await country_repository.create_country(
        db, code=code, name=name, region=region, flag_emoji=flag_emoji, popular=popular
    )


async def update_country(db: AsyncSession, country_id: int, **fields: Any) -> Country:
    country = await country_repository.update_country(db, country_id, **fields)
    if country is None:
        raise CountryNotFoundError(str(country_id))
    return country


async def delete_country(db: AsyncSession, country_id: int) -> None:
    if not await country_repository.delete_country(db, country_id):
        raise CountryNotFoundError(str(country_id))


# ── Bundles ───────────────────────────────────


async def _get_bundle(db: AsyncSession, bundle_id: int) -> Country:
    bundle = await country_repository.get_by_id(db, bundle_id)
    if bundle is None or not bundle.is_bundle:
        raise BadRequestError("Not a valid bundle")
    return bundle


async def list_bundles(db: AsyncSession) -> list[dict[str, Any]]:
    bundles = await country_repository.list_bundles(db)
    aggregates = await country_repository.location_aggregates(db)
    return [country_to_dict(b, aggregates) for b in bundles]


async def update_bundle(db: AsyncSession, bundle_id: int, **fields: Any) -> Country:
    """Only fields present in ``fields`` change; a non-empty custom name also resets the slug."""
    bundle = await _get_bundle(db, bundle_id)
    updates = dict(fields)
    custom_name = updates.get("custom_name")
    if custom_name:
        slug = slugify(custom_name)
        clash = await country_repository.get_by_slug(db, slug)
        if clash is not None and clash.id != bundle.id:
            raise ConflictError("Another bundle already uses this name")
        updates["slug"] = slug
    return await country_repository.update_bundle_fields(db, bundle, **updates)


async def delete_bundle(db: AsyncSession, bundle_id: int) -> int:
    """Delete a bundle and its packages; returns the number of packages removed."""
    bundle = await _get_bundle(db, bundle_id)
    removed = await package_repository.delete_by_location(db, bundle.code)
    await country_repository.delete_country(db, bundle.id)
    logger.info("Bundle deleted", code=bundle.code, packages_deleted=removed)
    return removed

"""
Order fulfillment — turn a paid order into provisioned eSIM profiles.

Flow for one order:
    paid → processing   (committed before the partner is called)
    partner order       (one request, never retried)
    poll profiles       (FULFILLMENT_POLL_ATTEMPTS × FULFILLMENT_POLL_DELAY_SECONDS)
    store eSIMs → fulfilled
    any failure → failed (committed) and the error propagates

When the partner has not produced profiles by the end of polling the
order is still marked fulfilled and a deferred fetch is queued.

This module commits: the status checkpoints must survive the caller's
rollback on error.
"""

from __future__ import annotations

import asyncio
import uuid
from typing import Any, Awaitable, Callable

from kombu.exceptions import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.constants import OrderStatus
from app.core.errors import BadRequestError, InvalidOrderStateError, OrderNotFoundError, PackageNotFoundError
from app.core.logging import get_logger
from app.db.models.order import Order, OrderItem
from app.esim_access.client import EsimAccessClient
from app.esim_access.pricing import cents_to_api_price
from app.esim_access.schemas import EsimProfile, PackageInfo
from app.repositories import esims as esim_repository
from app.repositories import orders as order_repository
from app.repositories import packages as package_repository

logger = get_logger(__name__)

PROVISIONING_NOTE = "eSIMs are still provisioning. Refresh in a few minutes."

Sleep = Callable[[float], Awaitable[Any]]
Enqueue = Callable[[uuid.UUID], None]


def enqueue_deferred_fetch(order_id: uuid.UUID) -> None:
    """Queue the Celery task that collects profiles once provisioned."""
    from app.tasks.fulfillment_tasks import fetch_order_esims

    try:
        fetch_order_esims.delay(str(order_id))
    except OperationalError as exc:
        # Customers can still refresh manually; the order itself is fine
        logger.warning("Could not queue deferred eSIM fetch", order_id=str(order_id), error=str(exc))


def match_order_item(order: Order, profile: EsimProfile, index: int) -> OrderItem | None:
    """Order line a profile belongs to: by package code, then by position, then the first line."""
    items = order.items
    first = profile.first_package
    code = first.package_code if first else None
    if code:
        for item in items:
            if item.package_code == code:
                return item
    if index < len(items):
        return items[index]
    return items[0] if items else None


def _esim_fields(order: Order, profile: EsimProfile, index: int) -> dict[str, Any]:
    item = match_order_item(order, profile, index)
    first = profile.first_package
    return {
        "iccid": profile.iccid,
        "imsi": profile.imsi,
        "activation_code": profile.activation_code,
        "qr_code_url": profile.qr_code_url,
        "smdp_address": profile.smdp_address,
        "status": profile.esim_status,
        "package_code": (first.package_code if first else None) or (item.package_code if item else "unknown"),
        "package_name": item.package_name if item else "Unknown",
        "location_name": (item.location_name if item else None) or "Unknown",
        "data_total": profile.total_volume,
        "data_used": profile.order_usage or 0,
        "duration": (first.duration if first else None) or (item.duration if item else 0),
        "expires_at": profile.expires_at,
    }


async def _store_profiles(db: AsyncSession, order: Order, profiles: list[EsimProfile]) -> int:
    """Insert profiles not stored yet; returns how many were created."""
    known = await esim_repository.existing_iccids(db, [p.iccid for p in profiles])
    created = 0
    for index, profile in enumerate(profiles):
        if profile.iccid in known:
            continue
        await esim_repository.create_esim(
            db,
            order_id=order.id,
            user_id=order.user_id,
            **_esim_fields(order, profile, index),
        )
        created += 1
    return created


async def _poll_profiles(
    client: EsimAccessClient,
    order_no: str,
    *,
    attempts: int,
    delay: float,
    sleep: Sleep,
) -> list[EsimProfile]:
    for attempt in range(1, attempts + 1):
        profiles = await client.query_esims(order_no=order_no)
        if profiles:
            return profiles
        logger.debug("No profiles yet", order_no=order_no, attempt=attempt)
        if attempt < attempts:
            await sleep(delay)
    return []


async def fulfill_order(
    db: AsyncSession,
    order_id: uuid.UUID,
    *,
    client: EsimAccessClient,
    sleep: Sleep = asyncio.sleep,
    enqueue_fetch: Enqueue = enqueue_deferred_fetch,
) -> dict[str, Any]:
    log = logger.bind(order_id=str(order_id))

    order = await order_repository.get_by_id(db, order_id)
    if order is None:
        raise OrderNotFoundError(order_id)
    if order.status != OrderStatus.PAID:
        raise InvalidOrderStateError(order_id, order.status)

    await order_repository.set_status(db, order, OrderStatus.PROCESSING.value)
    await db.commit()
    log.info("Fulfillment started", transaction_id=order.transaction_id)

    try:
        packages = await package_repository.get_by_codes(db, (i.package_code for i in order.items))
        package_info: list[PackageInfo] = []
        for item in order.items:
            pkg = packages.get(item.package_code)
            if pkg is None:
                raise PackageNotFoundError(item.package_code)
            package_info.append(
                PackageInfo(
                    package_code=item.package_code,
                    count=item.quantity,
                    price=cents_to_api_price(pkg.price),
                )
            )
        amount = sum(p.price * p.count for p in package_info)

        order_no = await client.order_esims(
            transaction_id=order.transaction_id,
            amount=amount,
            package_info_list=package_info,
        )
        await order_repository.set_status(db, order, OrderStatus.PROCESSING.value, order_no=order_no)
        await db.commit()
        log = log.bind(order_no=order_no)

        profiles = await _poll_profiles(
            client,
            order_no,
            attempts=settings.FULFILLMENT_POLL_ATTEMPTS,
            delay=settings.FULFILLMENT_POLL_DELAY_SECONDS,
            sleep=sleep,
        )

        if not profiles:
            await order_repository.set_status(db, order, OrderStatus.FULFILLED.value)
            await db.commit()
            log.info("Order fulfilled, profiles still provisioning")
            enqueue_fetch(order_id)
            return {"success": True, "order_no": order_no, "esim_count": 0, "note": PROVISIONING_NOTE}

        created = await _store_profiles(db, order, profiles)
        await order_repository.set_status(db, order, OrderStatus.FULFILLED.value)
        await db.commit()
        log.info("Order fulfilled", esim_count=len(profiles), created=created)
        return {"success": True, "order_no": order_no, "esim_count": len(profiles)}

    except Exception as exc:
        await db.rollback()
        await order_repository.set_status_by_id(db, order_id, OrderStatus.FAILED.value)
        await db.commit()
        await db.refresh(order)
        log.error("Fulfillment failed", error=str(exc), error_type=type(exc).__name__)
        raise


async def fetch_order_esims(
    db: AsyncSession,
    order_id: uuid.UUID,
    *,
    client: EsimAccessClient,
) -> dict[str, int]:
    """Collect profiles for an already-placed partner order; idempotent per ICCID."""
    order = await order_repository.get_by_id(db, order_id)
    if order is None:
        raise OrderNotFoundError(order_id)
    if not order.order_no:
        raise BadRequestError("Order has no partner order number yet", details={"order_id": str(order_id)})

    profiles = await client.query_esims(order_no=order.order_no)
    created = await _store_profiles(db, order, profiles)
    logger.info(
        "Deferred eSIM fetch",
        order_id=str(order_id),
        order_no=order.order_no,
        fetched=len(profiles),
        created=created,
    )
    return {"fetched": len(profiles), "created": created}

"""
Order creation and lookups.

Checkout turns the session cart into an order priced from the current
catalog.  There is no payment step yet: checkout orders are created as
``paid`` and handed straight to fulfillment.
"""

from __future__ import annotations

import secrets
import string
import time
import uuid
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.constants import TRANSACTION_ID_PREFIX, OrderStatus
from app.core.errors import EmptyCartError, OrderNotFoundError, PackageNotFoundError
from app.core.logging import get_logger
from app.db.models.order import Order
from app.repositories import carts as cart_repository
from app.repositories import orders as order_repository
from app.repositories import packages as package_repository
from app.repositories import users as user_repository

logger = get_logger(__name__)

_BASE36 = string.digits + string.ascii_lowercase


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_transaction_id() -> str:
    """``SIM-<epoch ms in base36>-<6 random base36 chars>``, upper-cased."""
    timestamp = _to_base36(int(time.time() * 1000))
    suffix = "".join(secrets.choice(_BASE36) for _ in range(6))
    return f"{TRANSACTION_ID_PREFIX}-{timestamp}-{suffix}".upper()


async def create_order_from_cart(
    db: AsyncSession,
    *,
    session_id: str,
    customer_email: str,
    clerk_id: str | None = None,
) -> dict[str, Any]:
    cart = await cart_repository.get_by_session(db, session_id)
    if cart is None or not cart.items:
        raise EmptyCartError()

    user = await user_repository.get_or_create_customer(db, email=customer_email, clerk_id=clerk_id)

    packages = await package_repository.get_by_codes(db, (i.package_code for i in cart.items))
    items: list[dict[str, Any]] = []
    total = 0
    for line in cart.items:
        pkg = packages.get(line.package_code)
        if pkg is None:
            raise PackageNotFoundError(line.package_code)
        total += pkg.retail_price * line.quantity
        items.append({
            "package_code": pkg.package_code,
            "package_name": pkg.name,
            "location_name": pkg.location_name,
            "quantity": line.quantity,
            "price": pkg.retail_price,
            "volume": pkg.volume,
            "duration": pkg.duration,
        })

    order = await order_repository.create_order(
        db,
        transaction_id=generate_transaction_id(),
        total_amount=total,
        items=items,
        status=OrderStatus.PAID.value,
        user_id=user.id,
        customer_email=customer_email,
    )
    await cart_repository.clear_items(db, cart)

    logger.info(
        "Order created from cart",
        order_id=str(order.id),
        transaction_id=order.transaction_id,
        total_amount=total,
        item_count=len(items),
    )
    return {"order_id": order.id, "transaction_id": order.transaction_id, "total_amount": total}


async def create_order(
    db: AsyncSession,
    *,
    user_id: int,
    items: list[dict[str, Any]],
    total_amount: int,
    customer_email: str,
    stripe_session_id: str | None = None,
) -> Order:
    """Plain ``pending`` order, for payment integrations that confirm later."""
    order = await order_repository.create_order(
        db,
        transaction_id=generate_transaction_id(),
        total_amount=total_amount,
        items=items,
        user_id=user_id,
        customer_email=customer_email,
        stripe_session_id=stripe_session_id,
    )
    logger.info("Pending order created", order_id=str(order.id), transaction_id=order.transaction_id)
    return order


async def get_order_or_404(db: AsyncSession, order_id: uuid.UUID) -> Order:
    order = await order_repository.get_by_id(db, order_id)
    if order is None:
        raise OrderNotFoundError(order_id)
    return order


async def update_order_status(
    db: AsyncSession,
    order_id: uuid.UUID,
    status: OrderStatus | str,
    *,
    order_no: str | None = None,
    stripe_payment_intent_id: str | None = None,
) -> Order:
    order = await get_order_or_404(db, order_id)
    await order_repository.set_status(
        db,
        order,
        OrderStatus(status).value,
        order_no=order_no,
        stripe_payment_intent_id=stripe_payment_intent_id,
    )
    logger.info("Order status updated", order_id=str(order_id), status=order.status)
    return order

"""
Order repository — orders and their item snapshots.

Repository rules:
- Pure data-access logic only
- Every function receives AsyncSession explicitly
- Functions flush, but never commit
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import case, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.constants import OrderStatus
from app.db.models.base import utcnow
from app.db.models.esim import Esim
from app.db.models.order import Order, OrderItem
from app.db.models.user import User


async def create_order(
    db: AsyncSession,
    *,
    transaction_id: str,
    total_amount: int,
    items: list[dict[str, Any]],
    status: str = OrderStatus.PENDING.value,
    user_id: int | None = None,
    customer_email: str | None = None,
    stripe_session_id: str | None = None,
) -> Order:
    order = Order(
        user_id=user_id,
        transaction_id=transaction_id,
        status=status,
        total_amount=total_amount,
        customer_email=customer_email,
        stripe_session_id=stripe_session_id,
        items=[OrderItem(position=i, **item) for i, item in enumerate(items)],
    )
    db.add(order)
    await db.flush()
    return order


async def get_by_id(db: AsyncSession, order_id: uuid.UUID) -> Order | None:
    return await db.get(Order, order_id, populate_existing=True)


async def get_by_transaction_id(db: AsyncSession, transaction_id: str) -> Order | None:
    result = await db.execute(select(Order).where(Order.transaction_id == transaction_id))
    return result.scalar_one_or_none()


async def get_by_stripe_session(db: AsyncSession, stripe_session_id: str) -> Order | None:
    result = await db.execute(select(Order).where(Order.stripe_session_id == stripe_session_id))
    return result.scalars().first()


async def list_for_user(db: AsyncSession, user_id: int) -> list[Order]:
    stmt = (
        select(Order)
        .where(Order.user_id == user_id)
        .order_by(Order.created_at.desc())
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def set_status(
    db: AsyncSession,
    order: Order,
    status: str,
    *,
    order_no: str | None = None,
    stripe_payment_intent_id: str | None = None,
) -> Order:
    order.status = status
    if order_no is not None:
        order.order_no = order_no
    if stripe_payment_intent_id is not None:
        order.stripe_payment_intent_id = stripe_payment_intent_id
    order.updated_at = utcnow()
    await db.flush()
    return order


# ── Admin listings / stats ────────────────────


async def list_with_user_summary(db: AsyncSession) -> list[tuple[Order, User | None, int]]:
    """Every order newest first, with its owner and eSIM count."""
    esim_counts = (
        select(Esim.order_id, func.count(Esim.id).label("esim_count"))
        .group_by(Esim.order_id)
        .subquery()
    )
    stmt = (
        select(Order, User, func.coalesce(esim_counts.c.esim_count, 0))
        .outerjoin(User, User.id == Order.user_id)
        .outerjoin(esim_counts, esim_counts.c.order_id == Order.id)
        .order_by(Order.created_at.desc())
    )
    result = await db.execute(stmt)
    return [(order, user, count) for order, user, count in result.all()]


async def count_orders(db: AsyncSession, *, since: datetime | None = None) -> int:
    stmt = select(func.count()).select_from(Order)
    if since is not None:
        stmt = stmt.where(Order.created_at > since)
    result = await db.execute(stmt)
    return result.scalar_one()


async def fulfilled_revenue(db: AsyncSession, *, since: datetime | None = None) -> int:
    stmt = select(func.coalesce(func.sum(Order.total_amount), 0)).where(
        Order.status == OrderStatus.FULFILLED.value
    )
    if since is not None:
        stmt = stmt.where(Order.created_at > since)
    result = await db.execute(stmt)
    return int(result.scalar_one())


async def counts_by_status(db: AsyncSession) -> dict[str, int]:
    stmt = select(Order.status, func.count(Order.id)).group_by(Order.status)
    result = await db.execute(stmt)
    counts = {status.value: 0 for status in OrderStatus}
    for status, count in result.all():
        counts[status] = count
    return counts


async def user_order_stats(db: AsyncSession) -> dict[int, tuple[int, int]]:
    """``{user_id: (order_count, fulfilled_spend)}``."""
    spend = func.sum(
        case((Order.status == OrderStatus.FULFILLED.value, Order.total_amount), else_=0)
    )
    stmt = select(Order.user_id, func.count(Order.id), spend).where(Order.user_id.is_not(None)).group_by(Order.user_id)
    result = await db.execute(stmt)
    return {user_id: (count, int(total or 0)) for user_id, count, total in result.all()}


async def set_status_by_id(db: AsyncSession, order_id: uuid.UUID, status: str) -> None:
    """Status write that does not need a loaded instance (used after rollback)."""
    stmt = (
        update(Order)
        .where(Order.id == order_id)
        .values(status=status, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    await db.execute(stmt)
    await db.flush()

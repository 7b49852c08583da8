"""
eSIM repository — provisioned profiles.

Repository rules:
- Pure data-access logic only
- Every function receives AsyncSession explicitly
- Functions flush, but never commit
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.constants import ACTIVE_ESIM_STATUSES
from app.db.models.esim import Esim
from app.db.models.order import Order
from app.db.models.user import User


async def create_esim(db: AsyncSession, *, order_id: uuid.UUID, user_id: int | None, **fields: Any) -> Esim:
    esim = Esim(order_id=order_id, user_id=user_id, **fields)
    db.add(esim)
    await db.flush()
    return esim


async def get_by_id(db: AsyncSession, esim_id: uuid.UUID) -> Esim | None:
    return await db.get(Esim, esim_id)


async def get_by_iccid(db: AsyncSession, iccid: str) -> Esim | None:
    result = await db.execute(select(Esim).where(Esim.iccid == iccid))
    return result.scalar_one_or_none()


async def existing_iccids(db: AsyncSession, iccids: list[str]) -> set[str]:
    if not iccids:
        return set()
    result = await db.execute(select(Esim.iccid).where(Esim.iccid.in_(iccids)))
    return set(result.scalars().all())


async def list_for_order(db: AsyncSession, order_id: uuid.UUID) -> list[Esim]:
    stmt = select(Esim).where(Esim.order_id == order_id).order_by(Esim.created_at, Esim.iccid)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def list_for_user(db: AsyncSession, user_id: int) -> list[Esim]:
    stmt = select(Esim).where(Esim.user_id == user_id).order_by(Esim.created_at.desc())
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def update_from_partner(
    db: AsyncSession,
    esim: Esim,
    *,
    status: str,
    data_used: int | None = None,
    expires_at: datetime | None = None,
) -> Esim:
    esim.status = status
    if data_used is not None:
        esim.data_used = data_used
    if expires_at is not None:
        esim.expires_at = expires_at
    await db.flush()
    return esim


# ── Admin listings / stats ────────────────────


async def list_with_details(db: AsyncSession) -> list[tuple[Esim, User | None, str | None]]:
    """Every eSIM newest first, with its owner and the order's transaction id."""
    stmt = (
        select(Esim, User, Order.transaction_id)
        .outerjoin(User, User.id == Esim.user_id)
        .outerjoin(Order, Order.id == Esim.order_id)
        .order_by(Esim.created_at.desc())
    )
    result = await db.execute(stmt)
    return [(esim, user, txn) for esim, user, txn in result.all()]


async def count_esims(db: AsyncSession, *, active_only: bool = False) -> int:
    stmt = select(func.count()).select_from(Esim)
    if active_only:
        stmt = stmt.where(Esim.status.in_([s.value for s in ACTIVE_ESIM_STATUSES]))
    result = await db.execute(stmt)
    return result.scalar_one()


async def counts_by_user(db: AsyncSession) -> dict[int, int]:
    stmt = (
        select(Esim.user_id, func.count(Esim.id))
        .where(Esim.user_id.is_not(None))
        .group_by(Esim.user_id)
    )
    result = await db.execute(stmt)
    return dict(result.all())

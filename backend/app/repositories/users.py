"""
User repository containing all data-access operations for the users table.

Repository rules:
- Pure data-access logic only
- Every function receives AsyncSession explicitly
- Functions flush, but never commit
"""

from __future__ import annotations

from sqlalchemy import exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.constants import UserRole
from app.db.models.order import Order
from app.db.models.user import User


def _normalize_email(email: str) -> str:
    return email.lower().strip()


async def create_user(
    db: AsyncSession,
    *,
    email: str,
    name: str | None = None,
    clerk_id: str | None = None,
    image_url: str | None = None,
    role: str = UserRole.USER.value,
) -> User:
    user = User(
        email=_normalize_email(email),
        name=name.strip() if name else None,
        clerk_id=clerk_id,
        image_url=image_url,
        role=role,
    )
    db.add(user)
    await db.flush()
    return user


async def get_user_by_id(db: AsyncSession, user_id: int) -> User | None:
    """Fetch a user by primary key."""
    return await db.get(User, user_id)


async def get_user_by_clerk_id(db: AsyncSession, clerk_id: str) -> User | None:
    stmt = select(User).where(User.clerk_id == clerk_id)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Fetch a user by email address (case-insensitive)."""
    stmt = select(User).where(User.email == _normalize_email(email))
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def upsert_from_identity(
    db: AsyncSession,
    *,
    clerk_id: str,
    email: str,
    name: str | None = None,
    image_url: str | None = None,
) -> tuple[User, bool]:
    """
    Create or refresh a user from identity-provider data.

    Matches by clerk_id first, then links an existing guest row by email.
    An email change that collides with another row keeps the current email.
    Returns ``(user, created)``.
    """
    user = await get_user_by_clerk_id(db, clerk_id)
    if user is None:
        user = await get_user_by_email(db, email)

    if user is None:
        user = await create_user(
            db, email=email, name=name, clerk_id=clerk_id, image_url=image_url
        )
        return user, True

    new_email = _normalize_email(email)
    if user.email != new_email and await get_user_by_email(db, new_email) is None:
        user.email = new_email
    user.clerk_id = clerk_id
    user.name = name
    user.image_url = image_url
    await db.flush()
    return user, False


async def get_or_create_customer(
    db: AsyncSession,
    *,
    email: str,
    clerk_id: str | None = None,
) -> User:
    """Resolve the buyer for a checkout; guests get an email-only row."""
    if clerk_id:
        user = await get_user_by_clerk_id(db, clerk_id)
        if user is not None:
            return user
    user = await get_user_by_email(db, email)
    if user is not None:
        return user
    return await create_user(db, email=email, clerk_id=clerk_id)


async def list_users(
    db: AsyncSession,
    *,
    role: str | None = None,
    offset: int = 0,
    limit: int | None = None,
) -> list[User]:
    """List users newest first with an optional role filter."""
    stmt = select(User).order_by(User.created_at.desc(), User.id.desc())
    if role is not None:
        stmt = stmt.where(User.role == role)
    stmt = stmt.offset(offset)
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def count_users(db: AsyncSession) -> int:
    result = await db.execute(select(func.count()).select_from(User))
    return result.scalar_one()


async def admin_exists(db: AsyncSession) -> bool:
    result = await db.execute(select(exists().where(User.role == UserRole.ADMIN.value)))
    return bool(result.scalar())


async def has_orders(db: AsyncSession, user_id: int) -> bool:
    result = await db.execute(select(exists().where(Order.user_id == user_id)))
    return bool(result.scalar())


async def set_role(db: AsyncSession, user_id: int, role: str) -> User | None:
    user = await get_user_by_id(db, user_id)
    if user is None:
        return None
    user.role = role
    await db.flush()
    return user


async def delete_user(db: AsyncSession, user_id: int) -> bool:
    """Hard-delete a user. Returns True if a row was deleted."""
    user = await get_user_by_id(db, user_id)
    if user is None:
        return False
    await db.delete(user)
    await db.flush()
    return True

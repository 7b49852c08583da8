"""
Waitlist repository.

Repository rules:
- Pure data-access logic only
- Every function receives AsyncSession explicitly
- Functions flush, but never commit
"""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.waitlist import WaitlistEntry


def normalize_email(email: str) -> str:
    return email.strip().lower()


async def join(db: AsyncSession, email: str) -> tuple[WaitlistEntry, bool]:
    """Add an email. Returns ``(entry, already_exists)``."""
    email = normalize_email(email)
    result = await db.execute(select(WaitlistEntry).where(WaitlistEntry.email == email))
    existing = result.scalar_one_or_none()
    if existing is not None:
        return existing, True

    entry = WaitlistEntry(email=email)
    db.add(entry)
    await db.flush()
    return entry, False


async def count(db: AsyncSession) -> int:
    result = await db.execute(select(func.count()).select_from(WaitlistEntry))
    return result.scalar_one()

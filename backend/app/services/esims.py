"""
eSIM lifecycle management against the partner API.

Partner calls happen first; local rows are updated only after the
partner accepted the request.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.constants import EsimStatus
from app.core.errors import EsimNotFoundError, PermissionDeniedError, SimlakError
from app.core.logging import get_logger
from app.db.models.esim import Esim
from app.db.models.user import User
from app.esim_access.client import EsimAccessClient
from app.esim_access.schemas import EsimProfile
from app.repositories import esims as esim_repository
from app.repositories import users as user_repository

logger = get_logger(__name__)


async def get_owned_esim(db: AsyncSession, iccid: str, user: User) -> Esim:
    """The eSIM if ``user`` owns it or is an admin."""
    esim = await esim_repository.get_by_iccid(db, iccid)
    if esim is None:
        raise EsimNotFoundError(iccid)
    if esim.user_id != user.id and not user.is_admin:
        raise PermissionDeniedError()
    return esim


async def _apply_profile(db: AsyncSession, iccid: str, profile: EsimProfile) -> None:
    esim = await esim_repository.get_by_iccid(db, iccid)
    if esim is None:
        return
    await esim_repository.update_from_partner(
        db,
        esim,
        status=profile.esim_status,
        data_used=profile.order_usage,
        expires_at=profile.expires_at,
    )


async def refresh_esim_status(db: AsyncSession, iccid: str, *, client: EsimAccessClient) -> EsimProfile | None:
    """Pull status, usage and expiry from the partner into the local row."""
    profile = await client.query_esim(iccid)
    if profile is not None:
        await _apply_profile(db, iccid, profile)
    return profile


async def suspend_esim(db: AsyncSession, iccid: str, *, client: EsimAccessClient) -> None:
    await client.suspend(iccid)
    logger.info("eSIM suspended", iccid=iccid)
    await refresh_esim_status(db, iccid, client=client)


async def unsuspend_esim(db: AsyncSession, iccid: str, *, client: EsimAccessClient) -> None:
    await client.unsuspend(iccid)
    logger.info("eSIM unsuspended", iccid=iccid)
    await refresh_esim_status(db, iccid, client=client)


async def _set_local_status(db: AsyncSession, iccid: str, status: EsimStatus) -> None:
    esim = await esim_repository.get_by_iccid(db, iccid)
    if esim is not None:
        await esim_repository.update_from_partner(db, esim, status=status.value)


async def cancel_esim(db: AsyncSession, iccid: str, *, client: EsimAccessClient) -> None:
    """Cancel a profile that was never installed."""
    await client.cancel(iccid)
    await _set_local_status(db, iccid, EsimStatus.CANCEL)
    logger.info("eSIM cancelled", iccid=iccid)


async def revoke_esim(db: AsyncSession, iccid: str, *, client: EsimAccessClient) -> None:
    await client.revoke(iccid)
    await _set_local_status(db, iccid, EsimStatus.REVOKED)
    logger.info("eSIM revoked", iccid=iccid)


async def refresh_all_user_esims(
    db: AsyncSession,
    clerk_id: str,
    *,
    client: EsimAccessClient,
) -> list[dict[str, Any]]:
    """Refresh every eSIM of a user; one failure does not stop the rest."""
    user = await user_repository.get_user_by_clerk_id(db, clerk_id)
    if user is None:
        return []

    results: list[dict[str, Any]] = []
    for esim in await esim_repository.list_for_user(db, user.id):
        try:
            profile = await client.query_esim(esim.iccid)
        except SimlakError as exc:
            logger.warning("eSIM refresh failed", iccid=esim.iccid, error=exc.message)
            results.append({"iccid": esim.iccid, "success": False, "error": exc.message})
            continue
        if profile is None:
            continue
        await _apply_profile(db, esim.iccid, profile)
        results.append({"iccid": esim.iccid, "success": True})
    return results


async def get_merchant_balance(client: EsimAccessClient) -> dict[str, float | int]:
    return await client.get_balance()

"""Pre-launch waitlist."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db
from app.api.schemas.waitlist import WaitlistCountResponse, WaitlistJoinRequest, WaitlistJoinResponse
from app.core.logging import get_logger
from app.repositories import waitlist as waitlist_repository

logger = get_logger(__name__)

router = APIRouter(prefix="/waitlist", tags=["Waitlist"])


@router.post("", response_model=WaitlistJoinResponse)
async def join_waitlist(payload: WaitlistJoinRequest, db: AsyncSession = Depends(get_db)) -> WaitlistJoinResponse:
    _, already_exists = await waitlist_repository.join(db, payload.email)
    if not already_exists:
        logger.info("Waitlist signup")
    return WaitlistJoinResponse(already_exists=already_exists)


@router.get("/count", response_model=WaitlistCountResponse)
async def waitlist_count(db: AsyncSession = Depends(get_db)) -> WaitlistCountResponse:
    return WaitlistCountResponse(count=await waitlist_repository.count(db))

"""eSIM endpoints for the signed-in owner (or an admin)."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db, get_esim_client
from app.api.schemas.common import SuccessResponse
from app.api.schemas.orders import EsimRefreshResult, EsimResponse, EsimStatusResponse
from app.db.models.user import User
from app.esim_access.client import EsimAccessClient
from app.repositories import esims as esim_repository
from app.services import esims as esim_service

router = APIRouter(prefix="/esims", tags=["eSIMs"])


@router.get("/me", response_model=list[EsimResponse])
async def list_my_esims(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return await esim_repository.list_for_user(db, user.id)


@router.post("/me/refresh", response_model=list[EsimRefreshResult])
async def refresh_my_esims(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
    client: EsimAccessClient = Depends(get_esim_client),
) -> list[dict]:
    return await esim_service.refresh_all_user_esims(db, user.clerk_id, client=client)


@router.get("/{iccid}", response_model=EsimResponse)
async def get_esim(
    iccid: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return await esim_service.get_owned_esim(db, iccid, user)


@router.post("/{iccid}/refresh", response_model=EsimStatusResponse)
async def refresh_esim(
    iccid: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
    client: EsimAccessClient = Depends(get_esim_client),
) -> EsimStatusResponse:
    esim = await esim_service.get_owned_esim(db, iccid, user)
    await esim_service.refresh_esim_status(db, iccid, client=client)
    return EsimStatusResponse(
        iccid=esim.iccid,
        status=esim.status,
        data_used=esim.data_used,
        expires_at=esim.expires_at,
    )


@router.post("/{iccid}/suspend", response_model=SuccessResponse)
async def suspend_esim(
    iccid: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
    client: EsimAccessClient = Depends(get_esim_client),
) -> SuccessResponse:
    await esim_service.get_owned_esim(db, iccid, user)
    await esim_service.suspend_esim(db, iccid, client=client)
    return SuccessResponse()


@router.post("/{iccid}/unsuspend", response_model=SuccessResponse)
async def unsuspend_esim(
    iccid: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
    client: EsimAccessClient = Depends(get_esim_client),
) -> SuccessResponse:
    await esim_service.get_owned_esim(db, iccid, user)
    await esim_service.unsuspend_esim(db, iccid, client=client)
    return SuccessResponse()


@router.post("/{iccid}/cancel", response_model=SuccessResponse)
async def cancel_esim(
    iccid: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
    client: EsimAccessClient = Depends(get_esim_client),
) -> SuccessResponse:
    await esim_service.get_owned_esim(db, iccid, user)
    await esim_service.cancel_esim(db, iccid, client=client)
    return SuccessResponse()


@router.post("/{iccid}/revoke", response_model=SuccessResponse)
async def revoke_esim(
    iccid: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
    client: EsimAccessClient = Depends(get_esim_client),
) -> SuccessResponse:
    await esim_service.get_owned_esim(db, iccid, user)
    await esim_service.revoke_esim(db, iccid, client=client)
    return SuccessResponse()

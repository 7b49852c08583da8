"""Signed-in user's own profile."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_clerk_id, get_current_user, get_db
from app.api.schemas.users import UserResponse, UserSyncRequest
from app.db.models.user import User
from app.services import identity as identity_service

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("/sync", response_model=UserResponse)
async def sync_current_user(
    payload: UserSyncRequest,
    db: AsyncSession = Depends(get_db),
    clerk_id: str = Depends(get_current_clerk_id),
) -> User:
    """Create or refresh the local row for the token's identity."""
    return await identity_service.sync_user(
        db,
        clerk_id=clerk_id,
        email=payload.email,
        name=payload.name,
        image_url=payload.image_url,
    )


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)) -> User:
    return current_user

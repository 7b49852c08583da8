"""Inbound identity-provider webhooks."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db
from app.api.schemas.common import MessageResponse
from app.core.config import settings
from app.services import identity as identity_service

router = APIRouter(prefix="/webhooks", tags=["Webhooks"])


@router.post("/clerk", response_model=MessageResponse)
async def clerk_webhook(request: Request, db: AsyncSession = Depends(get_db)) -> MessageResponse:
    """Verify the svix signature over the raw body, then apply the event."""
    payload = await request.body()
    event = identity_service.verify_webhook(settings.CLERK_WEBHOOK_SECRET, payload, request.headers)
    message = await identity_service.handle_clerk_event(db, event)
    return MessageResponse(message=message)

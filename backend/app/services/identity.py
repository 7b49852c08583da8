"""
Identity-provider (Clerk) user lifecycle.

Clerk owns sign-up and profile data.  Its webhooks (signed with svix) and
the signed-in client's own sync call both land in `sync_user`.
"""

from __future__ import annotations

import json
from typing import Any, Mapping

from sqlalchemy.ext.asyncio import AsyncSession
from svix.webhooks import Webhook, WebhookVerificationError

from app.core.errors import BadRequestError, SimlakError
from app.core.logging import get_logger
from app.db.models.user import User
from app.repositories import users as user_repository

logger = get_logger(__name__)

SVIX_HEADERS = ("svix-id", "svix-timestamp", "svix-signature")


class WebhookConfigError(SimlakError):
    status_code = 500

    def __init__(self) -> None:
        super().__init__("Server configuration error")


def verify_webhook(secret: str, payload: bytes, headers: Mapping[str, str]) -> dict[str, Any]:
    """Check the svix signature and return the decoded event."""
    if not secret:
        logger.error("Missing CLERK_WEBHOOK_SECRET")
        raise WebhookConfigError()

    svix_headers = {name: headers.get(name) for name in SVIX_HEADERS}
    if not all(svix_headers.values()):
        raise BadRequestError("Missing svix headers")

    try:
        Webhook(secret).verify(payload, svix_headers)
    except WebhookVerificationError as exc:
        logger.warning("Webhook verification failed", error=str(exc), svix_id=svix_headers["svix-id"])
        raise BadRequestError("Invalid signature") from exc

    return json.loads(payload)


def display_name(first_name: str | None, last_name: str | None) -> str | None:
    return " ".join(part for part in (first_name, last_name) if part) or None


async def sync_user(
    db: AsyncSession,
    *,
    clerk_id: str,
    email: str,
    name: str | None = None,
    image_url: str | None = None,
) -> User:
    user, created = await user_repository.upsert_from_identity(
        db, clerk_id=clerk_id, email=email, name=name, image_url=image_url or None
    )
    if user.email != email.lower().strip():
        logger.warning("Email already in use, kept previous email", user_id=user.id, clerk_id=clerk_id)
    logger.info("User synced", user_id=user.id, clerk_id=clerk_id, created=created)
    return user


async def delete_identity(db: AsyncSession, clerk_id: str) -> None:
    """Remove a user deleted upstream; users with orders keep their row."""
    user = await user_repository.get_user_by_clerk_id(db, clerk_id)
    if user is None:
        return
    if await user_repository.has_orders(db, user.id):
        user.clerk_id = None
        await db.flush()
        logger.info("Identity unlinked, order history kept", user_id=user.id)
        return
    await user_repository.delete_user(db, user.id)
    logger.info("User deleted", clerk_id=clerk_id)


async def handle_clerk_event(db: AsyncSession, event: Mapping[str, Any]) -> str:
    """Apply one verified webhook event; returns the response message."""
    event_type = event.get("type")
    data = event.get("data") or {}

    if event_type in ("user.created", "user.updated"):
        addresses = data.get("email_addresses") or []
        email = addresses[0].get("email_address") if addresses else None
        if not email:
            raise BadRequestError("No email found")
        await sync_user(
            db,
            clerk_id=data["id"],
            email=email,
            name=display_name(data.get("first_name"), data.get("last_name")),
            image_url=data.get("image_url"),
        )
        return "User synced"

    if event_type == "user.deleted":
        if data.get("id"):
            await delete_identity(db, data["id"])
        return "User deleted"

    logger.debug("Unhandled webhook event", event_type=event_type)
    return "Webhook received"

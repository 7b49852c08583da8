"""Shared dependencies for API routes."""

from __future__ import annotations

from typing import Any, AsyncGenerator

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import decode_session_token
from app.db.models.user import User
from app.db.session import get_db as _get_db
from app.esim_access.client import EsimAccessClient
from app.esim_access.client import get_esim_client as _build_esim_client
from app.repositories import users as user_repository

security_scheme = HTTPBearer(auto_error=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async DB session."""
    async for session in _get_db():
        yield session


async def get_esim_client() -> AsyncGenerator[EsimAccessClient, None]:
    """Yield a partner API client closed after the request."""
    async with _build_esim_client() as client:
        yield client


async def get_optional_token_payload(
    credentials: HTTPAuthorizationCredentials | None = Depends(security_scheme),
) -> dict[str, Any] | None:
    """Claims of a valid session token, or None for anonymous callers."""
    if credentials is None:
        return None
    payload = decode_session_token(credentials.credentials)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )
    return payload


async def get_current_token_payload(
    payload: dict[str, Any] | None = Depends(get_optional_token_payload),
) -> dict[str, Any]:
    """Extract and validate the session token claims from the bearer token."""
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication credentials were not provided",
        )
    return payload


async def get_current_clerk_id(
    token_payload: dict[str, Any] = Depends(get_current_token_payload),
) -> str:
    subject = token_payload.get("sub")
    if not isinstance(subject, str) or not subject:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
        )
    return subject


async def get_current_user(
    db: AsyncSession = Depends(get_db),
    clerk_id: str = Depends(get_current_clerk_id),
) -> User:
    """Resolve the local user row for the signed-in identity."""
    user = await user_repository.get_user_by_clerk_id(db, clerk_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not synced",
        )
    return user


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Unauthorized: Admin access required",
        )
    return current_user

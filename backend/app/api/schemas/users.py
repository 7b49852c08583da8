"""User request/response schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr

from app.core.constants import UserRole


class UserSyncRequest(BaseModel):
    email: EmailStr
    name: str | None = None
    image_url: str | None = None


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str | None
    clerk_id: str | None
    image_url: str | None
    role: UserRole
    is_admin: bool
    created_at: datetime

"""Waitlist schemas."""

from __future__ import annotations

from pydantic import BaseModel, EmailStr


class WaitlistJoinRequest(BaseModel):
    email: EmailStr


class WaitlistJoinResponse(BaseModel):
    success: bool = True
    already_exists: bool


class WaitlistCountResponse(BaseModel):
    count: int

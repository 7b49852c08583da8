"""Cart request/response schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field

from app.api.schemas.catalog import PackageResponse
from app.core.constants import CartAction


class AddToCartRequest(BaseModel):
    package_code: str = Field(..., min_length=1)
    quantity: int = Field(default=1, ge=1)


class UpdateCartItemRequest(BaseModel):
    quantity: int


class LinkCartRequest(BaseModel):
    user_id: int


class CartLine(BaseModel):
    package_code: str
    quantity: int
    package: PackageResponse
    subtotal: int


class CartResponse(BaseModel):
    items: list[CartLine]
    total: int
    item_count: int


class AddToCartResponse(BaseModel):
    success: bool = True
    action: CartAction

"""Cart endpoints, keyed by the client's opaque session id."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db
from app.api.schemas.cart import (
    AddToCartRequest,
    AddToCartResponse,
    CartResponse,
    LinkCartRequest,
    UpdateCartItemRequest,
)
from app.api.schemas.common import SuccessResponse
from app.services import cart as cart_service

router = APIRouter(prefix="/cart", tags=["Cart"])


@router.get("/{session_id}", response_model=CartResponse)
async def get_cart(session_id: str, db: AsyncSession = Depends(get_db)) -> dict:
    return await cart_service.get_cart(db, session_id)


@router.post("/{session_id}/items", response_model=AddToCartResponse)
async def add_to_cart(
    session_id: str,
    payload: AddToCartRequest,
    db: AsyncSession = Depends(get_db),
) -> AddToCartResponse:
    action = await cart_service.add_to_cart(db, session_id, payload.package_code, payload.quantity)
    return AddToCartResponse(action=action)


@router.put("/{session_id}/items/{package_code}", response_model=SuccessResponse)
async def update_cart_item(
    session_id: str,
    package_code: str,
    payload: UpdateCartItemRequest,
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    await cart_service.update_cart_item(db, session_id, package_code, payload.quantity)
    return SuccessResponse()


@router.delete("/{session_id}/items/{package_code}", response_model=SuccessResponse)
async def remove_from_cart(
    session_id: str,
    package_code: str,
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    await cart_service.remove_from_cart(db, session_id, package_code)
    return SuccessResponse()


@router.delete("/{session_id}", response_model=SuccessResponse)
async def clear_cart(session_id: str, db: AsyncSession = Depends(get_db)) -> SuccessResponse:
    await cart_service.clear_cart(db, session_id)
    return SuccessResponse()


@router.post("/{session_id}/link", response_model=SuccessResponse)
async def link_cart_to_user(
    session_id: str,
    payload: LinkCartRequest,
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    await cart_service.link_cart_to_user(db, session_id, payload.user_id)
    return SuccessResponse()

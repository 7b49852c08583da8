"""
Checkout, order lookups and fulfillment.

Order ids and transaction ids are unguessable, so the confirmation page
of a guest checkout can read and fulfil its own order without a session.
"""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db, get_esim_client, get_optional_token_payload
from app.api.schemas.orders import (
    CheckoutRequest,
    CheckoutResponse,
    EsimResponse,
    FetchEsimsResponse,
    FulfillmentResponse,
    OrderResponse,
)
from app.core.errors import OrderNotFoundError
from app.db.models.user import User
from app.esim_access.client import EsimAccessClient
from app.repositories import esims as esim_repository
from app.repositories import orders as order_repository
from app.services import fulfillment as fulfillment_service
from app.services import orders as order_service

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.post("/checkout", response_model=CheckoutResponse, status_code=201)
async def checkout(
    payload: CheckoutRequest,
    db: AsyncSession = Depends(get_db),
    token_payload: dict[str, Any] | None = Depends(get_optional_token_payload),
) -> dict:
    """Turn the session cart into a paid order; a signed-in buyer is linked by identity."""
    return await order_service.create_order_from_cart(
        db,
        session_id=payload.session_id,
        customer_email=payload.customer_email,
        clerk_id=token_payload.get("sub") if token_payload else None,
    )


@router.get("/me", response_model=list[OrderResponse])
async def list_my_orders(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return await order_repository.list_for_user(db, user.id)


@router.get("/by-transaction/{transaction_id}", response_model=OrderResponse)
async def get_order_by_transaction(transaction_id: str, db: AsyncSession = Depends(get_db)):
    order = await order_repository.get_by_transaction_id(db, transaction_id)
    if order is None:
        raise OrderNotFoundError(transaction_id)
    return order


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    return await order_service.get_order_or_404(db, order_id)


@router.get("/{order_id}/esims", response_model=list[EsimResponse])
async def list_order_esims(order_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    await order_service.get_order_or_404(db, order_id)
    return await esim_repository.list_for_order(db, order_id)


@router.post("/{order_id}/fulfill", response_model=FulfillmentResponse)
async def fulfill_order(
    order_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    client: EsimAccessClient = Depends(get_esim_client),
) -> dict:
    """Place the partner order and collect whatever profiles are ready."""
    return await fulfillment_service.fulfill_order(db, order_id, client=client)


@router.post("/{order_id}/fetch-esims", response_model=FetchEsimsResponse)
async def fetch_order_esims(
    order_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    client: EsimAccessClient = Depends(get_esim_client),
) -> dict:
    return await fulfillment_service.fetch_order_esims(db, order_id, client=client)

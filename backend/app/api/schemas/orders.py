"""Order and eSIM request/response schemas."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr

from app.core.constants import OrderStatus


class CheckoutRequest(BaseModel):
    session_id: str
    customer_email: EmailStr


class CheckoutResponse(BaseModel):
    order_id: uuid.UUID
    transaction_id: str
    total_amount: int


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    package_code: str
    package_name: str
    location_name: str | None
    quantity: int
    price: int
    volume: int
    duration: int


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: int | None
    order_no: str | None
    transaction_id: str
    status: OrderStatus
    total_amount: int
    customer_email: str | None
    stripe_session_id: str | None
    items: list[OrderItemResponse]
    created_at: datetime
    updated_at: datetime


class FulfillmentResponse(BaseModel):
    success: bool
    order_no: str
    esim_count: int
    note: str | None = None


class FetchEsimsResponse(BaseModel):
    fetched: int
    created: int


class EsimResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    order_id: uuid.UUID
    user_id: int | None
    iccid: str
    imsi: str | None
    activation_code: str | None
    qr_code_url: str | None
    smdp_address: str | None
    status: str
    package_code: str
    package_name: str
    location_name: str
    data_used: int
    data_total: int
    duration: int
    activated_at: datetime | None
    expires_at: datetime | None
    created_at: datetime


class EsimRefreshResult(BaseModel):
    iccid: str
    success: bool
    error: str | None = None


class EsimStatusResponse(BaseModel):
    iccid: str
    status: str
    data_used: int | None = None
    expires_at: datetime | None = None

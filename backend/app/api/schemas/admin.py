"""Admin request/response schemas."""

from __future__ import annotations

from pydantic import BaseModel, EmailStr, Field

from app.api.schemas.catalog import PackageResponse
from app.api.schemas.orders import EsimResponse, OrderResponse
from app.api.schemas.users import UserResponse
from app.core.constants import OrderStatus, UserRole


class DashboardStats(BaseModel):
    total_users: int
    total_orders: int
    total_esims: int
    total_packages: int
    total_revenue: int
    recent_orders: int
    recent_revenue: int
    active_esims: int
    orders_by_status: dict[str, int]


class UserSummary(BaseModel):
    email: str
    name: str | None


class AdminUserRow(BaseModel):
    user: UserResponse
    order_count: int
    esim_count: int
    total_spent: int


class AdminOrderRow(BaseModel):
    order: OrderResponse
    user: UserSummary | None
    esim_count: int


class AdminEsimRow(BaseModel):
    esim: EsimResponse
    user: UserSummary | None
    transaction_id: str | None


class RoleUpdateRequest(BaseModel):
    role: UserRole


class OrderStatusUpdateRequest(BaseModel):
    status: OrderStatus


class PackageUpdateRequest(BaseModel):
    retail_price: int = Field(..., ge=0)
    description: str | None = None


class ManualPackageRequest(BaseModel):
    package_code: str = Field(..., min_length=1)
    name: str
    location_code: str = Field(..., min_length=2)
    location_name: str
    price: int = Field(..., ge=0)
    retail_price: int = Field(..., ge=0)
    currency_code: str = "USD"
    volume: int = Field(..., ge=0)
    duration: int = Field(..., ge=0)
    active_type: str | None = None
    description: str | None = None


class ManualPackageResponse(BaseModel):
    package: PackageResponse
    updated: bool
    country_created: bool


class CountryCreateRequest(BaseModel):
    code: str = Field(..., min_length=2, max_length=64)
    name: str
    region: str
    flag_emoji: str
    popular: bool = False


class CountryUpdateRequest(BaseModel):
    name: str | None = None
    region: str | None = None
    flag_emoji: str | None = None
    popular: bool | None = None


class BundleUpdateRequest(BaseModel):
    custom_name: str | None = None
    description: str | None = None
    included_countries: list[str] | None = None


class BundleDeleteResponse(BaseModel):
    success: bool = True
    packages_deleted: int


class SyncResponse(BaseModel):
    synced: int
    countries: int


class BalanceResponse(BaseModel):
    balance: float
    balance_dollars: float
    balance_cents: int


class PackagePreview(BaseModel):
    package_code: str
    name: str
    location_code: str
    location_name: str
    price: int
    retail_price: int
    currency_code: str
    volume: int
    duration: int
    active_type: str | None
    description: str | None


class MakeAdminRequest(BaseModel):
    email: EmailStr

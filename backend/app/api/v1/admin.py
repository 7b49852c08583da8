"""
Administrator endpoints.

Everything under ``/admin`` requires an admin session except
``make-admin``, which has its own bootstrap rule.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db, get_esim_client, require_admin
from app.api.schemas.admin import (
    AdminEsimRow,
    AdminOrderRow,
    AdminUserRow,
    BalanceResponse,
    BundleDeleteResponse,
    BundleUpdateRequest,
    CountryCreateRequest,
    CountryUpdateRequest,
    DashboardStats,
    MakeAdminRequest,
    ManualPackageRequest,
    ManualPackageResponse,
    OrderStatusUpdateRequest,
    PackagePreview,
    PackageUpdateRequest,
    RoleUpdateRequest,
    SyncResponse,
)
from app.api.schemas.catalog import CountryResponse, PackageResponse
from app.api.schemas.common import SuccessResponse
from app.api.schemas.orders import OrderResponse
from app.api.schemas.users import UserResponse
from app.catalog.sync import fetch_package_from_api, sync_packages
from app.db.models.user import User
from app.esim_access.client import EsimAccessClient
from app.repositories import countries as country_repository
from app.repositories import packages as package_repository
from app.services import admin as admin_service
from app.services import esims as esim_service
from app.services import orders as order_service

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    dependencies=[Depends(require_admin)],
)

# Outside the admin guard: the first admin promotes themselves
bootstrap_router = APIRouter(prefix="/admin", tags=["Admin"])


@bootstrap_router.post("/make-admin", response_model=UserResponse)
async def make_admin(
    payload: MakeAdminRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> User:
    return await admin_service.make_admin(db, caller=current_user, email=payload.email)


# ── Dashboard ─────────────────────────────────


@router.get("/stats", response_model=DashboardStats)
async def dashboard_stats(db: AsyncSession = Depends(get_db)) -> dict:
    return await admin_service.dashboard_stats(db)


# ── Users ─────────────────────────────────────


@router.get("/users", response_model=list[AdminUserRow])
async def list_users(db: AsyncSession = Depends(get_db)) -> list[dict]:
    return await admin_service.list_users_with_stats(db)


@router.patch("/users/{user_id}/role", response_model=UserResponse)
async def update_user_role(
    user_id: int,
    payload: RoleUpdateRequest,
    db: AsyncSession = Depends(get_db),
) -> User:
    return await admin_service.update_user_role(db, user_id, payload.role)


@router.delete("/users/{user_id}", response_model=SuccessResponse)
async def delete_user(user_id: int, db: AsyncSession = Depends(get_db)) -> SuccessResponse:
    await admin_service.delete_user(db, user_id)
    return SuccessResponse()


# ── Orders / eSIMs ────────────────────────────


@router.get("/orders", response_model=list[AdminOrderRow])
async def list_orders(db: AsyncSession = Depends(get_db)) -> list[dict]:
    return await admin_service.list_orders(db)


@router.patch("/orders/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: uuid.UUID,
    payload: OrderStatusUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    return await order_service.update_order_status(db, order_id, payload.status)


@router.get("/esims", response_model=list[AdminEsimRow])
async def list_esims(db: AsyncSession = Depends(get_db)) -> list[dict]:
    return await admin_service.list_esims(db)


# ── Packages ──────────────────────────────────


@router.get("/packages", response_model=list[PackageResponse])
async def list_packages(db: AsyncSession = Depends(get_db)):
    return await package_repository.list_all(db)


@router.post("/packages", response_model=ManualPackageResponse)
async def add_package(payload: ManualPackageRequest, db: AsyncSession = Depends(get_db)) -> dict:
    return await admin_service.add_package_manual(db, **payload.model_dump())


@router.get("/packages/preview/{package_code}", response_model=PackagePreview)
async def preview_partner_package(
    package_code: str,
    client: EsimAccessClient = Depends(get_esim_client),
) -> dict:
    """Look a package up on the partner API without saving it."""
    return await fetch_package_from_api(client, package_code)


@router.patch("/packages/{package_id}", response_model=PackageResponse)
async def update_package(
    package_id: int,
    payload: PackageUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    return await admin_service.update_package(
        db, package_id, retail_price=payload.retail_price, description=payload.description
    )


@router.delete("/packages/{package_id}", response_model=SuccessResponse)
async def delete_package(package_id: int, db: AsyncSession = Depends(get_db)) -> SuccessResponse:
    await admin_service.delete_package(db, package_id)
    return SuccessResponse()


# ── Countries ─────────────────────────────────


@router.get("/countries", response_model=list[CountryResponse])
async def list_countries(db: AsyncSession = Depends(get_db)):
    return await country_repository.list_countries(db)


@router.post("/countries", response_model=CountryResponse, status_code=201)
async def create_country(payload: CountryCreateRequest, db: AsyncSession = Depends(get_db)):
    return await admin_service.create_country(db, **payload.model_dump())


@router.patch("/countries/{country_id}", response_model=CountryResponse)
async def update_country(
    country_id: int,
    payload: CountryUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    return await admin_service.update_country(db, country_id, **payload.model_dump(exclude_unset=True))


@router.delete("/countries/{country_id}", response_model=SuccessResponse)
async def delete_country(country_id: int, db: AsyncSession = Depends(get_db)) -> SuccessResponse:
    await admin_service.delete_country(db, country_id)
    return SuccessResponse()


# ── Bundles ───────────────────────────────────


@router.get("/bundles", response_model=list[CountryResponse])
async def list_bundles(db: AsyncSession = Depends(get_db)) -> list[dict]:
    return await admin_service.list_bundles(db)


@router.patch("/bundles/{bundle_id}", response_model=CountryResponse)
async def update_bundle(
    bundle_id: int,
    payload: BundleUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    return await admin_service.update_bundle(db, bundle_id, **payload.model_dump(exclude_unset=True))


@router.delete("/bundles/{bundle_id}", response_model=BundleDeleteResponse)
async def delete_bundle(bundle_id: int, db: AsyncSession = Depends(get_db)) -> BundleDeleteResponse:
    removed = await admin_service.delete_bundle(db, bundle_id)
    return BundleDeleteResponse(packages_deleted=removed)


# ── Partner account ───────────────────────────


@router.get("/balance", response_model=BalanceResponse)
async def merchant_balance(client: EsimAccessClient = Depends(get_esim_client)) -> dict:
    return await esim_service.get_merchant_balance(client)


@router.post("/sync", response_model=SyncResponse)
async def sync_catalog(
    db: AsyncSession = Depends(get_db),
    client: EsimAccessClient = Depends(get_esim_client),
) -> dict:
    """Run a full catalog sync inline."""
    result = await sync_packages(db, client)
    return result.as_dict()

"""Public catalog endpoints: destinations, bundles and packages."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db
from app.api.schemas.catalog import CountryResponse, MarqueeCountry, PackageLookupRequest, PackageResponse
from app.catalog import service as catalog_service
from app.core.errors import CountryNotFoundError, PackageNotFoundError

router = APIRouter(tags=["Catalog"])


# ── Countries ─────────────────────────────────


@router.get("/countries", response_model=list[CountryResponse])
async def list_countries(
    region: str | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
) -> list[dict]:
    if region is not None:
        return await catalog_service.list_countries_by_region(db, region)
    return await catalog_service.list_countries(db)


@router.get("/countries/marquee", response_model=list[MarqueeCountry])
async def list_marquee_countries(db: AsyncSession = Depends(get_db)) -> list[dict]:
    return await catalog_service.list_marquee_countries(db)


@router.get("/countries/popular", response_model=list[CountryResponse])
async def list_popular_countries(db: AsyncSession = Depends(get_db)) -> list[dict]:
    return await catalog_service.list_popular_countries(db)


@router.get("/countries/{code}", response_model=CountryResponse)
async def get_country(code: str, db: AsyncSession = Depends(get_db)) -> dict:
    country = await catalog_service.get_country(db, code)
    if country is None:
        raise CountryNotFoundError(code.upper())
    return country


@router.get("/countries/{code}/packages", response_model=list[PackageResponse])
async def list_country_packages(code: str, db: AsyncSession = Depends(get_db)):
    return await catalog_service.list_packages_for_location(db, code)


# ── Bundles ───────────────────────────────────


@router.get("/bundles", response_model=list[CountryResponse])
async def list_bundles(db: AsyncSession = Depends(get_db)) -> list[dict]:
    return await catalog_service.list_bundles(db)


@router.get("/bundles/{code_or_slug}", response_model=CountryResponse)
async def get_bundle(code_or_slug: str, db: AsyncSession = Depends(get_db)) -> dict:
    bundle = await catalog_service.get_bundle(db, code_or_slug)
    if bundle is None:
        raise CountryNotFoundError(code_or_slug)
    return bundle


@router.get("/bundles/{code_or_slug}/packages", response_model=list[PackageResponse])
async def list_bundle_packages(code_or_slug: str, db: AsyncSession = Depends(get_db)):
    return await catalog_service.list_bundle_packages(db, code_or_slug)


# ── Packages ──────────────────────────────────


@router.get("/packages/search", response_model=list[PackageResponse])
async def search_packages(
    q: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db),
):
    return await catalog_service.search_packages(db, q)


@router.post("/packages/lookup", response_model=list[PackageResponse])
async def lookup_packages(payload: PackageLookupRequest, db: AsyncSession = Depends(get_db)):
    """Resolve several package codes at once; unknown codes are skipped."""
    return await catalog_service.get_packages(db, payload.package_codes)


@router.get("/packages/{package_code}", response_model=PackageResponse)
async def get_package(package_code: str, db: AsyncSession = Depends(get_db)):
    package = await catalog_service.get_package(db, package_code)
    if package is None:
        raise PackageNotFoundError(package_code)
    return package

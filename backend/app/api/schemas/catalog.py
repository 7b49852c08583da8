"""Catalog request/response schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class CountryResponse(BaseModel):
    """A destination or bundle with live package aggregates."""

    model_config = ConfigDict(from_attributes=True)

    id: int | None = None
    code: str
    name: str
    region: str | None = None
    flag_emoji: str | None = None
    min_price: int | None = None
    package_count: int = 0
    popular: bool = False
    custom_name: str | None = None
    slug: str | None = None
    included_countries: list[str] | None = None
    description: str | None = None


class MarqueeCountry(BaseModel):
    name: str
    flag_emoji: str


class PackageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    package_code: str
    name: str
    location_code: str
    location_name: str | None
    price: int
    retail_price: int
    currency_code: str
    volume: int
    duration: int
    active_type: str | None
    description: str | None
    last_synced: datetime


class PackageLookupRequest(BaseModel):
    package_codes: list[str]

"""
Pydantic models for partner API payloads.

Only the fields this service reads are declared; everything else the
partner sends is ignored.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class _PartnerModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class PartnerPackage(_PartnerModel):
    package_code: str = Field(alias="packageCode")
    name: str
    price: int
    currency_code: str = Field(default="USD", alias="currencyCode")
    volume: int
    duration: int
    location_code: str = Field(validation_alias=AliasChoices("locationCode", "location"))
    location_name: str = Field(default="", validation_alias=AliasChoices("locationName", "location"))
    active_type: Optional[str] = Field(default=None, alias="activeType")
    description: Optional[str] = None

    @field_validator("active_type", mode="before")
    @classmethod
    def _stringify_active_type(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)


class ProfilePackage(_PartnerModel):
    package_code: Optional[str] = Field(default=None, alias="packageCode")
    duration: Optional[int] = None
    volume: Optional[int] = None
    location_code: Optional[str] = Field(default=None, alias="locationCode")


class EsimProfile(_PartnerModel):
    iccid: str
    imsi: Optional[str] = None
    activation_code: Optional[str] = Field(default=None, alias="ac")
    qr_code_url: Optional[str] = Field(default=None, alias="qrCodeUrl")
    smdp_address: Optional[str] = Field(default=None, alias="smdpAddress")
    esim_status: str = Field(alias="esimStatus")
    smdp_status: Optional[str] = Field(default=None, alias="smdpStatus")
    order_no: Optional[str] = Field(default=None, alias="orderNo")
    total_volume: int = Field(default=0, alias="totalVolume")
    order_usage: Optional[int] = Field(default=None, alias="orderUsage")
    expired_time: Optional[str] = Field(default=None, alias="expiredTime")
    package_list: list[ProfilePackage] = Field(default_factory=list, alias="packageList")

    @property
    def expires_at(self) -> Optional[datetime]:
        if not self.expired_time:
            return None
        try:
            return datetime.fromisoformat(self.expired_time)
        except ValueError:
            return None

    @property
    def first_package(self) -> Optional[ProfilePackage]:
        return self.package_list[0] if self.package_list else None


class PackageInfo(_PartnerModel):
    """One line of an order request (``packageInfoList``)."""

    package_code: str = Field(serialization_alias="packageCode")
    count: int
    price: int  # partner units

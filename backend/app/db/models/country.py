"""
Country model — one row per catalog location.

A row is either a single destination (two-letter ISO code) or a
multi-country bundle (region == "Bundle", partner codes such as "EU-42").
Bundles carry admin-editable presentation fields: custom_name, slug,
description and included_countries.
"""

from typing import Optional

from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.core.constants import BUNDLE_REGION
from app.db.models.base import Base, JSONType


class Country(Base):
    __tablename__ = "countries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    region: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    flag_emoji: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)

    # Aggregates refreshed by catalog sync
    min_price: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # retail cents
    package_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    popular: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # ── Admin-managed bundle fields (never touched by sync) ──
    custom_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    slug: Mapped[Optional[str]] = mapped_column(String(255), unique=True, nullable=True)
    included_countries: Mapped[Optional[list]] = mapped_column(JSONType, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    @property
    def is_bundle(self) -> bool:
        return self.region == BUNDLE_REGION

    @property
    def display_name(self) -> str:
        return self.custom_name or self.name

    def __repr__(self) -> str:
        return f"<Country {self.code} {self.name!r} region={self.region}>"

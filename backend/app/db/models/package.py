"""
Package model — an eSIM data plan mirrored from the partner catalog.

`price` is the partner wholesale price, `retail_price` what customers pay.
Both are integer cents.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.core.constants import DEFAULT_CURRENCY
from app.db.models.base import Base, utcnow


class Package(Base):
    __tablename__ = "packages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    package_code: Mapped[str] = mapped_column(
        String(128), unique=True, nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    location_code: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    location_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Pricing (cents)
    price: Mapped[int] = mapped_column(Integer, nullable=False)
    retail_price: Mapped[int] = mapped_column(Integer, nullable=False)
    currency_code: Mapped[str] = mapped_column(
        String(8), default=DEFAULT_CURRENCY, nullable=False
    )

    volume: Mapped[int] = mapped_column(BigInteger, nullable=False)  # bytes
    duration: Mapped[int] = mapped_column(Integer, nullable=False)  # days
    active_type: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    last_synced: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<Package {self.package_code} {self.location_code} {self.retail_price}c>"

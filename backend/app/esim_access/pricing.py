"""
Price-unit conversions.

The partner expresses money in 1/10,000 of the currency unit
(``15000`` = $1.50).  Everything stored locally is integer cents.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal

from app.core.config import settings
from app.core.constants import API_PRICE_SCALE

_CENTS_FACTOR = API_PRICE_SCALE // 100


def _round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def api_price_to_cents(api_price: int | float) -> int:
    return _round_half_up(Decimal(str(api_price)) / _CENTS_FACTOR)


def cents_to_api_price(cents: int) -> int:
    return cents * _CENTS_FACTOR


def retail_price(wholesale_cents: int, markup_percent: int | None = None) -> int:
    """Apply the retail markup, rounding up to the next cent."""
    markup = settings.RETAIL_MARKUP_PERCENT if markup_percent is None else markup_percent
    return math.ceil(wholesale_cents * (100 + markup) / 100)


def balance_summary(raw_balance: int | float) -> dict[str, float | int]:
    """Raw partner balance plus dollar and cent views."""
    dollars = raw_balance / API_PRICE_SCALE
    return {
        "balance": raw_balance,
        "balance_dollars": dollars,
        "balance_cents": api_price_to_cents(raw_balance),
    }

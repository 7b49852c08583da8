"""Tests for partner price-unit conversions and retail markup."""

import pytest

from app.core.config import settings
from app.esim_access.pricing import api_price_to_cents, balance_summary, cents_to_api_price, retail_price


class TestApiPriceToCents:
    @pytest.mark.parametrize(
        ("api_price", "cents"),
        [
            (15000, 150),
            (15049, 150),
            (15050, 151),
            (50, 1),
            (49, 0),
            (0, 0),
        ],
    )
    def test_rounds_half_up(self, api_price, cents):
        assert api_price_to_cents(api_price) == cents

    def test_cents_to_api_price(self):
        assert cents_to_api_price(150) == 15000
        assert cents_to_api_price(0) == 0


class TestRetailPrice:
    def test_default_markup_is_seventy_percent(self):
        assert settings.RETAIL_MARKUP_PERCENT == 70
        assert retail_price(100) == 170

    def test_rounds_up_to_next_cent(self):
        # 101 * 1.7 = 171.7
        assert retail_price(101) == 172

    def test_explicit_markup(self):
        assert retail_price(1000, markup_percent=25) == 1250
        assert retail_price(999, markup_percent=0) == 999

    def test_markup_follows_settings(self, monkeypatch):
        monkeypatch.setattr(settings, "RETAIL_MARKUP_PERCENT", 50)

        assert retail_price(200) == 300


class TestBalanceSummary:
    def test_views(self):
        summary = balance_summary(123456)

        assert summary["balance"] == 123456
        assert summary["balance_dollars"] == pytest.approx(12.3456)
        assert summary["balance_cents"] == 1235

    def test_zero(self):
        assert balance_summary(0) == {"balance": 0, "balance_dollars": 0.0, "balance_cents": 0}

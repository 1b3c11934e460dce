"""Tests for scraped price text parsing."""

import pytest

from signal_core.parsing import parse_price_text


class TestParsePriceText:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("1234.56", 1234.56),
            ("$ 1,234.56", 1234.56),
            ("  42 ", 42.0),
            ("0.00012 BTC", 0.00012),
            ("1.5 ETH", 1.5),  # trailing 'E' is not an exponent
            ("2.5e-3", 0.0025),
            ("-12.5", -12.5),
            ("3-4", 3.0),
        ],
    )
    def test_parses(self, text, expected):
        assert parse_price_text(text) == pytest.approx(expected)

    @pytest.mark.parametrize("text", [None, "", "   ", "n/a", "price", "--"])
    def test_unparseable_is_none(self, text):
        assert parse_price_text(text) is None

    def test_overflow_is_none(self):
        assert parse_price_text("1e500") is None

"""Tests for the bounded rolling price history."""

import math

import pytest

from signal_core.models import PricePoint, RollingSeries, is_valid_price, to_timestamp


class TestRollingSeries:
    """Tests for RollingSeries."""

    def test_empty(self):
        series = RollingSeries(max_history=5)
        assert len(series) == 0
        assert series.last() is None
        assert series.first() is None
        assert series.as_array() == []

    def test_push_appends_in_order(self):
        series = RollingSeries(max_history=5)
        assert series.push(1.0, 1000)
        assert series.push(2.0, 2000)
        assert series.push(3.0, 3000)

        assert series.as_array() == [1.0, 2.0, 3.0]
        assert series.last() == 3.0
        assert series.first() == 1.0
        assert series.points[0] == PricePoint(timestamp=1000, value=1.0)

    def test_push_defaults_timestamp_to_now(self):
        series = RollingSeries()
        series.push(10.0)
        assert series.points[0].timestamp > 1_600_000_000_000

    def test_evicts_oldest_first(self):
        series = RollingSeries(max_history=3)
        for i in range(1, 6):
            series.push(float(i), i)

        assert len(series) == 3
        assert series.as_array() == [3.0, 4.0, 5.0]

    @pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf, "abc", None])
    def test_rejects_non_finite(self, bad):
        series = RollingSeries(max_history=3)
        series.push(1.0, 1)

        assert series.push(bad) is False
        assert series.as_array() == [1.0]

    def test_accepts_numeric_strings_and_ints(self):
        series = RollingSeries()
        assert series.push(5)
        assert series.push("6.5")
        assert series.as_array() == [5.0, 6.5]

    def test_length_never_exceeds_max_history(self):
        series = RollingSeries(max_history=7)
        for i in range(100):
            series.push(100.0 + (i % 13) - 6)
            assert len(series) <= 7

    def test_tail(self):
        series = RollingSeries()
        for v in [1.0, 2.0, 3.0, 4.0]:
            series.push(v)
        assert series.tail(2) == [3.0, 4.0]
        assert series.tail(10) == [1.0, 2.0, 3.0, 4.0]
        assert series.tail(0) == []

    def test_clear(self):
        series = RollingSeries()
        series.push(1.0)
        series.clear()
        assert len(series) == 0

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            RollingSeries(max_history=0)

    def test_price_point_is_immutable(self):
        point = PricePoint(timestamp=1, value=2.0)
        with pytest.raises(AttributeError):
            point.value = 3.0  # type: ignore[misc]


class TestValueChecks:
    @pytest.mark.parametrize("value", [0.01, 1, 1e9, "12.5"])
    def test_valid_prices(self, value):
        assert is_valid_price(value)

    @pytest.mark.parametrize("value", [0, -1.0, math.nan, math.inf, None, "x", True, False])
    def test_invalid_prices(self, value):
        assert not is_valid_price(value)

    @pytest.mark.parametrize("value,expected", [(1000, 1000), (1000.9, 1000), ("42", 42)])
    def test_timestamps(self, value, expected):
        assert to_timestamp(value) == expected

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf, None, "soon", True])
    def test_invalid_timestamps(self, value):
        assert to_timestamp(value) is None

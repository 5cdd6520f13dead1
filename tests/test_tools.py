"""
Tests for the builtin tools.

These run locally without external services.
"""

from datetime import datetime

import pytest

from flowlynk.tools import calculate, current_time, default_registry


class TestCalculate:
    """Tests for the calculate tool."""

    def test_basic_arithmetic(self):
        assert calculate("2 + 2") == 4

    def test_division(self):
        assert calculate("100 / 4") == 25

    def test_float_result(self):
        assert calculate("1 / 4") == pytest.approx(0.25)

    def test_caret_power(self):
        assert calculate("2^10") == 1024

    def test_factorial(self):
        assert calculate("5!") == 120

    def test_sqrt_function(self):
        assert calculate("sqrt(144)") == 12

    def test_degrees(self):
        assert calculate("sin(30 degrees)") == pytest.approx(0.5)

    def test_ceil(self):
        assert calculate("ceil(2.1)") == 3

    def test_empty_expression(self):
        with pytest.raises(ValueError, match="empty"):
            calculate("   ")

    def test_invalid_expression(self):
        with pytest.raises(ValueError):
            calculate("2 +* ")

    def test_handler_output(self):
        tool = default_registry().get("calculate")
        assert tool.invoke({"expression": "3 * 3"}) == {"expression": "3 * 3", "result": 9}


class TestCurrentTime:
    def test_utc(self):
        parsed = datetime.fromisoformat(current_time("UTC"))
        assert parsed.utcoffset().total_seconds() == 0

    def test_named_zone(self):
        parsed = datetime.fromisoformat(current_time("Asia/Tokyo"))
        assert parsed.utcoffset().total_seconds() == 9 * 3600

    def test_unknown_zone(self):
        with pytest.raises(ValueError, match="Unknown timezone"):
            current_time("Mars/Olympus_Mons")

    def test_handler_defaults_to_utc(self):
        tool = default_registry().get("current_time")
        assert tool.invoke({})["timezone"] == "UTC"

# tests/test_numbers.py
"""Tests for number formatting, rounding and digit grouping."""

import math

import pytest

from manus.core.numbers import (
    add_separators,
    as_float,
    as_integer,
    format_number,
    group_digits,
    round_value,
    separate_numbers_in_text,
)


class TestFormatNumber:
    @pytest.mark.parametrize("value,expected", [
        (3, "3"),
        (3.0, "3"),
        (-2.5, "-2.5"),
        (0.1, "0.1"),
        (1e-7, "0.0000001"),
        (True, "true"),
        (False, "false"),
    ])
    def test_format_number(self, value, expected):
        assert format_number(value) == expected

    def test_large_float_is_not_scientific(self):
        assert "e" not in format_number(1.5e20)


class TestRoundValue:
    def test_positive_decimals(self):
        assert round_value(1.234, 1) == 1.2

    def test_zero_decimals_rounds_to_integer(self):
        assert round_value(1.6, 0) == 2.0

    def test_negative_decimals_round_to_powers_of_ten(self):
        assert round_value(8699.0, -3) == 9000.0
        assert round_value(1234.0, -2) == 1200.0

    def test_ties_go_away_from_zero(self):
        """Half-way values round away from zero for both signs."""
        assert round_value(2.5, 0) == 3.0
        assert round_value(-2.5, 0) == -3.0

    def test_non_finite_values_are_returned_unchanged(self):
        assert round_value(math.inf, 2) == math.inf
        assert round_value(-math.inf, -3) == -math.inf
        assert math.isnan(round_value(math.nan, 1))

    def test_scaling_past_float_range(self):
        assert round_value(1e307, 2) == 1e307
        assert round_value(1.5, 400) == 1.5
        assert round_value(12345.0, -400) == 0.0


class TestSeparators:
    def test_group_digits_keeps_sign_and_fraction(self):
        assert group_digits("-1234567.891", ",") == "-1,234,567.891"

    def test_short_numbers_are_unchanged(self):
        assert group_digits("999", ",") == "999"

    def test_add_separators(self):
        assert add_separators(12345.678, ",") == "12,345.678"
        assert add_separators(1000000, " ") == "1 000 000"
        assert add_separators(10000, ",") == "10,000"
        assert add_separators(123456.78901, ",") == "123,456.78901"
        assert add_separators(123456, "\\,") == "123\\,456"

    def test_numbers_in_text(self):
        text = "Data are 12345 years old with a mean of 1.4858"
        assert separate_numbers_in_text(text, ",") == "Data are 12,345 years old with a mean of 1.4858"

    def test_trailing_period_is_kept(self):
        assert separate_numbers_in_text("It was 10000.", ",") == "It was 10,000."

    def test_text_without_numbers_is_untouched(self):
        assert separate_numbers_in_text("no numbers here.", ",") == "no numbers here."


class TestParsing:
    @pytest.mark.parametrize("value,expected", [
        (3, 3),
        ("-2", -2),
        (" 7 ", 7),
        (2.0, None),
        ("2.5", None),
        (True, None),
        (None, None),
    ])
    def test_as_integer(self, value, expected):
        assert as_integer(value) == expected

    @pytest.mark.parametrize("value,expected", [
        (3, 3.0),
        ("1.234", 1.234),
        ("abc", None),
        (False, None),
        (10 ** 400, None),
    ])
    def test_as_float(self, value, expected):
        assert as_float(value) == expected

"""Tests for lenient cell coercion (invoice_ingestion/domain/coercion.py)."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from invoice_ingestion.domain.coercion import (
    coerce_date,
    coerce_decimal,
    coerce_int,
    coerce_optional_str,
    coerce_str,
)

TODAY = date(2024, 3, 15)


class TestCoerceStr:

    def test_none_is_empty(self):
        assert coerce_str(None) == ""

    def test_strips(self):
        assert coerce_str("  INV-1 ") == "INV-1"

    def test_integral_float_drops_fraction(self):
        assert coerce_str(12345678.0) == "12345678"

    def test_optional_blank_is_none(self):
        assert coerce_optional_str("   ") is None
        assert coerce_optional_str("note") == "note"


class TestCoerceDate:

    @pytest.mark.parametrize(
        "value",
        ["2024-01-15", "2024/01/15", "15/01/2024", "15-01-2024", "2024-01-15T08:00:00"],
    )
    def test_accepted_text_formats(self, value):
        assert coerce_date(value, TODAY) == date(2024, 1, 15)

    def test_day_first_wins_when_ambiguous(self):
        assert coerce_date("02/03/2024", TODAY) == date(2024, 3, 2)

    def test_month_first_when_day_first_impossible(self):
        assert coerce_date("01/25/2024", TODAY) == date(2024, 1, 25)

    def test_datetime_cell(self):
        assert coerce_date(datetime(2024, 2, 29, 10, 0), TODAY) == date(2024, 2, 29)

    def test_unreadable_gives_default(self):
        assert coerce_date("next tuesday", TODAY) == TODAY
        assert coerce_date(None, TODAY) == TODAY
        assert coerce_date("", None) is None


class TestCoerceDecimal:

    def test_text_with_thousands_separator(self):
        assert coerce_decimal("5,000,000", Decimal("0")) == Decimal("5000000")

    def test_float_goes_through_text(self):
        assert coerce_decimal(0.1, Decimal("0")) == Decimal("0.1")

    def test_int_cell(self):
        assert coerce_decimal(2500000, Decimal("0")) == Decimal("2500000")

    @pytest.mark.parametrize("value", [None, "", "abc", "NaN", "Infinity", True])
    def test_unreadable_gives_default(self, value):
        assert coerce_decimal(value, Decimal("11.00")) == Decimal("11.00")


class TestCoerceInt:

    def test_int_and_integral_text(self):
        assert coerce_int(3) == 3
        assert coerce_int("4") == 4
        assert coerce_int(2.0) == 2

    @pytest.mark.parametrize("value", [None, "", "x", "1.5", 2.5, False])
    def test_unreadable_gives_default(self, value):
        assert coerce_int(value) == 1

"""Tests for money and calendar primitives."""

from datetime import date
from decimal import Decimal

import pytest

from famledger.domain.errors import InvalidInputError
from famledger.domain.money import add_months, month_bounds, percentage, round_money, to_money, to_rate


def test_round_money_half_up():
    assert round_money(Decimal("2.345")) == Decimal("2.35")
    assert round_money(Decimal("2.344")) == Decimal("2.34")
    assert round_money(Decimal("-2.345")) == Decimal("-2.35")


def test_to_money_accepts_decimal_int_and_string():
    assert to_money(Decimal("10.5")) == Decimal("10.50")
    assert to_money(7) == Decimal("7.00")
    assert to_money(" 1234.567 ") == Decimal("1234.57")


def test_to_money_rejects_float():
    with pytest.raises(InvalidInputError, match="float"):
        to_money(0.1)


def test_to_money_rejects_junk():
    with pytest.raises(InvalidInputError, match="not a valid number"):
        to_money("12abc")
    with pytest.raises(InvalidInputError, match="finite"):
        to_money(Decimal("NaN"))


def test_to_money_error_uses_field_name():
    with pytest.raises(InvalidInputError, match="principal"):
        to_money("x", "principal")


def test_to_rate_keeps_four_places():
    assert to_rate("10.125") == Decimal("10.1250")
    assert to_rate(19) == Decimal("19.0000")


def test_to_rate_rounds_to_four_places_half_up():
    assert to_rate("10.00004") == Decimal("10.0000")
    assert to_rate("10.00005") == Decimal("10.0001")


@pytest.mark.parametrize("value", ["-0.01", "100.0001", "5000"])
def test_to_rate_rejects_out_of_range(value):
    with pytest.raises(InvalidInputError, match="between 0 and 100"):
        to_rate(value)


def test_to_rate_accepts_bounds():
    assert to_rate("0") == Decimal("0.0000")
    assert to_rate("100") == Decimal("100.0000")


def test_percentage_of_zero_whole_is_zero():
    assert percentage(Decimal("50"), Decimal("0")) == Decimal("0.00")
    assert percentage(Decimal("1"), Decimal("3")) == Decimal("33.33")


def test_add_months_clamps_to_month_end():
    assert add_months(date(2025, 1, 31), 1) == date(2025, 2, 28)
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2025, 3, 31), 1) == date(2025, 4, 30)


def test_add_months_crosses_year():
    assert add_months(date(2024, 11, 15), 3) == date(2025, 2, 15)
    assert add_months(date(2025, 1, 15), -1) == date(2024, 12, 15)


def test_add_months_anchor_day_restores_month_end():
    # Feb 28 anchored to the 31st goes back to the end of March
    assert add_months(date(2025, 2, 28), 1, anchor_day=31) == date(2025, 3, 31)
    assert add_months(date(2025, 2, 28), 1) == date(2025, 3, 28)


def test_month_bounds():
    assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
    assert month_bounds(2025, 12) == (date(2025, 12, 1), date(2025, 12, 31))

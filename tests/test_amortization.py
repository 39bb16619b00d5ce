"""Tests for EMI computation and payment splitting."""

from decimal import ROUND_HALF_UP, Decimal

import pytest

from famledger.domain.amortization import (
    build_schedule,
    compute_emi,
    monthly_rate,
    split_payment,
    total_interest,
)
from famledger.domain.errors import InvalidInputError


def test_compute_emi_matches_closed_form():
    """EMI for 541272 at 19% over 48 months."""
    emi = compute_emi(Decimal("541272"), Decimal("19"), 48)

    assert emi.as_tuple().exponent == -2
    assert Decimal("16180") < emi < Decimal("16190")

    rate = monthly_rate(Decimal("19"))
    factor = (1 + rate) ** 48
    expected = Decimal("541272") * rate * factor / (factor - 1)
    assert abs(emi - expected) <= Decimal("0.005")


def test_compute_emi_zero_rate_is_straight_line():
    assert compute_emi(Decimal("1200"), Decimal("0"), 12) == Decimal("100.00")
    assert compute_emi(Decimal("100"), Decimal("0"), 3) == Decimal("33.33")


def test_compute_emi_increases_with_rate():
    rates = [Decimal(step) / 2 for step in range(0, 49)]
    emis = [compute_emi(Decimal("100000"), rate, 360) for rate in rates]

    for lower, higher in zip(emis, emis[1:]):
        assert 0 < lower < higher


@pytest.mark.parametrize("rate", [Decimal("0"), Decimal("7.5"), Decimal("19")])
def test_compute_emi_increases_with_principal(rate):
    principals = [Decimal("1000"), Decimal("1010"), Decimal("25000"), Decimal("541272"), Decimal("9999999")]
    emis = [compute_emi(principal, rate, 48) for principal in principals]

    for lower, higher in zip(emis, emis[1:]):
        assert 0 < lower < higher


@pytest.mark.parametrize("principal,tenure", [(Decimal("1000"), 7), (Decimal("541272"), 48), (Decimal("0.10"), 3)])
def test_compute_emi_zero_rate_rounds_straight_line(principal, tenure):
    expected = (principal / tenure).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    assert compute_emi(principal, Decimal("0"), tenure) == expected


def test_compute_emi_single_month_repays_principal_plus_interest():
    # One installment: principal * (1 + r)
    assert compute_emi(Decimal("1200"), Decimal("12"), 1) == Decimal("1212.00")


@pytest.mark.parametrize(
    "principal,rate,tenure,message",
    [
        (Decimal("0"), Decimal("10"), 12, "Principal"),
        (Decimal("-5"), Decimal("10"), 12, "Principal"),
        (Decimal("1000"), Decimal("10"), 0, "Tenure"),
        (Decimal("1000"), Decimal("-1"), 12, "Interest rate"),
    ],
)
def test_compute_emi_rejects_out_of_range(principal, rate, tenure, message):
    with pytest.raises(InvalidInputError, match=message):
        compute_emi(principal, rate, tenure)


def test_split_payment_charges_interest_first():
    split = split_payment(Decimal("541272"), Decimal("19"), Decimal("16476.92"))

    assert split.interest == Decimal("8570.14")
    assert split.principal == Decimal("7906.78")
    assert split.principal + split.interest == Decimal("16476.92")


@pytest.mark.parametrize("balance", ["0", "0.01", "1", "999999.99", "541272"])
@pytest.mark.parametrize("payment", ["0.01", "1", "16476.92", "50000"])
@pytest.mark.parametrize("rate", ["0", "12", "19"])
def test_split_payment_parts_sum_to_payment(balance, payment, rate):
    split = split_payment(Decimal(balance), Decimal(rate), Decimal(payment))

    assert split.principal >= 0
    assert split.interest >= 0
    assert split.principal + split.interest == Decimal(payment)


def test_split_payment_zero_rate():
    split = split_payment(Decimal("100"), Decimal("0"), Decimal("50"))

    assert split.principal == Decimal("50.00")
    assert split.interest == Decimal("0.00")


def test_split_payment_below_interest_reduces_no_principal():
    split = split_payment(Decimal("120000"), Decimal("12"), Decimal("500"))

    assert split.principal == Decimal("0.00")
    assert split.interest == Decimal("500.00")


def test_split_payment_rejects_non_positive_payment():
    with pytest.raises(InvalidInputError):
        split_payment(Decimal("100"), Decimal("10"), Decimal("0"))


def test_build_schedule_closes_at_zero():
    rows = build_schedule(Decimal("541272"), Decimal("19"), 48)

    assert len(rows) == 48
    assert rows[0].opening_balance == Decimal("541272.00")
    assert rows[0].interest == Decimal("8570.14")
    assert rows[-1].closing_balance == Decimal("0.00")
    assert sum(row.principal for row in rows) == Decimal("541272.00")
    for previous, row in zip(rows, rows[1:]):
        assert row.opening_balance == previous.closing_balance
        assert row.interest <= previous.interest


def test_build_schedule_total_interest():
    rows = build_schedule(Decimal("1200"), Decimal("0"), 12)

    assert total_interest(rows) == Decimal("0.00")
    assert all(row.payment == Decimal("100.00") for row in rows)

    rows = build_schedule(Decimal("100000"), Decimal("12"), 12)
    paid = sum(row.payment for row in rows)
    assert total_interest(rows) == paid - Decimal("100000.00")
    assert total_interest(rows) > 0

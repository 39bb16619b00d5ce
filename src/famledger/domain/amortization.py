"""EMI and payment-allocation arithmetic.

Every function here is pure. Intermediate values keep full Decimal precision;
only returned amounts are rounded to cents (half up).
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, NamedTuple

from famledger.domain.errors import InvalidInputError
from famledger.domain.money import ZERO, Money, round_money

MONTHS_PER_YEAR = Decimal(12)


class PaymentSplit(NamedTuple):
    """Principal and interest portions of one payment."""

    principal: Money
    interest: Money


@dataclass(frozen=True)
class AmortizationRow:
    """One month of a projected repayment schedule."""

    period: int
    opening_balance: Money
    payment: Money
    principal: Money
    interest: Money
    closing_balance: Money


def monthly_rate(annual_rate_percent: Decimal) -> Decimal:
    """Convert an annual percentage rate to a monthly fraction."""
    return annual_rate_percent / Decimal(100) / MONTHS_PER_YEAR


def compute_emi(principal: Money, annual_rate_percent: Decimal, tenure_months: int) -> Money:
    """Compute the equated monthly installment.

    Args:
        principal: Loan principal, must be positive
        annual_rate_percent: Annual interest rate in percent, must be >= 0
        tenure_months: Number of monthly installments, must be positive

    Returns:
        Monthly installment rounded to cents

    Raises:
        InvalidInputError: If any argument is out of range
    """
    if principal <= 0:
        raise InvalidInputError("Principal must be greater than zero")
    if tenure_months <= 0:
        raise InvalidInputError("Tenure must be at least one month")
    if annual_rate_percent < 0:
        raise InvalidInputError("Interest rate cannot be negative")

    rate = monthly_rate(annual_rate_percent)
    if rate == 0:
        # Straight-line: the general formula divides by zero here.
        return round_money(principal / Decimal(tenure_months))

    factor = (1 + rate) ** tenure_months
    return round_money(principal * rate * factor / (factor - 1))


def split_payment(
    remaining_balance: Money, annual_rate_percent: Decimal, payment_amount: Money
) -> PaymentSplit:
    """Split a payment into principal and interest against the current balance.

    Interest for the month is charged first. A payment smaller than the
    interest due is absorbed entirely as interest and reduces no principal.

    Args:
        remaining_balance: Outstanding principal before the payment
        annual_rate_percent: Annual interest rate in percent
        payment_amount: Amount paid, must be positive

    Returns:
        PaymentSplit whose parts sum exactly to payment_amount

    Raises:
        InvalidInputError: If payment is not positive or balance/rate negative
    """
    if payment_amount <= 0:
        raise InvalidInputError("Payment amount must be greater than zero")
    if remaining_balance < 0:
        raise InvalidInputError("Remaining balance cannot be negative")
    if annual_rate_percent < 0:
        raise InvalidInputError("Interest rate cannot be negative")

    payment = round_money(payment_amount)
    interest = round_money(remaining_balance * monthly_rate(annual_rate_percent))
    if interest > payment:
        return PaymentSplit(principal=ZERO, interest=payment)
    return PaymentSplit(principal=payment - interest, interest=interest)


def build_schedule(
    principal: Money, annual_rate_percent: Decimal, tenure_months: int
) -> list[AmortizationRow]:
    """Project the month-by-month schedule for a loan paid exactly on EMI.

    The last row pays off whatever balance is left so the schedule closes at
    zero regardless of cent rounding along the way.
    """
    emi = compute_emi(principal, annual_rate_percent, tenure_months)
    rows: list[AmortizationRow] = []
    balance = round_money(principal)

    for period in range(1, tenure_months + 1):
        opening = balance
        interest = round_money(opening * monthly_rate(annual_rate_percent))
        if period == tenure_months or emi - interest >= opening:
            principal_part = opening
        else:
            principal_part = emi - interest
        balance = opening - principal_part
        rows.append(
            AmortizationRow(
                period=period,
                opening_balance=opening,
                payment=principal_part + interest,
                principal=principal_part,
                interest=interest,
                closing_balance=balance,
            )
        )
        if balance == 0:
            break

    return rows


def total_interest(rows: Iterable[AmortizationRow]) -> Money:
    """Sum the interest column of a schedule."""
    return sum((row.interest for row in rows), ZERO)

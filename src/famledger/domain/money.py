"""Money and calendar primitives.

Amounts are ``Decimal`` values quantized to two places with ROUND_HALF_UP.
Floats are refused outright so binary rounding drift never reaches a balance.
"""

import calendar
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Union

from dateutil.relativedelta import relativedelta

from famledger.domain.errors import InvalidInputError

Money = Decimal

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")
RATE_PLACES = Decimal("0.0001")
MAX_RATE = HUNDRED

MoneyLike = Union[Decimal, int, str]


def round_money(value: Decimal) -> Money:
    """Round a Decimal to two places, half up."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_money(value: MoneyLike, field: str = "amount") -> Money:
    """Convert a value to a two-place Decimal.

    Args:
        value: Decimal, int or numeric string
        field: Field name used in error messages

    Returns:
        Quantized Decimal

    Raises:
        InvalidInputError: If value is a float, not numeric, or not finite
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise InvalidInputError(f"{field} must be a Decimal, int or string, not {type(value).__name__}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise InvalidInputError(f"{field} is not a valid number: {value!r}") from e
    if not amount.is_finite():
        raise InvalidInputError(f"{field} must be finite")
    return round_money(amount)


def to_rate(value: MoneyLike, field: str = "interest_rate") -> Decimal:
    """Convert an annual percentage rate to a four-place Decimal.

    Rates are stored with four decimal places, so they are rounded (half up)
    to that precision here and every EMI is computed from the stored value.

    Raises:
        InvalidInputError: If value is a float, not numeric, or outside 0..100
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise InvalidInputError(f"{field} must be a Decimal, int or string, not {type(value).__name__}")
    try:
        rate = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise InvalidInputError(f"{field} is not a valid number: {value!r}") from e
    if not rate.is_finite():
        raise InvalidInputError(f"{field} must be finite")
    rate = rate.quantize(RATE_PLACES, rounding=ROUND_HALF_UP)
    if rate < 0 or rate > MAX_RATE:
        raise InvalidInputError(f"{field} must be between 0 and {MAX_RATE} percent, got {rate}")
    return rate


def percentage(part: Decimal, whole: Decimal) -> Decimal:
    """Return part / whole * 100 rounded to two places, 0 when whole is 0."""
    if whole == 0:
        return ZERO
    return round_money(part / whole * HUNDRED)


def add_months(start: date, months: int, anchor_day: Optional[int] = None) -> date:
    """Add calendar months, clamping to the last valid day of the target month.

    Args:
        start: Date to move from
        months: Number of months to add (may be negative)
        anchor_day: Preferred day of month; defaults to start.day

    Returns:
        Date in the target month
    """
    target = start.replace(day=1) + relativedelta(months=months)
    day = anchor_day if anchor_day is not None else start.day
    last_day = calendar.monthrange(target.year, target.month)[1]
    return target.replace(day=min(day, last_day))


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """Return the first and last day of a calendar month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)

"""Amount parsing utilities."""

import re
from decimal import Decimal, InvalidOperation

from famledger.domain.money import round_money

_CURRENCY_MARKS = re.compile(r"^[A-Za-z]{3}\s*|[$€£¥₹]")


def parse_amount(amount_str: str, allow_negative: bool = False) -> Decimal:
    """Parse a user-entered amount into a two-place Decimal.

    Handles "1234.5", "1,234.50", "₹1,234.50", "INR 1234.50" and, when
    allow_negative is set, "-12.30" and "(12.30)".

    Raises:
        ValueError: If amount string cannot be parsed or is negative when not allowed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    text = amount_str.strip()
    negative = False
    if text.startswith("(") and text.endswith(")"):
        negative = True
        text = text[1:-1]
    text = _CURRENCY_MARKS.sub("", text).replace(",", "").strip()
    if text.startswith("-"):
        negative = not negative
        text = text[1:].strip()

    try:
        amount = Decimal(text)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}'") from e
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")

    if negative:
        if not allow_negative:
            raise ValueError(f"Amount cannot be negative: '{amount_str}'")
        amount = -amount
    return round_money(amount)

"""Money formatting."""

from decimal import Decimal

from famledger.domain.money import round_money


def format_money(amount: Decimal, currency_code: str = "INR") -> str:
    """Format an amount with its currency code, e.g. "INR 1,234.56"."""
    value = round_money(Decimal(amount))
    sign = "-" if value < 0 else ""
    return f"{sign}{currency_code.upper()} {abs(value):,.2f}"


def format_percent(value: Decimal) -> str:
    """Format a percentage with two decimals, e.g. "12.50%"."""
    return f"{round_money(Decimal(value)):.2f}%"

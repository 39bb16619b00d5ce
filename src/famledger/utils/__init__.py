"""Utility functions for famledger."""

from famledger.utils.amount_parser import parse_amount
from famledger.utils.currency import format_money
from famledger.utils.date_parser import parse_date

__all__ = ["parse_date", "parse_amount", "format_money"]

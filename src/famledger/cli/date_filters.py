"""CLI helpers for date range resolution."""

from datetime import date
from typing import Optional

import click

from famledger.cli.error_handling import fail
from famledger.utils.date_parser import get_date_range, parse_date

PERIOD_NAMES = ("this-week", "this-month", "this-year", "last-week", "last-month", "last-year")


def resolve_cli_date_range(
    ctx: click.Context,
    *,
    start_date: Optional[str],
    end_date: Optional[str],
    period: Optional[str],
) -> tuple[Optional[date], Optional[date]]:
    """Resolve a date range from a named period or explicit start/end dates."""
    if period is not None:
        if start_date or end_date:
            fail(ctx, "--period cannot be combined with --from or --to.")
        return get_date_range(period)

    try:
        start = parse_date(start_date) if start_date else None
        end = parse_date(end_date) if end_date else None
    except ValueError as e:
        fail(ctx, f"Invalid date range: {e}")

    if start is not None and end is not None and end < start:
        fail(ctx, "--to date is before --from date.")
    return start, end

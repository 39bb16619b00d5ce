"""Date parsing utilities."""

from datetime import date, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

_WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


def _period_start(period: str, today: date, offset: int) -> Optional[date]:
    """Start of the week/month/year shifted by offset periods."""
    if period == "week":
        return today - timedelta(days=today.weekday()) + timedelta(weeks=offset)
    if period == "month":
        return today.replace(day=1) + relativedelta(months=offset)
    if period == "year":
        return today.replace(month=1, day=1) + relativedelta(years=offset)
    return None


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Accepts ISO and free-form dates ("2024-01-15", "Jan 15 2024") as well as
    "today", "yesterday", "tomorrow", "in N days", "N days ago" and
    "last/this/next week|month|year" (which give the first day of that
    period). "last friday" is the most recent Friday before today.

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = date_str.strip().lower()
    today = today or date.today()

    simple = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if text in simple:
        return simple[text]

    words = text.split()
    if len(words) == 3 and words[0] == "in" and words[2] in ("day", "days") and words[1].isdigit():
        return today + timedelta(days=int(words[1]))
    if len(words) == 3 and words[2] == "ago" and words[1] in ("day", "days") and words[0].isdigit():
        return today - timedelta(days=int(words[0]))

    if len(words) == 2 and words[0] in ("last", "this", "next"):
        offset = {"last": -1, "this": 0, "next": 1}[words[0]]
        start = _period_start(words[1], today, offset)
        if start is not None:
            return start
        if words[0] == "last" and words[1] in _WEEKDAYS:
            days_ago = (today.weekday() - _WEEKDAYS.index(words[1])) % 7 or 7
            return today - timedelta(days=days_ago)

    try:
        return date_parser.parse(text).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}") from e


def get_date_range(period: str, today: Optional[date] = None) -> tuple[date, date]:
    """Get start and end dates for a named period.

    "this-*" periods end today; "last-*" periods are complete.

    Args:
        period: this-week, this-month, this-year, last-week, last-month or last-year

    Raises:
        ValueError: If period string is not recognized
    """
    today = today or date.today()
    name = period.strip().lower()

    if name.startswith("this-"):
        start = _period_start(name[5:], today, 0)
        if start is not None:
            return start, today
    elif name.startswith("last-"):
        start = _period_start(name[5:], today, -1)
        if start is not None:
            following = _period_start(name[5:], today, 0)
            return start, following - timedelta(days=1)

    raise ValueError(
        f"Unknown period: '{period}'. Supported periods: this-week, this-month, "
        "this-year, last-week, last-month, last-year"
    )

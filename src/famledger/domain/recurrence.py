"""Next-occurrence arithmetic for recurring schedules.

All functions are pure: schedules are frozen dataclasses and advancing one
returns a new instance.
"""

from dataclasses import replace
from datetime import date, timedelta
from typing import Iterator, Optional

from famledger.domain.entities import Frequency, RecurringSchedule
from famledger.domain.errors import InvalidInputError
from famledger.domain.money import add_months

_DAY_STEPS = {
    Frequency.DAILY: 1,
    Frequency.WEEKLY: 7,
    Frequency.BIWEEKLY: 14,
}

_MONTH_STEPS = {
    Frequency.MONTHLY: 1,
    Frequency.QUARTERLY: 3,
    Frequency.YEARLY: 12,
}


def parse_frequency(value: str | Frequency) -> Frequency:
    """Coerce a string to a Frequency, raising InvalidInputError on junk."""
    if isinstance(value, Frequency):
        return value
    try:
        return Frequency(str(value).strip().lower())
    except ValueError as e:
        choices = ", ".join(f.value for f in Frequency)
        raise InvalidInputError(f"Unknown frequency '{value}'. Expected one of: {choices}") from e


def next_occurrence(
    from_date: date, frequency: Frequency, anchor_day: Optional[int] = None
) -> date:
    """Return the occurrence following from_date.

    Month-based frequencies clamp to the last valid day of the target month
    (Jan 31 + 1 month is Feb 28 or 29). When anchor_day is given the target
    day is min(anchor_day, last day of month), which keeps a schedule that
    started on the 31st on month ends instead of drifting to the 28th.

    Args:
        from_date: Date to step from
        frequency: Step size
        anchor_day: Preferred day of month for month-based steps

    Returns:
        Next occurrence date
    """
    frequency = parse_frequency(frequency)
    if frequency in _DAY_STEPS:
        return from_date + timedelta(days=_DAY_STEPS[frequency])
    return add_months(from_date, _MONTH_STEPS[frequency], anchor_day=anchor_day)


def _anchor_for(schedule: RecurringSchedule) -> Optional[int]:
    if schedule.frequency in _MONTH_STEPS:
        return schedule.start_date.day
    return None


def create_schedule(
    start_date: date, frequency: Frequency, end_date: Optional[date] = None
) -> RecurringSchedule:
    """Build a schedule whose first execution is one step after start_date.

    Raises:
        InvalidInputError: If end_date is before start_date
    """
    frequency = parse_frequency(frequency)
    if end_date is not None and end_date < start_date:
        raise InvalidInputError("End date cannot be before start date")

    first = next_occurrence(start_date, frequency)
    if end_date is not None and first > end_date:
        return RecurringSchedule(
            frequency=frequency,
            start_date=start_date,
            end_date=end_date,
            next_execution_date=None,
            is_active=False,
        )
    return RecurringSchedule(
        frequency=frequency,
        start_date=start_date,
        end_date=end_date,
        next_execution_date=first,
        is_active=True,
    )


def advance_schedule(schedule: RecurringSchedule) -> RecurringSchedule:
    """Step a schedule past its current execution date.

    Expired schedules are terminal and come back unchanged.
    """
    if schedule.is_expired:
        return schedule

    following = next_occurrence(
        schedule.next_execution_date, schedule.frequency, anchor_day=_anchor_for(schedule)
    )
    if schedule.end_date is not None and following > schedule.end_date:
        return replace(schedule, next_execution_date=None, is_active=False)
    return replace(schedule, next_execution_date=following)


def upcoming_occurrences(schedule: RecurringSchedule, count: int) -> Iterator[date]:
    """Yield up to count future execution dates without touching the schedule."""
    current = schedule
    for _ in range(count):
        if current.is_expired:
            return
        yield current.next_execution_date
        current = advance_schedule(current)

"""Bill reminder domain service."""

import logging
from datetime import date, timedelta
from typing import Optional, Union

from famledger.database.base import Database
from famledger.domain import events as event_kinds
from famledger.domain.entities import (
    BILL_FREQUENCIES,
    BillReminder,
    Frequency,
    NotificationEvent,
    OwnerScope,
)
from famledger.domain.errors import InvalidInputError, NotFoundError, category_not_found
from famledger.domain.events import EventBus
from famledger.domain.locks import DEFAULT_MAX_ATTEMPTS, KeyedLocks, retry_on_conflict
from famledger.domain.money import MoneyLike, to_money
from famledger.domain.recurrence import next_occurrence, parse_frequency

logger = logging.getLogger(__name__)

DEFAULT_REMINDER_DAYS = 3

_bill_locks = KeyedLocks()


def _bill_frequency(value: Union[str, Frequency]) -> Frequency:
    frequency = parse_frequency(value)
    if frequency not in BILL_FREQUENCIES:
        choices = ", ".join(f.value for f in BILL_FREQUENCIES)
        raise InvalidInputError(f"Bills repeat {choices}; got '{frequency.value}'")
    return frequency


def _reminder_days(value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidInputError("Reminder days must be a non-negative whole number")
    return value


class BillReminderService:
    """Service for bill reminders."""

    def __init__(
        self,
        db: Database,
        events: Optional[EventBus] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        self.db = db
        self.events = events
        self.max_attempts = max_attempts

    def _require(self, bill_id: int) -> BillReminder:
        bill = self.db.get_bill_reminder(bill_id)
        if bill is None:
            raise NotFoundError(f"Bill reminder {bill_id} not found")
        return bill

    def create_bill(
        self,
        user_id: str,
        title: str,
        due_date: date,
        amount: Optional[MoneyLike] = None,
        reminder_days_before: int = DEFAULT_REMINDER_DAYS,
        recurring_frequency: Optional[Union[str, Frequency]] = None,
        description: Optional[str] = None,
        category_id: Optional[int] = None,
        household_id: Optional[int] = None,
    ) -> int:
        """Create a bill reminder; a frequency makes it recurring.

        Returns:
            Bill reminder ID
        """
        title = (title or "").strip()
        if not title:
            raise InvalidInputError("Bill title is required")
        if amount is not None:
            amount = to_money(amount)
            if amount <= 0:
                raise InvalidInputError("Bill amount must be greater than zero")
        frequency = _bill_frequency(recurring_frequency) if recurring_frequency else None
        if category_id is not None and self.db.get_category(category_id) is None:
            raise NotFoundError(category_not_found(category_id))

        bill_id = self.db.create_bill_reminder(
            user_id=user_id,
            title=title,
            due_date=due_date,
            reminder_days_before=_reminder_days(reminder_days_before),
            is_recurring=frequency is not None,
            recurring_frequency=frequency.value if frequency else None,
            amount=amount,
            description=description,
            category_id=category_id,
            household_id=household_id,
        )
        logger.info("Created bill reminder %s '%s' due %s", bill_id, title, due_date)
        return bill_id

    def get_bill(self, bill_id: int) -> Optional[BillReminder]:
        return self.db.get_bill_reminder(bill_id)

    def list_bills(self, scope: OwnerScope, include_completed: bool = True) -> list[BillReminder]:
        """List bill reminders in scope, soonest due first."""
        return self.db.list_bill_reminders(scope, include_completed=include_completed)

    def update_bill(
        self,
        bill_id: int,
        title: Optional[str] = None,
        due_date: Optional[date] = None,
        amount: Optional[MoneyLike] = None,
        reminder_days_before: Optional[int] = None,
        description: Optional[str] = None,
    ) -> BillReminder:
        """Update bill reminder fields.

        Raises:
            NotFoundError: If the bill doesn't exist
        """
        fields = {}
        if title is not None:
            if not title.strip():
                raise InvalidInputError("Bill title is required")
            fields["title"] = title.strip()
        if due_date is not None:
            fields["due_date"] = due_date
        if amount is not None:
            fields["amount"] = to_money(amount)
        if reminder_days_before is not None:
            fields["reminder_days_before"] = _reminder_days(reminder_days_before)
        if description is not None:
            fields["description"] = description

        def attempt() -> BillReminder:
            bill = self._require(bill_id)
            if fields:
                self.db.update_bill_reminder(bill_id, bill.version, **fields)
            return self._require(bill_id)

        with _bill_locks.hold(bill_id):
            return retry_on_conflict(attempt, "Bill reminder", bill_id, self.max_attempts)

    def delete_bill(self, bill_id: int) -> None:
        """Delete a bill reminder.

        Raises:
            NotFoundError: If the bill doesn't exist
        """
        with _bill_locks.hold(bill_id):
            self._require(bill_id)
            self.db.delete_bill_reminder(bill_id)
        logger.info("Deleted bill reminder %s", bill_id)

    def mark_paid(self, bill_id: int) -> BillReminder:
        """Mark a bill paid.

        A recurring bill moves its due date to the next occurrence and stays
        open; a one-off bill is completed.

        Raises:
            NotFoundError: If the bill doesn't exist
            InvalidInputError: If the bill is already completed
        """

        def attempt() -> BillReminder:
            bill = self._require(bill_id)
            if bill.is_completed:
                raise InvalidInputError(f"Bill reminder {bill_id} is already completed")
            if bill.is_recurring and bill.recurring_frequency is not None:
                fields = {"due_date": next_occurrence(bill.due_date, bill.recurring_frequency)}
            else:
                fields = {"is_completed": True}
            self.db.update_bill_reminder(bill_id, bill.version, **fields)
            return bill

        with _bill_locks.hold(bill_id):
            paid = retry_on_conflict(attempt, "Bill reminder", bill_id, self.max_attempts)

        updated = self._require(bill_id)
        logger.info("Bill reminder %s paid for %s", bill_id, paid.due_date, extra={"bill_id": bill_id})
        if self.events is not None:
            self.events.publish(
                NotificationEvent(
                    kind=event_kinds.BILL_PAID,
                    payload={
                        "user_id": paid.user_id,
                        "bill_id": bill_id,
                        "title": paid.title,
                        "amount": paid.amount,
                        "due_date": paid.due_date,
                        "next_due_date": updated.due_date if not updated.is_completed else None,
                    },
                )
            )
        return updated

    def due_reminders(self, scope: OwnerScope, as_of: Optional[date] = None) -> list[BillReminder]:
        """Open bills whose reminder window has started by as_of."""
        if as_of is None:
            as_of = date.today()
        return [
            bill
            for bill in self.db.list_bill_reminders(scope, include_completed=False)
            if bill.due_date - timedelta(days=bill.reminder_days_before) <= as_of
        ]

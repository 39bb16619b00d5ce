"""Recurring transaction domain service."""

import logging
from datetime import date
from typing import Optional, Union

from famledger.database.base import Database
from famledger.domain import events as event_kinds
from famledger.domain.entities import (
    Frequency,
    NotificationEvent,
    OwnerScope,
    RecurringTransaction,
    TransactionType,
)
from famledger.domain.errors import (
    InvalidInputError,
    NotFoundError,
    account_not_found,
    category_not_found,
    recurring_not_found,
)
from famledger.domain.events import EventBus
from famledger.domain.locks import DEFAULT_MAX_ATTEMPTS, KeyedLocks, retry_on_conflict
from famledger.domain.money import MoneyLike
from famledger.domain.recurrence import advance_schedule, create_schedule, parse_frequency
from famledger.domain.transaction import parse_transaction_type, positive_amount

logger = logging.getLogger(__name__)

_recurring_locks = KeyedLocks()


class RecurringTransactionService:
    """Service for recurring transaction templates and their execution."""

    def __init__(
        self,
        db: Database,
        events: Optional[EventBus] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        self.db = db
        self.events = events
        self.max_attempts = max_attempts

    def _require(self, recurring_id: int) -> RecurringTransaction:
        recurring = self.db.get_recurring_transaction(recurring_id)
        if recurring is None:
            raise NotFoundError(recurring_not_found(recurring_id))
        return recurring

    def create_recurring(
        self,
        user_id: str,
        account_id: int,
        description: str,
        amount: MoneyLike,
        transaction_type: Union[str, TransactionType],
        frequency: Union[str, Frequency],
        start_date: date,
        end_date: Optional[date] = None,
        category_id: Optional[int] = None,
        household_id: Optional[int] = None,
    ) -> RecurringTransaction:
        """Create a recurring transaction.

        The first execution is one frequency step after start_date. A
        schedule whose first execution would already be past end_date is
        stored inactive.

        Raises:
            NotFoundError: If account or category doesn't exist
            InvalidInputError: If amount, type, frequency or dates are invalid
        """
        description = (description or "").strip()
        if not description:
            raise InvalidInputError("Description is required")
        amount = positive_amount(amount)
        txn_type = parse_transaction_type(transaction_type)
        schedule = create_schedule(start_date, parse_frequency(frequency), end_date)

        if self.db.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))
        if category_id is not None and self.db.get_category(category_id) is None:
            raise NotFoundError(category_not_found(category_id))

        recurring_id = self.db.create_recurring_transaction(
            user_id=user_id,
            account_id=account_id,
            description=description,
            amount=amount,
            transaction_type=txn_type.value,
            frequency=schedule.frequency.value,
            start_date=schedule.start_date,
            end_date=schedule.end_date,
            next_execution_date=schedule.next_execution_date,
            is_active=schedule.is_active,
            category_id=category_id,
            household_id=household_id,
        )
        logger.info(
            "Created recurring transaction %s (%s), next run %s",
            recurring_id,
            schedule.frequency.value,
            schedule.next_execution_date,
            extra={"recurring_id": recurring_id},
        )
        return self._require(recurring_id)

    def get_recurring(self, recurring_id: int) -> Optional[RecurringTransaction]:
        """Get recurring transaction by ID, or None if not found."""
        return self.db.get_recurring_transaction(recurring_id)

    def list_recurring(self, scope: OwnerScope) -> list[RecurringTransaction]:
        """List recurring transactions in scope ordered by next execution."""
        return self.db.list_recurring_transactions(scope)

    def update_recurring(
        self,
        recurring_id: int,
        description: Optional[str] = None,
        amount: Optional[MoneyLike] = None,
        category_id: Optional[int] = None,
        frequency: Optional[Union[str, Frequency]] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        is_active: Optional[bool] = None,
    ) -> RecurringTransaction:
        """Edit a recurring transaction.

        Changing frequency, start or end date rebuilds the schedule from the
        (new) start date.

        Raises:
            NotFoundError: If the recurring transaction or category doesn't exist
            InvalidInputError: If a value is invalid
        """
        if amount is not None:
            amount = positive_amount(amount)
        if frequency is not None:
            frequency = parse_frequency(frequency)
        if category_id is not None and self.db.get_category(category_id) is None:
            raise NotFoundError(category_not_found(category_id))

        def attempt() -> RecurringTransaction:
            current = self._require(recurring_id)
            fields = {}
            if description is not None:
                if not description.strip():
                    raise InvalidInputError("Description is required")
                fields["description"] = description.strip()
            if amount is not None:
                fields["amount"] = amount
            if category_id is not None:
                fields["category_id"] = category_id

            if frequency is not None or start_date is not None or end_date is not None:
                schedule = create_schedule(
                    start_date or current.schedule.start_date,
                    frequency or current.schedule.frequency,
                    end_date if end_date is not None else current.schedule.end_date,
                )
                fields.update(
                    frequency=schedule.frequency.value,
                    start_date=schedule.start_date,
                    end_date=schedule.end_date,
                    next_execution_date=schedule.next_execution_date,
                    is_active=schedule.is_active,
                )
            if is_active is not None:
                next_run = fields.get("next_execution_date", current.schedule.next_execution_date)
                if is_active and next_run is None:
                    raise InvalidInputError(
                        f"Recurring transaction {recurring_id} has expired and cannot be resumed"
                    )
                fields["is_active"] = is_active

            if not fields:
                return current
            self.db.update_recurring_transaction(recurring_id, current.version, **fields)
            logger.info(
                "Updated recurring transaction %s: %s",
                recurring_id,
                ", ".join(sorted(fields)),
                extra={"recurring_id": recurring_id},
            )
            return self._require(recurring_id)

        with _recurring_locks.hold(recurring_id):
            return retry_on_conflict(
                attempt, "Recurring transaction", recurring_id, self.max_attempts
            )

    def delete_recurring(self, recurring_id: int) -> None:
        """Delete a recurring transaction; transactions it produced are kept.

        Raises:
            NotFoundError: If it doesn't exist
        """
        with _recurring_locks.hold(recurring_id):
            self._require(recurring_id)
            self.db.delete_recurring_transaction(recurring_id)
        logger.info("Deleted recurring transaction %s", recurring_id, extra={"recurring_id": recurring_id})

    def _execute_next(self, recurring_id: int, as_of: date) -> Optional[int]:
        """Materialize the next occurrence if it is due. Returns the transaction ID."""

        def attempt() -> Optional[int]:
            recurring = self.db.get_recurring_transaction(recurring_id)
            if recurring is None:
                return None
            schedule = recurring.schedule
            if schedule.is_expired or schedule.next_execution_date > as_of:
                return None
            advanced = advance_schedule(schedule)
            return self.db.record_recurring_execution(
                recurring_id=recurring_id,
                expected_version=recurring.version,
                execution_date=schedule.next_execution_date,
                next_execution_date=advanced.next_execution_date,
                is_active=advanced.is_active,
            )

        return retry_on_conflict(attempt, "Recurring transaction", recurring_id, self.max_attempts)

    def run_due(self, as_of: Optional[date] = None, scope: Optional[OwnerScope] = None) -> list[int]:
        """Create transactions for every occurrence due on or before as_of.

        Schedules that missed several runs are caught up one occurrence at a
        time, each transaction dated at its own occurrence.

        Args:
            as_of: Cut-off date (default: today)
            scope: Optional owner scope; None runs every owner's schedules

        Returns:
            IDs of the created transactions
        """
        if as_of is None:
            as_of = date.today()

        created: list[int] = []
        for recurring in self.db.list_recurring_transactions(scope, due_on=as_of):
            with _recurring_locks.hold(recurring.id):
                while True:
                    transaction_id = self._execute_next(recurring.id, as_of)
                    if transaction_id is None:
                        break
                    created.append(transaction_id)
                    self._publish_execution(recurring, transaction_id)

        if created:
            logger.info("Executed %d recurring occurrence(s) up to %s", len(created), as_of)
        return created

    def _publish_execution(self, recurring: RecurringTransaction, transaction_id: int) -> None:
        if self.events is None:
            return
        txn = self.db.get_transaction(transaction_id)
        self.events.publish(
            NotificationEvent(
                kind=event_kinds.RECURRING_EXECUTED,
                payload={
                    "user_id": recurring.user_id,
                    "recurring_id": recurring.id,
                    "transaction_id": transaction_id,
                    "description": recurring.description,
                    "amount": recurring.amount,
                    "date": txn.date if txn is not None else None,
                },
            )
        )

"""Transaction domain service."""

import logging
from datetime import date
from typing import Optional, Union

from famledger.database.base import Database
from famledger.domain import events as event_kinds
from famledger.domain.entities import (
    NotificationEvent,
    OwnerScope,
    Transaction as TransactionEntity,
    TransactionType,
)
from famledger.domain.errors import (
    InvalidInputError,
    NotFoundError,
    account_not_found,
    category_not_found,
)
from famledger.domain.events import EventBus
from famledger.domain.money import MoneyLike, to_money

logger = logging.getLogger(__name__)


def parse_transaction_type(value: Union[str, TransactionType]) -> TransactionType:
    """Coerce a string to a TransactionType, raising InvalidInputError on junk."""
    if isinstance(value, TransactionType):
        return value
    try:
        return TransactionType(str(value).strip().lower())
    except ValueError as e:
        choices = ", ".join(t.value for t in TransactionType)
        raise InvalidInputError(
            f"Unknown transaction type '{value}'. Expected one of: {choices}"
        ) from e


def positive_amount(value: MoneyLike, field: str = "amount"):
    """Convert value to money and require it to be greater than zero."""
    amount = to_money(value, field)
    if amount <= 0:
        raise InvalidInputError(f"{field.capitalize()} must be greater than zero")
    return amount


class TransactionService:
    """Service for managing transactions."""

    def __init__(self, db: Database, events: Optional[EventBus] = None):
        """Initialize transaction service.

        Args:
            db: Database instance
            events: Optional event bus notified after each committed change
        """
        self.db = db
        self.events = events

    def _publish(self, kind: str, txn: TransactionEntity) -> None:
        if self.events is None:
            return
        payload = {
            "user_id": txn.user_id,
            "transaction_id": txn.id,
            "type": txn.transaction_type.value,
            "amount": txn.amount,
            "description": txn.description,
            "date": txn.date,
        }
        self.events.publish(NotificationEvent(kind=kind, payload=payload))

    def _check_account(self, account_id: int) -> None:
        account = self.db.get_account(account_id)
        if account is None or not account.is_active:
            raise NotFoundError(account_not_found(account_id))

    def _check_category(self, category_id: int) -> None:
        if self.db.get_category(category_id) is None:
            raise NotFoundError(category_not_found(category_id))

    def _require(self, transaction_id: int) -> TransactionEntity:
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(f"Transaction {transaction_id} not found")
        return txn

    def create_transaction(
        self,
        user_id: str,
        account_id: int,
        transaction_type: Union[str, TransactionType],
        amount: MoneyLike,
        date: date,
        category_id: Optional[int] = None,
        description: Optional[str] = None,
        notes: Optional[str] = None,
        household_id: Optional[int] = None,
    ) -> int:
        """Create a transaction.

        Args:
            user_id: Owner of the transaction
            account_id: Account ID
            transaction_type: income, expense or transfer
            amount: Positive amount; the type gives the direction
            date: Transaction date
            category_id: Optional category ID
            description: Optional description
            notes: Optional notes
            household_id: Optional household sharing the transaction

        Returns:
            Transaction ID

        Raises:
            NotFoundError: If account or category doesn't exist
            InvalidInputError: If type or amount is invalid
        """
        txn_type = parse_transaction_type(transaction_type)
        amount = positive_amount(amount)
        self._check_account(account_id)
        if category_id is not None:
            self._check_category(category_id)

        transaction_id = self.db.create_transaction(
            user_id=user_id,
            account_id=account_id,
            transaction_type=txn_type.value,
            amount=amount,
            date=date,
            category_id=category_id,
            description=description,
            notes=notes,
            household_id=household_id,
        )
        logger.info(
            "Created %s transaction %s for %s",
            txn_type.value,
            transaction_id,
            amount,
            extra={"transaction_id": transaction_id},
        )
        self._publish(event_kinds.TRANSACTION_CREATED, self._require(transaction_id))
        return transaction_id

    def get_transaction(self, transaction_id: int) -> Optional[TransactionEntity]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction entity or None if not found
        """
        return self.db.get_transaction(transaction_id)

    def list_transactions(
        self,
        scope: OwnerScope,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[int] = None,
        category_id: Optional[int] = None,
        transaction_type: Optional[Union[str, TransactionType]] = None,
    ) -> list[TransactionEntity]:
        """List transactions in scope with optional filters, newest first."""
        if transaction_type is not None:
            transaction_type = parse_transaction_type(transaction_type).value
        return self.db.list_transactions(
            scope,
            start_date=start_date,
            end_date=end_date,
            account_id=account_id,
            category_id=category_id,
            transaction_type=transaction_type,
        )

    def update_transaction(
        self,
        transaction_id: int,
        account_id: Optional[int] = None,
        transaction_type: Optional[Union[str, TransactionType]] = None,
        amount: Optional[MoneyLike] = None,
        date: Optional[date] = None,
        description: Optional[str] = None,
        notes: Optional[str] = None,
        category_id: Optional[int] = None,
        clear_category: bool = False,
    ) -> None:
        """Update transaction fields.

        Args:
            transaction_id: Transaction ID to update
            account_id: Optional new account ID
            transaction_type: Optional new type
            amount: Optional new amount
            date: Optional new date
            description: Optional new description
            notes: Optional new notes
            category_id: Optional new category ID
            clear_category: If True, clear the category (category_id must be None)

        Raises:
            NotFoundError: If transaction, account or category doesn't exist
            InvalidInputError: If values are invalid
        """
        self._require(transaction_id)

        fields = {}
        if account_id is not None:
            self._check_account(account_id)
            fields["account_id"] = account_id
        if transaction_type is not None:
            fields["transaction_type"] = parse_transaction_type(transaction_type).value
        if amount is not None:
            fields["amount"] = positive_amount(amount)
        if date is not None:
            fields["date"] = date
        if description is not None:
            fields["description"] = description
        if notes is not None:
            fields["notes"] = notes

        if clear_category:
            if category_id is not None:
                raise InvalidInputError("Cannot set both category_id and clear_category")
            fields["category_id"] = None
        elif category_id is not None:
            self._check_category(category_id)
            fields["category_id"] = category_id

        if not fields:
            return
        self.db.update_transaction(transaction_id, **fields)
        logger.info(
            "Updated transaction %s: %s",
            transaction_id,
            ", ".join(sorted(fields)),
            extra={"transaction_id": transaction_id},
        )
        self._publish(event_kinds.TRANSACTION_UPDATED, self._require(transaction_id))

    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction.

        Raises:
            NotFoundError: If transaction doesn't exist
        """
        txn = self._require(transaction_id)
        self.db.delete_transaction(transaction_id)
        logger.info("Deleted transaction %s", transaction_id, extra={"transaction_id": transaction_id})
        self._publish(event_kinds.TRANSACTION_DELETED, txn)

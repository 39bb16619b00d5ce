"""Account domain service."""

import logging
from typing import Optional

from famledger.database.base import Database
from famledger.domain.entities import Account as AccountEntity, OwnerScope
from famledger.domain.errors import ConflictError, InvalidInputError, NotFoundError, account_not_found
from famledger.domain.money import ZERO, MoneyLike, to_money

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "INR"


class AccountService:
    """Service for managing accounts."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def _check_unique_name(self, user_id: str, name: str, exclude_id: Optional[int] = None) -> None:
        scope = OwnerScope(user_id=user_id)
        for acc in self.db.list_accounts(scope, include_inactive=True):
            if acc.id != exclude_id and acc.user_id == user_id and acc.name == name:
                raise ConflictError(f"Account with name '{name}' already exists")

    def create_account(
        self,
        user_id: str,
        name: str,
        account_type: str = "bank",
        currency: str = DEFAULT_CURRENCY,
        opening_balance: MoneyLike = ZERO,
        household_id: Optional[int] = None,
    ) -> int:
        """Create a new account.

        Args:
            user_id: Owner of the account
            name: Account name, unique per user
            account_type: bank, cash, card, ...
            currency: ISO currency code
            opening_balance: Balance before any recorded transaction
            household_id: Optional household sharing the account

        Returns:
            Account ID

        Raises:
            ConflictError: If the user already has an account with that name
        """
        name = (name or "").strip()
        if not name:
            raise InvalidInputError("Account name is required")
        currency = (currency or "").strip().upper()
        if len(currency) != 3:
            raise InvalidInputError(f"Invalid currency code '{currency}'")
        balance = to_money(opening_balance, "opening balance")
        self._check_unique_name(user_id, name)

        account_id = self.db.create_account(
            user_id=user_id,
            name=name,
            account_type=account_type,
            currency=currency,
            opening_balance=balance,
            household_id=household_id,
        )
        logger.info("Created account %s '%s'", account_id, name)
        return account_id

    def get_account(self, account_id: int) -> Optional[AccountEntity]:
        """Get account by ID.

        Args:
            account_id: Account ID

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(account_id)

    def list_accounts(self, scope: OwnerScope, include_inactive: bool = False) -> list[AccountEntity]:
        """List accounts visible in scope."""
        return self.db.list_accounts(scope, include_inactive=include_inactive)

    def rename_account(self, account_id: int, name: str, account_type: Optional[str] = None) -> None:
        """Rename an account.

        Args:
            account_id: Account ID to rename
            name: New account name
            account_type: Optional new account type (if None, it is not updated)

        Raises:
            NotFoundError: If account not found
            ConflictError: If the name is already used
        """
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        name = (name or "").strip()
        if not name:
            raise InvalidInputError("Account name is required")
        self._check_unique_name(account.user_id, name, exclude_id=account_id)

        fields = {"name": name}
        if account_type is not None:
            fields["account_type"] = account_type
        self.db.update_account(account_id, **fields)

    def deactivate_account(self, account_id: int) -> None:
        """Hide an account from listings; its transactions are kept.

        Raises:
            NotFoundError: If account not found
        """
        if self.db.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))
        self.db.update_account(account_id, is_active=False)
        logger.info("Deactivated account %s", account_id)

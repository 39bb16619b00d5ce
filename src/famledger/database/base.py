"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Any, Optional
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from famledger.domain.entities import (
    Account,
    BillReminder,
    Budget,
    Category,
    Goal,
    Household,
    HouseholdMember,
    Loan,
    LoanPayment,
    OwnerScope,
    RecurringTransaction,
    Transaction,
)


class Database(ABC):
    """Abstract database interface for famledger.

    Listing methods take an OwnerScope and return records owned by the user
    or by any of the scope's households. Versioned entities (loans, goals,
    recurring transactions, bill reminders) are updated with an
    expected_version; a mismatch raises ConcurrencyConflictError and leaves
    the row untouched.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Household operations
    @abstractmethod
    def create_household(self, name: str, created_by: str) -> int:
        """Create a household owned by created_by. Returns household ID."""
        pass

    @abstractmethod
    def get_household(self, household_id: int) -> Optional[Household]:
        """Get household by ID."""
        pass

    @abstractmethod
    def add_household_member(self, household_id: int, user_id: str, role: str) -> int:
        """Add a member to a household. Returns membership ID."""
        pass

    @abstractmethod
    def remove_household_member(self, household_id: int, user_id: str) -> None:
        """Remove a member from a household."""
        pass

    @abstractmethod
    def list_household_members(self, household_id: int) -> list[HouseholdMember]:
        """List members of a household."""
        pass

    @abstractmethod
    def list_user_household_ids(self, user_id: str) -> list[int]:
        """List IDs of households the user belongs to."""
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self,
        user_id: str,
        name: str,
        account_type: str,
        currency: str,
        opening_balance: Decimal,
        household_id: Optional[int] = None,
    ) -> int:
        """Create a new account. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def list_accounts(self, scope: OwnerScope, include_inactive: bool = False) -> list[Account]:
        """List accounts visible in scope."""
        pass

    @abstractmethod
    def update_account(self, account_id: int, **fields: Any) -> None:
        """Update account fields (name, account_type, currency, is_active)."""
        pass

    # Category operations
    @abstractmethod
    def create_category(self, name: str, category_type: str) -> int:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def get_category_by_name(self, name: str) -> Optional[Category]:
        """Get category by name."""
        pass

    @abstractmethod
    def list_categories(self, category_type: Optional[str] = None) -> list[Category]:
        """List categories, optionally filtered by type."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        user_id: str,
        account_id: int,
        transaction_type: str,
        amount: Decimal,
        date: date,
        category_id: Optional[int] = None,
        description: Optional[str] = None,
        notes: Optional[str] = None,
        household_id: Optional[int] = None,
        recurring_transaction_id: Optional[int] = None,
    ) -> int:
        """Create a transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def update_transaction(self, transaction_id: int, **fields: Any) -> None:
        """Update transaction fields."""
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        scope: OwnerScope,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[int] = None,
        category_id: Optional[int] = None,
        transaction_type: Optional[str] = None,
    ) -> list[Transaction]:
        """List transactions in scope with optional filters, newest first."""
        pass

    # Budget operations
    @abstractmethod
    def create_budget(
        self,
        user_id: str,
        name: str,
        category_id: int,
        amount: Decimal,
        period: str,
        start_date: date,
        end_date: Optional[date] = None,
        household_id: Optional[int] = None,
    ) -> int:
        """Create a budget. Returns budget ID."""
        pass

    @abstractmethod
    def get_budget(self, budget_id: int) -> Optional[Budget]:
        """Get budget by ID."""
        pass

    @abstractmethod
    def list_budgets(self, scope: OwnerScope, include_inactive: bool = False) -> list[Budget]:
        """List budgets in scope."""
        pass

    @abstractmethod
    def update_budget(self, budget_id: int, **fields: Any) -> None:
        """Update budget fields."""
        pass

    # Goal operations
    @abstractmethod
    def create_goal(
        self,
        user_id: str,
        name: str,
        target_amount: Decimal,
        current_amount: Decimal,
        target_date: Optional[date] = None,
        description: Optional[str] = None,
        household_id: Optional[int] = None,
    ) -> int:
        """Create a goal. Returns goal ID."""
        pass

    @abstractmethod
    def get_goal(self, goal_id: int) -> Optional[Goal]:
        """Get goal by ID."""
        pass

    @abstractmethod
    def list_goals(self, scope: OwnerScope, include_inactive: bool = False) -> list[Goal]:
        """List goals in scope."""
        pass

    @abstractmethod
    def update_goal(self, goal_id: int, expected_version: int, **fields: Any) -> int:
        """Update goal fields if the version matches. Returns the new version."""
        pass

    # Loan operations
    @abstractmethod
    def create_loan(
        self,
        user_id: str,
        name: str,
        loan_type: str,
        principal_amount: Decimal,
        interest_rate: Decimal,
        tenure_months: int,
        emi_amount: Decimal,
        start_date: date,
        next_due_date: date,
        household_id: Optional[int] = None,
    ) -> int:
        """Create a loan with remaining_balance = principal. Returns loan ID."""
        pass

    @abstractmethod
    def get_loan(self, loan_id: int) -> Optional[Loan]:
        """Get loan by ID, re-reading it from the database."""
        pass

    @abstractmethod
    def list_loans(self, scope: OwnerScope, include_inactive: bool = False) -> list[Loan]:
        """List loans in scope."""
        pass

    @abstractmethod
    def update_loan(self, loan_id: int, expected_version: int, **fields: Any) -> int:
        """Update loan fields if the version matches. Returns the new version."""
        pass

    @abstractmethod
    def record_loan_payment(
        self,
        loan_id: int,
        expected_version: int,
        amount: Decimal,
        principal_component: Decimal,
        interest_component: Decimal,
        payment_date: date,
        status: str,
        remaining_balance: Decimal,
        next_due_date: Optional[date],
        is_active: bool,
    ) -> int:
        """Insert a payment and update the loan in one commit. Returns payment ID."""
        pass

    @abstractmethod
    def get_loan_payment(self, payment_id: int) -> Optional[LoanPayment]:
        """Get loan payment by ID."""
        pass

    @abstractmethod
    def list_loan_payments(self, loan_id: int) -> list[LoanPayment]:
        """List payments of a loan, newest first."""
        pass

    # Recurring transaction operations
    @abstractmethod
    def create_recurring_transaction(
        self,
        user_id: str,
        account_id: int,
        description: str,
        amount: Decimal,
        transaction_type: str,
        frequency: str,
        start_date: date,
        end_date: Optional[date],
        next_execution_date: Optional[date],
        is_active: bool,
        category_id: Optional[int] = None,
        household_id: Optional[int] = None,
    ) -> int:
        """Create a recurring transaction. Returns its ID."""
        pass

    @abstractmethod
    def get_recurring_transaction(self, recurring_id: int) -> Optional[RecurringTransaction]:
        """Get recurring transaction by ID, re-reading it from the database."""
        pass

    @abstractmethod
    def list_recurring_transactions(
        self,
        scope: Optional[OwnerScope] = None,
        due_on: Optional[date] = None,
    ) -> list[RecurringTransaction]:
        """List recurring transactions.

        Args:
            scope: Optional owner scope; None lists every owner's schedules
            due_on: If set, only active schedules with next_execution_date <= due_on
        """
        pass

    @abstractmethod
    def update_recurring_transaction(
        self, recurring_id: int, expected_version: int, **fields: Any
    ) -> int:
        """Update recurring transaction fields if the version matches."""
        pass

    @abstractmethod
    def delete_recurring_transaction(self, recurring_id: int) -> None:
        """Delete a recurring transaction; generated transactions are kept."""
        pass

    @abstractmethod
    def record_recurring_execution(
        self,
        recurring_id: int,
        expected_version: int,
        execution_date: date,
        next_execution_date: Optional[date],
        is_active: bool,
    ) -> int:
        """Materialize one occurrence and advance the schedule in one commit.

        Returns:
            ID of the created transaction
        """
        pass

    # Bill reminder operations
    @abstractmethod
    def create_bill_reminder(
        self,
        user_id: str,
        title: str,
        due_date: date,
        reminder_days_before: int,
        is_recurring: bool,
        recurring_frequency: Optional[str] = None,
        amount: Optional[Decimal] = None,
        description: Optional[str] = None,
        category_id: Optional[int] = None,
        household_id: Optional[int] = None,
    ) -> int:
        """Create a bill reminder. Returns its ID."""
        pass

    @abstractmethod
    def get_bill_reminder(self, bill_id: int) -> Optional[BillReminder]:
        """Get bill reminder by ID."""
        pass

    @abstractmethod
    def list_bill_reminders(
        self, scope: OwnerScope, include_completed: bool = True
    ) -> list[BillReminder]:
        """List bill reminders in scope ordered by due date."""
        pass

    @abstractmethod
    def update_bill_reminder(self, bill_id: int, expected_version: int, **fields: Any) -> int:
        """Update bill reminder fields if the version matches."""
        pass

    @abstractmethod
    def delete_bill_reminder(self, bill_id: int) -> None:
        """Delete a bill reminder."""
        pass

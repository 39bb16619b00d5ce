"""Domain model entities for famledger.

These are pure data classes representing business concepts, independent of
database schema. Services receive and return these; the database layer maps
its ORM rows onto them.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


class TransactionType(str, Enum):
    """Direction of money movement."""

    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"


class CategoryType(str, Enum):
    """Whether a category collects income or expenses."""

    INCOME = "income"
    EXPENSE = "expense"


class Frequency(str, Enum):
    """Recurrence frequency for schedules, budgets and bills."""

    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


BILL_FREQUENCIES = (Frequency.MONTHLY, Frequency.QUARTERLY, Frequency.YEARLY)


class BudgetPeriod(str, Enum):
    """Window a budget amount applies to."""

    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class LoanStatus(str, Enum):
    """Derived lifecycle state of a loan."""

    ACTIVE = "active"
    PAID_OFF = "paid_off"
    DEACTIVATED = "deactivated"


class HouseholdRole(str, Enum):
    """Role of a user inside a household."""

    OWNER = "owner"
    MEMBER = "member"


@dataclass(frozen=True)
class OwnerScope:
    """Records visible to a user: their own plus their households'."""

    user_id: str
    household_ids: tuple[int, ...] = ()


@dataclass(frozen=True)
class Household:
    """Shared-ownership group."""

    id: int
    name: str
    created_by: str
    created_at: datetime


@dataclass(frozen=True)
class HouseholdMember:
    """Membership of a user in a household."""

    id: int
    household_id: int
    user_id: str
    role: HouseholdRole
    joined_at: datetime


@dataclass(frozen=True)
class Account:
    """Bank, cash or card account."""

    id: int
    user_id: str
    household_id: Optional[int]
    name: str
    account_type: str
    currency: str
    opening_balance: Decimal
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class Category:
    """Flat income or expense category."""

    id: int
    name: str
    category_type: CategoryType
    created_at: datetime


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity. Amounts are positive; direction is the type."""

    id: int
    user_id: str
    household_id: Optional[int]
    account_id: int
    category_id: Optional[int]
    transaction_type: TransactionType
    amount: Decimal
    date: date
    description: Optional[str]
    notes: Optional[str]
    recurring_transaction_id: Optional[int]
    created_at: datetime


@dataclass(frozen=True)
class Budget:
    """Spending limit for a category over a period."""

    id: int
    user_id: str
    household_id: Optional[int]
    name: str
    category_id: int
    amount: Decimal
    period: BudgetPeriod
    start_date: date
    end_date: Optional[date]
    is_active: bool


@dataclass(frozen=True)
class Goal:
    """Savings goal."""

    id: int
    user_id: str
    household_id: Optional[int]
    name: str
    description: Optional[str]
    target_amount: Decimal
    current_amount: Decimal
    target_date: Optional[date]
    is_active: bool
    version: int


@dataclass(frozen=True)
class Loan:
    """Amortizing loan."""

    id: int
    user_id: str
    household_id: Optional[int]
    name: str
    loan_type: str
    principal_amount: Decimal
    interest_rate: Decimal
    tenure_months: int
    emi_amount: Decimal
    remaining_balance: Decimal
    start_date: date
    next_due_date: Optional[date]
    is_active: bool
    version: int
    created_at: datetime
    updated_at: datetime

    @property
    def status(self) -> LoanStatus:
        if self.remaining_balance == 0:
            return LoanStatus.PAID_OFF
        if not self.is_active:
            return LoanStatus.DEACTIVATED
        return LoanStatus.ACTIVE


@dataclass(frozen=True)
class LoanPayment:
    """Append-only record of one payment against a loan."""

    id: int
    loan_id: int
    user_id: str
    household_id: Optional[int]
    amount: Decimal
    principal_component: Decimal
    interest_component: Decimal
    payment_date: date
    status: str
    created_at: datetime


@dataclass(frozen=True)
class RecurringSchedule:
    """Rule producing future occurrence dates."""

    frequency: Frequency
    start_date: date
    end_date: Optional[date] = None
    next_execution_date: Optional[date] = None
    is_active: bool = True

    @property
    def is_expired(self) -> bool:
        return not self.is_active or self.next_execution_date is None


@dataclass(frozen=True)
class RecurringTransaction:
    """Transaction template materialized on a schedule."""

    id: int
    user_id: str
    household_id: Optional[int]
    account_id: int
    category_id: Optional[int]
    description: str
    amount: Decimal
    transaction_type: TransactionType
    schedule: RecurringSchedule
    version: int
    created_at: datetime


@dataclass(frozen=True)
class BillReminder:
    """Upcoming bill with an optional monthly/quarterly/yearly repeat."""

    id: int
    user_id: str
    household_id: Optional[int]
    title: str
    description: Optional[str]
    amount: Optional[Decimal]
    due_date: date
    reminder_days_before: int
    is_recurring: bool
    recurring_frequency: Optional[Frequency]
    category_id: Optional[int]
    is_completed: bool
    version: int


@dataclass(frozen=True)
class MonthlyTotals:
    """Income and expenses for one calendar month."""

    month: int
    income: Decimal
    expenses: Decimal

    @property
    def net(self) -> Decimal:
        return self.income - self.expenses


@dataclass(frozen=True)
class CategoryTotal:
    """Total for one category in a breakdown."""

    category: str
    total: Decimal


@dataclass(frozen=True)
class BudgetStatus:
    """Consumption of a budget over its current window."""

    budget: Budget
    window_start: date
    window_end: date
    spent: Decimal
    remaining: Decimal
    percent_used: Decimal

    @property
    def is_over(self) -> bool:
        return self.spent > self.budget.amount


@dataclass(frozen=True)
class YearlyReport:
    """Year-to-date income, expense and savings figures."""

    year: int
    total_income: Decimal
    total_expenses: Decimal
    net_savings: Decimal
    savings_rate: Decimal
    income_growth: Decimal
    expense_growth: Decimal
    savings_growth: Decimal
    average_monthly_income: Decimal
    average_monthly_expenses: Decimal
    average_monthly_savings: Decimal
    monthly: tuple[MonthlyTotals, ...] = ()
    top_categories: tuple[CategoryTotal, ...] = ()


@dataclass(frozen=True)
class UpcomingPayment:
    """Next EMI due on an active loan."""

    loan_id: int
    name: str
    emi_amount: Decimal
    due_date: date


@dataclass(frozen=True)
class Dashboard:
    """Month-over-month snapshot for a user."""

    as_of: date
    current_month_income: Decimal
    current_month_expenses: Decimal
    last_month_income: Decimal
    last_month_expenses: Decimal
    income_growth: Decimal
    expense_growth: Decimal
    total_balance: Decimal
    total_loan_balance: Decimal
    net_worth: Decimal
    upcoming_payments: tuple[UpcomingPayment, ...] = ()


@dataclass(frozen=True)
class NotificationEvent:
    """Post-commit event handed to notification handlers."""

    kind: str
    payload: dict[str, Any] = field(default_factory=dict)

"""Aggregation and reporting.

The module-level functions are pure and work on immutable snapshots
(tuples) of already owner-filtered records. ReportService loads one snapshot
per call from the database and feeds it through them.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Mapping, Optional, Sequence

from dateutil.relativedelta import relativedelta

from famledger.database.base import Database
from famledger.domain.entities import (
    Account,
    Budget,
    BudgetPeriod,
    BudgetStatus,
    CategoryTotal,
    Dashboard,
    Goal,
    Loan,
    MonthlyTotals,
    OwnerScope,
    Transaction,
    TransactionType,
    UpcomingPayment,
    YearlyReport,
)
from famledger.domain.money import HUNDRED, ZERO, Money, month_bounds, percentage, round_money

UNCATEGORIZED = "Uncategorized"
TOP_CATEGORIES = 5
UPCOMING_LIMIT = 3


def sum_by_type(transactions: Iterable[Transaction], transaction_type: TransactionType) -> Money:
    """Total amount of transactions of one type."""
    return sum(
        (t.amount for t in transactions if t.transaction_type == transaction_type),
        ZERO,
    )


def monthly_breakdown(transactions: Iterable[Transaction], year: int) -> list[MonthlyTotals]:
    """Income and expenses for each month of year, keyed by transaction date.

    Always returns twelve rows; months without transactions are zero.
    """
    income = [ZERO] * 12
    expenses = [ZERO] * 12
    for t in transactions:
        if t.date.year != year:
            continue
        if t.transaction_type == TransactionType.INCOME:
            income[t.date.month - 1] += t.amount
        elif t.transaction_type == TransactionType.EXPENSE:
            expenses[t.date.month - 1] += t.amount
    return [
        MonthlyTotals(month=month, income=income[month - 1], expenses=expenses[month - 1])
        for month in range(1, 13)
    ]


def category_breakdown(
    transactions: Iterable[Transaction],
    transaction_type: TransactionType,
    top_n: int,
    category_names: Optional[Mapping[int, str]] = None,
) -> list[CategoryTotal]:
    """Totals per category, largest first, ties by name, truncated to top_n.

    Args:
        transactions: Transactions to group
        transaction_type: Only transactions of this type are counted
        top_n: Maximum number of rows
        category_names: Map of category ID to display name; IDs missing from
            it (and uncategorized transactions) are reported by ID or as
            "Uncategorized"
    """
    names = category_names or {}
    totals: dict[str, Decimal] = {}
    for t in transactions:
        if t.transaction_type != transaction_type:
            continue
        if t.category_id is None:
            name = UNCATEGORIZED
        else:
            name = names.get(t.category_id, f"Category {t.category_id}")
        totals[name] = totals.get(name, ZERO) + t.amount

    rows = sorted(totals.items(), key=lambda item: (-item[1], item[0]))
    return [CategoryTotal(category=name, total=total) for name, total in rows[:top_n]]


def budget_consumption(budget: Budget, transactions: Iterable[Transaction]) -> Decimal:
    """Percent of the budget spent by matching expense transactions; 0 for a zero budget."""
    if budget.amount == 0:
        return ZERO
    return percentage(_budget_spent(budget, transactions), budget.amount)


def _budget_spent(budget: Budget, transactions: Iterable[Transaction]) -> Money:
    return sum(
        (
            t.amount
            for t in transactions
            if t.transaction_type == TransactionType.EXPENSE and t.category_id == budget.category_id
        ),
        ZERO,
    )


def budget_window(budget: Budget, as_of: date) -> tuple[date, date]:
    """Return the period window of budget containing as_of.

    Weekly windows run Monday to Sunday. The window never starts before the
    budget's start date nor ends after its end date.
    """
    if budget.period == BudgetPeriod.WEEKLY:
        start = as_of - timedelta(days=as_of.weekday())
        end = start + timedelta(days=6)
    elif budget.period == BudgetPeriod.YEARLY:
        start, end = date(as_of.year, 1, 1), date(as_of.year, 12, 31)
    else:
        start, end = month_bounds(as_of.year, as_of.month)

    start = max(start, budget.start_date)
    if budget.end_date is not None:
        end = min(end, budget.end_date)
    return start, end


def growth_rate(current: Decimal, previous: Decimal) -> Decimal:
    """Percent change from previous to current; 0 when previous is 0."""
    if previous == 0:
        return ZERO
    return round_money((current - previous) / previous * HUNDRED)


def savings_rate(income: Decimal, expenses: Decimal) -> Decimal:
    """Net savings as a percent of income; 0 without income."""
    if income <= 0:
        return ZERO
    return percentage(income - expenses, income)


def yearly_report(
    transactions: Sequence[Transaction],
    year: int,
    category_names: Optional[Mapping[int, str]] = None,
) -> YearlyReport:
    """Year totals, growth against the previous year and monthly averages."""
    this_year = tuple(t for t in transactions if t.date.year == year)
    last_year = tuple(t for t in transactions if t.date.year == year - 1)

    income = sum_by_type(this_year, TransactionType.INCOME)
    expenses = sum_by_type(this_year, TransactionType.EXPENSE)
    net = income - expenses
    last_income = sum_by_type(last_year, TransactionType.INCOME)
    last_expenses = sum_by_type(last_year, TransactionType.EXPENSE)
    last_net = last_income - last_expenses

    months = Decimal(12)
    return YearlyReport(
        year=year,
        total_income=income,
        total_expenses=expenses,
        net_savings=net,
        savings_rate=savings_rate(income, expenses),
        income_growth=growth_rate(income, last_income),
        expense_growth=growth_rate(expenses, last_expenses),
        # A loss-making previous year gives no meaningful savings growth.
        savings_growth=growth_rate(net, last_net) if last_net > 0 else ZERO,
        average_monthly_income=round_money(income / months),
        average_monthly_expenses=round_money(expenses / months),
        average_monthly_savings=round_money(net / months),
        monthly=tuple(monthly_breakdown(this_year, year)),
        top_categories=tuple(
            category_breakdown(this_year, TransactionType.EXPENSE, TOP_CATEGORIES, category_names)
        ),
    )


def goal_progress(goal: Goal) -> Decimal:
    """Percent of the target saved, capped at 100."""
    if goal.target_amount <= 0:
        return ZERO
    return min(percentage(goal.current_amount, goal.target_amount), HUNDRED)


def account_balances(
    accounts: Iterable[Account], transactions: Iterable[Transaction]
) -> dict[int, Money]:
    """Current balance per account: opening balance plus income minus expenses.

    Transfers carry no counter-account and leave balances unchanged.
    """
    balances = {account.id: account.opening_balance for account in accounts}
    for t in transactions:
        if t.account_id not in balances:
            continue
        if t.transaction_type == TransactionType.INCOME:
            balances[t.account_id] += t.amount
        elif t.transaction_type == TransactionType.EXPENSE:
            balances[t.account_id] -= t.amount
    return balances


def net_worth(balances: Iterable[Decimal], loans: Iterable[Loan]) -> Money:
    """Assets minus the outstanding balance of active loans."""
    assets = sum(balances, ZERO)
    liabilities = sum((loan.remaining_balance for loan in loans if loan.is_active), ZERO)
    return assets - liabilities


def upcoming_payments(
    loans: Iterable[Loan], as_of: date, limit: int = UPCOMING_LIMIT
) -> list[UpcomingPayment]:
    """Next installments of active loans due on or after as_of, soonest first."""
    due = sorted(
        (
            loan
            for loan in loans
            if loan.is_active and loan.next_due_date is not None and loan.next_due_date >= as_of
        ),
        key=lambda loan: (loan.next_due_date, loan.id),
    )
    return [
        UpcomingPayment(
            loan_id=loan.id, name=loan.name, emi_amount=loan.emi_amount, due_date=loan.next_due_date
        )
        for loan in due[:limit]
    ]


class ReportService:
    """Builds reports from one database snapshot per call."""

    def __init__(self, db: Database):
        self.db = db

    def _category_names(self) -> dict[int, str]:
        return {cat.id: cat.name for cat in self.db.list_categories()}

    def yearly_report(self, scope: OwnerScope, year: int) -> YearlyReport:
        """Report for year, compared with the year before."""
        transactions = tuple(
            self.db.list_transactions(
                scope, start_date=date(year - 1, 1, 1), end_date=date(year, 12, 31)
            )
        )
        return yearly_report(transactions, year, self._category_names())

    def dashboard(self, scope: OwnerScope, as_of: Optional[date] = None) -> Dashboard:
        """Month-over-month income/expenses, net worth and next loan payments."""
        if as_of is None:
            as_of = date.today()
        current_start, current_end = month_bounds(as_of.year, as_of.month)
        last = as_of - relativedelta(months=1)
        last_start, last_end = month_bounds(last.year, last.month)

        accounts = tuple(self.db.list_accounts(scope))
        transactions = tuple(self.db.list_transactions(scope))
        loans = tuple(self.db.list_loans(scope))

        current = tuple(t for t in transactions if current_start <= t.date <= current_end)
        previous = tuple(t for t in transactions if last_start <= t.date <= last_end)
        current_income = sum_by_type(current, TransactionType.INCOME)
        current_expenses = sum_by_type(current, TransactionType.EXPENSE)
        last_income = sum_by_type(previous, TransactionType.INCOME)
        last_expenses = sum_by_type(previous, TransactionType.EXPENSE)

        balances = account_balances(accounts, transactions)
        total_balance = sum(balances.values(), ZERO)
        total_loans = sum((loan.remaining_balance for loan in loans if loan.is_active), ZERO)

        return Dashboard(
            as_of=as_of,
            current_month_income=current_income,
            current_month_expenses=current_expenses,
            last_month_income=last_income,
            last_month_expenses=last_expenses,
            income_growth=growth_rate(current_income, last_income),
            expense_growth=growth_rate(current_expenses, last_expenses),
            total_balance=total_balance,
            total_loan_balance=total_loans,
            net_worth=net_worth(balances.values(), loans),
            upcoming_payments=tuple(upcoming_payments(loans, as_of)),
        )

    def budget_status(self, scope: OwnerScope, as_of: Optional[date] = None) -> list[BudgetStatus]:
        """Spending against each active budget over its current window."""
        if as_of is None:
            as_of = date.today()
        statuses = []
        for budget in self.db.list_budgets(scope):
            if budget.start_date > as_of:
                continue
            if budget.end_date is not None and budget.end_date < as_of:
                continue
            window_start, window_end = budget_window(budget, as_of)
            transactions = tuple(
                self.db.list_transactions(
                    scope,
                    start_date=window_start,
                    end_date=window_end,
                    category_id=budget.category_id,
                    transaction_type=TransactionType.EXPENSE.value,
                )
            )
            spent = _budget_spent(budget, transactions)
            statuses.append(
                BudgetStatus(
                    budget=budget,
                    window_start=window_start,
                    window_end=window_end,
                    spent=spent,
                    remaining=budget.amount - spent,
                    percent_used=budget_consumption(budget, transactions),
                )
            )
        return statuses

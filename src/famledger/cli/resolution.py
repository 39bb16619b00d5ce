"""CLI helpers turning option strings into domain values or exiting."""

from datetime import date
from decimal import Decimal
from typing import Optional

import click

from famledger.cli.context import get_db, get_scope
from famledger.cli.error_handling import fail
from famledger.domain.account import AccountService
from famledger.domain.category import CategoryService
from famledger.domain.entities import Account, Category, Loan
from famledger.domain.errors import DomainError
from famledger.domain.loan import LoanService
from famledger.utils.amount_parser import parse_amount
from famledger.utils.date_parser import parse_date
from famledger.utils.resolver import resolve_account, resolve_loan


def account_or_exit(ctx: click.Context, account: str) -> Account:
    """Resolve account name or ID, or exit with a CLI error."""
    try:
        return resolve_account(AccountService(get_db(ctx)), get_scope(ctx), account)
    except DomainError as e:
        fail(ctx, str(e))


def loan_or_exit(ctx: click.Context, loan: str) -> Loan:
    """Resolve loan name or ID, or exit with a CLI error."""
    try:
        return resolve_loan(LoanService(get_db(ctx)), get_scope(ctx), loan)
    except DomainError as e:
        fail(ctx, str(e))


def category_or_exit(ctx: click.Context, name: str) -> Category:
    """Look a category up by name, or exit with a CLI error."""
    try:
        return CategoryService(get_db(ctx)).require_category_by_name(name)
    except DomainError as e:
        fail(ctx, str(e))


def date_or_exit(ctx: click.Context, value: Optional[str], label: str = "date") -> Optional[date]:
    """Parse an optional date option, or exit with a CLI error."""
    if value is None:
        return None
    try:
        return parse_date(value)
    except ValueError as e:
        fail(ctx, f"Invalid {label}: {e}")


def amount_or_exit(ctx: click.Context, value: Optional[str], label: str = "amount") -> Optional[Decimal]:
    """Parse an optional amount option, or exit with a CLI error."""
    if value is None:
        return None
    try:
        return parse_amount(value)
    except ValueError as e:
        fail(ctx, f"Invalid {label}: {e}")

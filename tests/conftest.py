"""Shared pytest fixtures for famledger tests."""

import logging
import os
import tempfile
from datetime import date
from decimal import Decimal

import pytest

from famledger.database.factories import create_sqlite_database
from famledger.domain.account import AccountService
from famledger.domain.budget import BudgetService
from famledger.domain.category import CategoryService
from famledger.domain.entities import OwnerScope
from famledger.domain.events import EventBus
from famledger.domain.goal import GoalService
from famledger.domain.household import HouseholdService
from famledger.domain.loan import LoanService
from famledger.domain.recurring import RecurringTransactionService
from famledger.domain.reports import ReportService
from famledger.domain.transaction import TransactionService

USER = "asha"


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo the logging setup done by CLI invocations."""
    root = logging.getLogger()
    app = logging.getLogger("famledger")
    handlers, root_level, app_level = root.handlers[:], root.level, app.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(root_level)
    app.setLevel(app_level)


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def scope():
    """Owner scope of the test user without households."""
    return OwnerScope(user_id=USER)


@pytest.fixture
def published():
    """List collecting every event published on the ``events`` bus."""
    return []


@pytest.fixture
def events(published):
    """Event bus recording published events."""
    bus = EventBus()
    bus.subscribe(published.append)
    return bus


@pytest.fixture
def account_service(temp_db):
    return AccountService(temp_db)


@pytest.fixture
def category_service(temp_db):
    return CategoryService(temp_db)


@pytest.fixture
def transaction_service(temp_db, events):
    return TransactionService(temp_db, events=events)


@pytest.fixture
def loan_service(temp_db, events):
    return LoanService(temp_db, events=events)


@pytest.fixture
def recurring_service(temp_db, events):
    return RecurringTransactionService(temp_db, events=events)


@pytest.fixture
def budget_service(temp_db):
    return BudgetService(temp_db)


@pytest.fixture
def goal_service(temp_db, events):
    return GoalService(temp_db, events=events)


@pytest.fixture
def household_service(temp_db):
    return HouseholdService(temp_db)


@pytest.fixture
def report_service(temp_db):
    return ReportService(temp_db)


@pytest.fixture
def sample_account(account_service):
    """Create a sample account for testing."""
    account_id = account_service.create_account(
        user_id=USER, name="HDFC Savings", opening_balance=Decimal("10000.00")
    )
    return account_service.get_account(account_id)


@pytest.fixture
def sample_categories(category_service):
    """Initialize default categories and return a name -> ID map."""
    category_service.init_defaults()
    return {cat.name: cat.id for cat in category_service.list_categories()}


@pytest.fixture
def car_loan(loan_service):
    """The 541272 at 19% over 48 months loan."""
    return loan_service.create_loan(
        user_id=USER,
        name="Car loan",
        principal=Decimal("541272"),
        interest_rate=Decimal("19"),
        tenure_months=48,
        start_date=date(2024, 1, 5),
        loan_type="car",
    )


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


"""Tests for bill reminders."""

from datetime import date
from decimal import Decimal

import pytest

from famledger.cli.main import cli
from famledger.domain import events as event_kinds
from famledger.domain.bill import BillReminderService
from famledger.domain.entities import Frequency
from famledger.domain.errors import InvalidInputError, NotFoundError

USER = "asha"


@pytest.fixture
def bill_service(temp_db, events):
    return BillReminderService(temp_db, events=events)


def test_create_one_off_bill(bill_service):
    bill_id = bill_service.create_bill(
        user_id=USER, title="Car insurance", due_date=date(2024, 6, 15), amount=Decimal("18000")
    )

    bill = bill_service.get_bill(bill_id)
    assert not bill.is_recurring
    assert bill.recurring_frequency is None
    assert bill.reminder_days_before == 3
    assert bill.amount == Decimal("18000.00")


def test_create_bill_rejects_unsupported_frequency(bill_service):
    with pytest.raises(InvalidInputError):
        bill_service.create_bill(
            user_id=USER, title="Milk", due_date=date(2024, 6, 15), recurring_frequency="daily"
        )


def test_create_bill_requires_title(bill_service):
    with pytest.raises(InvalidInputError):
        bill_service.create_bill(user_id=USER, title="  ", due_date=date(2024, 6, 15))


def test_recurring_bill_rolls_forward_when_paid(bill_service, published):
    bill_id = bill_service.create_bill(
        user_id=USER,
        title="Electricity",
        due_date=date(2024, 1, 31),
        amount=Decimal("1800"),
        recurring_frequency="monthly",
    )

    bill = bill_service.mark_paid(bill_id)

    assert bill.recurring_frequency == Frequency.MONTHLY
    assert bill.due_date == date(2024, 2, 29)
    assert not bill.is_completed
    assert published[-1].kind == event_kinds.BILL_PAID
    assert published[-1].payload["next_due_date"] == date(2024, 2, 29)


def test_one_off_bill_completes_when_paid(bill_service, scope):
    bill_id = bill_service.create_bill(user_id=USER, title="Passport", due_date=date(2024, 6, 1))

    bill = bill_service.mark_paid(bill_id)

    assert bill.is_completed
    assert bill_service.list_bills(scope, include_completed=False) == []
    with pytest.raises(InvalidInputError, match="already completed"):
        bill_service.mark_paid(bill_id)


def test_due_reminders_window(bill_service, scope):
    soon = bill_service.create_bill(
        user_id=USER, title="Rent", due_date=date(2024, 3, 5), reminder_days_before=5
    )
    bill_service.create_bill(user_id=USER, title="Later", due_date=date(2024, 3, 20))
    overdue = bill_service.create_bill(user_id=USER, title="Late", due_date=date(2024, 2, 25))

    due = bill_service.due_reminders(scope, as_of=date(2024, 3, 1))

    assert sorted(b.id for b in due) == sorted([soon, overdue])


def test_update_and_delete_bill(bill_service):
    bill_id = bill_service.create_bill(user_id=USER, title="Water", due_date=date(2024, 3, 5))

    bill = bill_service.update_bill(bill_id, amount=Decimal("450"), reminder_days_before=7)
    assert bill.amount == Decimal("450.00")
    assert bill.reminder_days_before == 7
    assert bill.version == 2

    bill_service.delete_bill(bill_id)
    assert bill_service.get_bill(bill_id) is None
    with pytest.raises(NotFoundError):
        bill_service.delete_bill(bill_id)


def test_bill_cli(cli_runner, temp_db):
    base = ["--db-path", temp_db.database_path, "--user", USER]

    result = cli_runner.invoke(
        cli, base + ["bill", "create", "Internet", "--due", "2024-03-10", "--amount", "999", "--repeat", "monthly"]
    )
    assert result.exit_code == 0, result.output

    result = cli_runner.invoke(cli, base + ["bill", "due", "--as-of", "2024-03-08"])
    assert result.exit_code == 0
    assert "Internet" in result.output

    result = cli_runner.invoke(cli, base + ["bill", "paid", "1"])
    assert result.exit_code == 0
    assert "next due 2024-04-10" in result.output

"""Tests for recurring transactions."""

from datetime import date
from decimal import Decimal

import pytest

from famledger.domain import events as event_kinds
from famledger.domain.entities import Frequency, TransactionType
from famledger.domain.errors import InvalidInputError, NotFoundError

USER = "asha"


@pytest.fixture
def rent(recurring_service, sample_account):
    """Monthly rent starting 2024-01-31."""
    return recurring_service.create_recurring(
        user_id=USER,
        account_id=sample_account.id,
        description="Rent",
        amount=Decimal("25000"),
        transaction_type="expense",
        frequency="monthly",
        start_date=date(2024, 1, 31),
    )


def test_create_recurring_schedules_first_run(rent):
    assert rent.schedule.frequency == Frequency.MONTHLY
    assert rent.schedule.next_execution_date == date(2024, 2, 29)
    assert rent.schedule.is_active
    assert rent.transaction_type == TransactionType.EXPENSE
    assert rent.amount == Decimal("25000.00")


def test_create_recurring_ending_before_first_run_is_inactive(recurring_service, sample_account):
    recurring = recurring_service.create_recurring(
        user_id=USER,
        account_id=sample_account.id,
        description="One week only",
        amount=Decimal("100"),
        transaction_type="expense",
        frequency="monthly",
        start_date=date(2024, 1, 1),
        end_date=date(2024, 1, 7),
    )

    assert recurring.schedule.is_expired
    assert recurring_service.run_due(as_of=date(2024, 12, 31)) == []


def test_create_recurring_validation(recurring_service, sample_account):
    with pytest.raises(InvalidInputError):
        recurring_service.create_recurring(
            user_id=USER,
            account_id=sample_account.id,
            description="Bad",
            amount=Decimal("0"),
            transaction_type="expense",
            frequency="monthly",
            start_date=date(2024, 1, 1),
        )
    with pytest.raises(InvalidInputError, match="frequency"):
        recurring_service.create_recurring(
            user_id=USER,
            account_id=sample_account.id,
            description="Bad",
            amount=Decimal("10"),
            transaction_type="expense",
            frequency="hourly",
            start_date=date(2024, 1, 1),
        )
    with pytest.raises(NotFoundError):
        recurring_service.create_recurring(
            user_id=USER,
            account_id=999,
            description="Bad",
            amount=Decimal("10"),
            transaction_type="expense",
            frequency="monthly",
            start_date=date(2024, 1, 1),
        )


def test_run_due_catches_up_missed_occurrences(recurring_service, transaction_service, rent, published):
    created = recurring_service.run_due(as_of=date(2024, 5, 1))

    assert len(created) == 3
    dates = sorted(transaction_service.get_transaction(t).date for t in created)
    assert dates == [date(2024, 2, 29), date(2024, 3, 31), date(2024, 4, 30)]

    txn = transaction_service.get_transaction(created[0])
    assert txn.recurring_transaction_id == rent.id
    assert txn.amount == Decimal("25000.00")
    assert txn.description == "Rent"

    assert recurring_service.get_recurring(rent.id).schedule.next_execution_date == date(2024, 5, 31)
    assert [e.kind for e in published].count(event_kinds.RECURRING_EXECUTED) == 3


def test_run_due_is_idempotent_for_same_date(recurring_service, rent):
    first = recurring_service.run_due(as_of=date(2024, 3, 31))
    second = recurring_service.run_due(as_of=date(2024, 3, 31))

    assert len(first) == 2
    assert second == []


def test_run_due_nothing_due(recurring_service, rent):
    assert recurring_service.run_due(as_of=date(2024, 2, 28)) == []
    assert recurring_service.get_recurring(rent.id).version == rent.version


def test_run_due_stops_at_end_date(recurring_service, sample_account):
    weekly = recurring_service.create_recurring(
        user_id=USER,
        account_id=sample_account.id,
        description="Milk",
        amount=Decimal("350"),
        transaction_type="expense",
        frequency="weekly",
        start_date=date(2024, 1, 1),
        end_date=date(2024, 1, 22),
    )

    created = recurring_service.run_due(as_of=date(2024, 3, 1))

    assert len(created) == 3
    schedule = recurring_service.get_recurring(weekly.id).schedule
    assert schedule.next_execution_date is None
    assert not schedule.is_active


def test_run_due_respects_scope(recurring_service, account_service, rent, scope):
    other_account = account_service.create_account(user_id="ravi", name="Ravi Cash")
    recurring_service.create_recurring(
        user_id="ravi",
        account_id=other_account,
        description="Gym",
        amount=Decimal("1500"),
        transaction_type="expense",
        frequency="monthly",
        start_date=date(2024, 1, 10),
    )

    mine = recurring_service.run_due(as_of=date(2024, 2, 29), scope=scope)
    assert len(mine) == 1

    everyone = recurring_service.run_due(as_of=date(2024, 2, 29))
    assert len(everyone) == 1


def test_paused_schedule_does_not_run(recurring_service, rent):
    recurring_service.update_recurring(rent.id, is_active=False)

    assert recurring_service.run_due(as_of=date(2024, 6, 1)) == []

    resumed = recurring_service.update_recurring(rent.id, is_active=True)
    assert resumed.schedule.is_active
    assert len(recurring_service.run_due(as_of=date(2024, 3, 1))) == 1


def test_expired_schedule_cannot_resume(recurring_service, sample_account):
    recurring = recurring_service.create_recurring(
        user_id=USER,
        account_id=sample_account.id,
        description="Short",
        amount=Decimal("10"),
        transaction_type="expense",
        frequency="monthly",
        start_date=date(2024, 1, 1),
        end_date=date(2024, 1, 5),
    )

    with pytest.raises(InvalidInputError, match="expired"):
        recurring_service.update_recurring(recurring.id, is_active=True)


def test_update_frequency_rebuilds_schedule(recurring_service, rent):
    updated = recurring_service.update_recurring(
        rent.id, frequency="quarterly", amount=Decimal("24000")
    )

    assert updated.schedule.frequency == Frequency.QUARTERLY
    assert updated.schedule.next_execution_date == date(2024, 4, 30)
    assert updated.amount == Decimal("24000.00")
    assert updated.version == rent.version + 1


def test_delete_keeps_generated_transactions(recurring_service, transaction_service, rent):
    created = recurring_service.run_due(as_of=date(2024, 3, 1))

    recurring_service.delete_recurring(rent.id)

    assert recurring_service.get_recurring(rent.id) is None
    txn = transaction_service.get_transaction(created[0])
    assert txn is not None
    assert txn.recurring_transaction_id is None

    with pytest.raises(NotFoundError):
        recurring_service.delete_recurring(rent.id)

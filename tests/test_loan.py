"""Tests for the loan ledger."""

import logging
import threading
from datetime import date
from decimal import Decimal

import pytest

from famledger.domain import events as event_kinds
from famledger.domain.amortization import compute_emi
from famledger.domain.entities import LoanStatus, NotificationEvent
from famledger.domain.errors import (
    CollaboratorUnavailableError,
    ConcurrencyConflictError,
    InvalidInputError,
    NotFoundError,
)
from famledger.domain.events import EventBus, NotificationHandler
from famledger.domain.loan import LoanService

USER = "asha"


def test_create_loan_derives_emi_and_first_due(car_loan):
    assert car_loan.principal_amount == Decimal("541272.00")
    assert car_loan.remaining_balance == Decimal("541272.00")
    assert Decimal("16180") < car_loan.emi_amount < Decimal("16190")
    assert car_loan.next_due_date == date(2024, 2, 5)
    assert car_loan.status == LoanStatus.ACTIVE
    assert car_loan.version == 1


def test_create_loan_zero_rate(loan_service):
    loan = loan_service.create_loan(
        user_id=USER,
        name="Family loan",
        principal=Decimal("1200"),
        interest_rate=Decimal("0"),
        tenure_months=12,
        start_date=date(2024, 1, 31),
    )

    assert loan.emi_amount == Decimal("100.00")
    assert loan.next_due_date == date(2024, 2, 29)


@pytest.mark.parametrize(
    "principal,rate,tenure",
    [
        (Decimal("0"), Decimal("10"), 12),
        (Decimal("1000"), Decimal("-1"), 12),
        (Decimal("1000"), Decimal("5000"), 12),
        (Decimal("1000"), Decimal("10"), 0),
        (Decimal("1000"), Decimal("10"), 1.5),
    ],
)
def test_create_loan_rejects_bad_terms(loan_service, principal, rate, tenure):
    with pytest.raises(InvalidInputError):
        loan_service.create_loan(
            user_id=USER,
            name="Bad",
            principal=principal,
            interest_rate=rate,
            tenure_months=tenure,
            start_date=date(2024, 1, 1),
        )


def test_create_loan_rejects_float_principal(loan_service):
    with pytest.raises(InvalidInputError, match="float"):
        loan_service.create_loan(
            user_id=USER,
            name="Float",
            principal=1000.0,
            interest_rate=Decimal("10"),
            tenure_months=12,
            start_date=date(2024, 1, 1),
        )


def test_apply_payment_splits_and_advances(loan_service, car_loan, published):
    payment = loan_service.apply_payment(car_loan.id, Decimal("16476.92"), date(2024, 2, 5))

    assert payment.interest_component == Decimal("8570.14")
    assert payment.principal_component == Decimal("7906.78")
    assert payment.status == "completed"

    loan = loan_service.get_loan(car_loan.id)
    assert loan.remaining_balance == Decimal("541272.00") - Decimal("7906.78")
    assert loan.next_due_date == date(2024, 3, 5)
    assert loan.version == car_loan.version + 1

    assert [e.kind for e in published] == [event_kinds.LOAN_PAYMENT_RECORDED]
    assert published[0].payload["loan_id"] == car_loan.id
    assert published[0].payload["principal"] == Decimal("7906.78")


def test_apply_payment_zero_rate(loan_service):
    loan = loan_service.create_loan(
        user_id=USER,
        name="Interest free",
        principal=Decimal("100"),
        interest_rate=Decimal("0"),
        tenure_months=2,
        start_date=date(2024, 1, 1),
    )

    payment = loan_service.apply_payment(loan.id, Decimal("50"), date(2024, 2, 1))

    assert payment.principal_component == Decimal("50.00")
    assert payment.interest_component == Decimal("0.00")
    assert loan_service.get_loan(loan.id).remaining_balance == Decimal("50.00")


def test_apply_payment_rejects_non_positive(loan_service, car_loan):
    with pytest.raises(InvalidInputError):
        loan_service.apply_payment(car_loan.id, Decimal("0"))
    with pytest.raises(InvalidInputError):
        loan_service.apply_payment(car_loan.id, Decimal("-10"))

    assert loan_service.list_payments(car_loan.id) == []


def test_apply_payment_unknown_loan(loan_service):
    with pytest.raises(NotFoundError, match="Loan 999 not found"):
        loan_service.apply_payment(999, Decimal("100"))


def test_next_due_keeps_start_day_through_short_months(loan_service):
    loan = loan_service.create_loan(
        user_id=USER,
        name="Month end",
        principal=Decimal("12000"),
        interest_rate=Decimal("12"),
        tenure_months=12,
        start_date=date(2024, 12, 31),
    )
    assert loan.next_due_date == date(2025, 1, 31)

    loan_service.apply_payment(loan.id, loan.emi_amount, date(2025, 1, 31))
    assert loan_service.get_loan(loan.id).next_due_date == date(2025, 2, 28)

    loan_service.apply_payment(loan.id, loan.emi_amount, date(2025, 2, 28))
    assert loan_service.get_loan(loan.id).next_due_date == date(2025, 3, 31)


def test_emi_payments_pay_off_within_tenure(loan_service, car_loan, published):
    payments = 0
    loan = car_loan
    while loan.is_active:
        loan_service.apply_payment(loan.id, car_loan.emi_amount, loan.next_due_date)
        loan = loan_service.get_loan(loan.id)
        payments += 1
        assert payments <= car_loan.tenure_months + 1

    assert loan.remaining_balance == Decimal("0.00")
    assert loan.next_due_date is None
    assert loan.status == LoanStatus.PAID_OFF
    assert published[-1].kind == event_kinds.LOAN_PAID_OFF

    history = loan_service.list_payments(loan.id)
    assert len(history) == payments
    total_principal = sum(p.principal_component for p in history)
    assert total_principal >= car_loan.principal_amount


def test_overpayment_clamps_balance_to_zero(loan_service):
    loan = loan_service.create_loan(
        user_id=USER,
        name="Small",
        principal=Decimal("1000"),
        interest_rate=Decimal("12"),
        tenure_months=12,
        start_date=date(2024, 1, 1),
    )

    loan_service.apply_payment(loan.id, Decimal("5000"), date(2024, 2, 1))

    loan = loan_service.get_loan(loan.id)
    assert loan.remaining_balance == Decimal("0.00")
    assert not loan.is_active


def test_payment_on_paid_off_loan_is_rejected(loan_service):
    loan = loan_service.create_loan(
        user_id=USER,
        name="Small",
        principal=Decimal("1000"),
        interest_rate=Decimal("0"),
        tenure_months=1,
        start_date=date(2024, 1, 1),
    )
    loan_service.apply_payment(loan.id, Decimal("1000"), date(2024, 2, 1))

    with pytest.raises(NotFoundError):
        loan_service.apply_payment(loan.id, Decimal("10"), date(2024, 3, 1))
    assert len(loan_service.list_payments(loan.id)) == 1


def test_stale_version_is_a_conflict(temp_db, car_loan):
    temp_db.update_loan(car_loan.id, car_loan.version, name="Renamed")

    with pytest.raises(ConcurrencyConflictError, match="modified concurrently"):
        temp_db.record_loan_payment(
            loan_id=car_loan.id,
            expected_version=car_loan.version,
            amount=Decimal("100.00"),
            principal_component=Decimal("100.00"),
            interest_component=Decimal("0.00"),
            payment_date=date(2024, 2, 5),
            status="completed",
            remaining_balance=car_loan.remaining_balance - Decimal("100.00"),
            next_due_date=date(2024, 3, 5),
            is_active=True,
        )

    assert temp_db.list_loan_payments(car_loan.id) == []
    assert temp_db.get_loan(car_loan.id).remaining_balance == car_loan.remaining_balance


def test_conflict_is_retried_from_fresh_read(temp_db, loan_service, car_loan, monkeypatch):
    original = temp_db.record_loan_payment
    calls = []

    def racing_record(**kwargs):
        calls.append(kwargs["expected_version"])
        if len(calls) == 1:
            # Another writer gets in between our read and our write
            loan = temp_db.get_loan(kwargs["loan_id"])
            temp_db.update_loan(loan.id, loan.version, name="Renamed elsewhere")
        return original(**kwargs)

    monkeypatch.setattr(temp_db, "record_loan_payment", racing_record)

    loan_service.apply_payment(car_loan.id, car_loan.emi_amount, date(2024, 2, 5))

    assert calls == [1, 2]
    loan = loan_service.get_loan(car_loan.id)
    assert loan.name == "Renamed elsewhere"
    assert len(loan_service.list_payments(car_loan.id)) == 1


def test_conflict_surfaces_after_max_attempts(temp_db, car_loan, monkeypatch):
    service = LoanService(temp_db, max_attempts=2)

    def always_conflict(**kwargs):
        raise ConcurrencyConflictError("Loan modified concurrently")

    monkeypatch.setattr(temp_db, "record_loan_payment", always_conflict)

    with pytest.raises(ConcurrencyConflictError, match="after 2 conflicting attempts"):
        service.apply_payment(car_loan.id, Decimal("100"), date(2024, 2, 5))


def test_concurrent_payments_are_all_applied(loan_service, car_loan):
    errors = []

    def pay():
        try:
            loan_service.apply_payment(car_loan.id, Decimal("1000"), date(2024, 2, 5))
        except Exception as e:  # collected and asserted below
            errors.append(e)

    threads = [threading.Thread(target=pay) for _ in range(6)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    payments = loan_service.list_payments(car_loan.id)
    assert len(payments) == 6

    loan = loan_service.get_loan(car_loan.id)
    principal_paid = sum(p.principal_component for p in payments)
    assert loan.remaining_balance == car_loan.principal_amount - principal_paid
    assert loan.version == car_loan.version + 6


def test_failing_notifier_does_not_undo_payment(temp_db, car_loan, caplog):
    class DownSender:
        def notify(self, event: NotificationEvent) -> None:
            raise CollaboratorUnavailableError("webhook unreachable")

    bus = EventBus()
    bus.subscribe(NotificationHandler(DownSender()))
    service = LoanService(temp_db, events=bus)
    caplog.set_level(logging.WARNING, logger="famledger")

    payment = service.apply_payment(car_loan.id, car_loan.emi_amount, date(2024, 2, 5))

    assert temp_db.get_loan_payment(payment.id) is not None
    assert service.get_loan(car_loan.id).remaining_balance < car_loan.principal_amount
    assert "not delivered" in caplog.text


def test_payment_log_carries_loan_and_payment_ids(loan_service, car_loan, caplog):
    caplog.set_level(logging.INFO, logger="famledger.domain.loan")

    payment = loan_service.apply_payment(car_loan.id, car_loan.emi_amount, date(2024, 2, 5))

    recorded = [r for r in caplog.records if r.getMessage().startswith("Recorded payment")]
    assert len(recorded) == 1
    assert recorded[0].loan_id == car_loan.id
    assert recorded[0].payment_id == payment.id


def test_update_loan_recomputes_emi(loan_service, car_loan):
    updated = loan_service.update_loan(car_loan.id, interest_rate=Decimal("0"), tenure_months=48)

    assert updated.emi_amount == Decimal("11276.50")
    assert updated.version == car_loan.version + 1


def test_update_principal_resets_balance_before_payments(loan_service, car_loan):
    updated = loan_service.update_loan(car_loan.id, principal_amount=Decimal("500000"))

    assert updated.principal_amount == Decimal("500000.00")
    assert updated.remaining_balance == Decimal("500000.00")
    assert updated.emi_amount < car_loan.emi_amount


def test_update_principal_refused_after_payment(loan_service, car_loan):
    loan_service.apply_payment(car_loan.id, car_loan.emi_amount, date(2024, 2, 5))

    with pytest.raises(InvalidInputError, match="payments already recorded"):
        loan_service.update_loan(car_loan.id, principal_amount=Decimal("500000"))

    # Name changes are still fine
    assert loan_service.update_loan(car_loan.id, name="Sedan").name == "Sedan"


def test_deactivate_loan_keeps_history(loan_service, car_loan, scope):
    loan_service.apply_payment(car_loan.id, car_loan.emi_amount, date(2024, 2, 5))

    loan = loan_service.deactivate_loan(car_loan.id)

    assert loan.status == LoanStatus.DEACTIVATED
    assert loan_service.list_loans(scope) == []
    assert [item.id for item in loan_service.list_loans(scope, include_inactive=True)] == [car_loan.id]
    assert len(loan_service.list_payments(car_loan.id)) == 1


def test_list_payments_unknown_loan(loan_service):
    with pytest.raises(NotFoundError):
        loan_service.list_payments(42)


def test_projected_schedule_from_current_balance(loan_service, car_loan):
    full = loan_service.projected_schedule(car_loan.id)
    assert len(full) == 48
    assert full[-1].closing_balance == Decimal("0.00")

    loan_service.apply_payment(car_loan.id, car_loan.emi_amount, date(2024, 2, 5))
    rest = loan_service.projected_schedule(car_loan.id)
    assert len(rest) == 47
    assert rest[0].opening_balance == loan_service.get_loan(car_loan.id).remaining_balance


def test_upcoming_payments(loan_service, car_loan, scope):
    other = loan_service.create_loan(
        user_id=USER,
        name="Phone",
        principal=Decimal("30000"),
        interest_rate=Decimal("14"),
        tenure_months=6,
        start_date=date(2024, 1, 1),
    )

    upcoming = loan_service.upcoming_payments(scope, as_of=date(2024, 2, 1))

    assert [p.loan_id for p in upcoming] == [other.id, car_loan.id]
    assert upcoming[0].due_date == date(2024, 2, 1)
    assert loan_service.upcoming_payments(scope, as_of=date(2024, 2, 6)) == []


def test_emi_matches_stored_rate(loan_service):
    loan = loan_service.create_loan(
        user_id=USER,
        name="Fine rate",
        principal="9999999999",
        interest_rate="10.00004",
        tenure_months=12,
        start_date=date(2024, 1, 1),
    )

    stored = loan_service.get_loan(loan.id)
    assert stored.interest_rate == Decimal("10.0000")
    assert stored.emi_amount == compute_emi(stored.principal_amount, stored.interest_rate, 12)


def test_update_rate_is_rounded_before_emi(loan_service, car_loan):
    updated = loan_service.update_loan(car_loan.id, interest_rate="12.34565")

    assert updated.interest_rate == Decimal("12.3457")
    assert updated.emi_amount == compute_emi(
        updated.principal_amount, updated.interest_rate, updated.tenure_months
    )


def test_update_rejects_rate_above_hundred(loan_service, car_loan):
    with pytest.raises(InvalidInputError, match="between 0 and 100"):
        loan_service.update_loan(car_loan.id, interest_rate="150")

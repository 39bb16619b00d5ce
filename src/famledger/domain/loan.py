"""Loan ledger domain service."""

import logging
from datetime import date
from typing import Optional

from famledger.database.base import Database
from famledger.domain import events as event_kinds
from famledger.domain.amortization import AmortizationRow, build_schedule, compute_emi, split_payment
from famledger.domain.entities import (
    Loan,
    LoanPayment,
    NotificationEvent,
    OwnerScope,
    UpcomingPayment,
)
from famledger.domain.errors import InvalidInputError, NotFoundError, loan_not_found
from famledger.domain.events import EventBus
from famledger.domain.locks import DEFAULT_MAX_ATTEMPTS, KeyedLocks, retry_on_conflict
from famledger.domain.money import ZERO, MoneyLike, add_months, to_money, to_rate
from famledger.domain.reports import UPCOMING_LIMIT, upcoming_payments

logger = logging.getLogger(__name__)

PAYMENT_COMPLETED = "completed"

# Shared by every LoanService in the process.
_loan_locks = KeyedLocks()


def _validate_tenure(tenure_months: int) -> int:
    if isinstance(tenure_months, bool) or not isinstance(tenure_months, int):
        raise InvalidInputError("Tenure must be a whole number of months")
    if tenure_months <= 0:
        raise InvalidInputError("Tenure must be at least one month")
    return tenure_months


def _validate_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise InvalidInputError("Loan name is required")
    return name


class LoanService:
    """Service for managing loans and recording their payments.

    Every read-modify-write on a loan holds that loan's lock and writes with
    a version check. A version conflict (another process got there first) is
    retried from a fresh read up to max_attempts times.
    """

    def __init__(
        self,
        db: Database,
        events: Optional[EventBus] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        """Initialize loan service.

        Args:
            db: Database instance
            events: Optional event bus notified after each committed payment
            max_attempts: Attempts per operation before a conflict is surfaced
        """
        self.db = db
        self.events = events
        self.max_attempts = max_attempts

    def _publish(self, kind: str, **payload) -> None:
        if self.events is not None:
            self.events.publish(NotificationEvent(kind=kind, payload=payload))

    def _require_loan(self, loan_id: int, active_only: bool = False) -> Loan:
        loan = self.db.get_loan(loan_id)
        if loan is None or (active_only and not loan.is_active):
            raise NotFoundError(loan_not_found(loan_id))
        return loan

    def create_loan(
        self,
        user_id: str,
        name: str,
        principal: MoneyLike,
        interest_rate: MoneyLike,
        tenure_months: int,
        start_date: date,
        loan_type: str = "personal",
        household_id: Optional[int] = None,
    ) -> Loan:
        """Create a loan and derive its EMI.

        The first installment falls due one calendar month after start_date.

        Returns:
            The created loan

        Raises:
            InvalidInputError: If principal, rate or tenure are out of range
        """
        name = _validate_name(name)
        principal_amount = to_money(principal, "principal")
        rate = to_rate(interest_rate)
        tenure_months = _validate_tenure(tenure_months)
        emi = compute_emi(principal_amount, rate, tenure_months)

        loan_id = self.db.create_loan(
            user_id=user_id,
            name=name,
            loan_type=loan_type,
            principal_amount=principal_amount,
            interest_rate=rate,
            tenure_months=tenure_months,
            emi_amount=emi,
            start_date=start_date,
            next_due_date=add_months(start_date, 1),
            household_id=household_id,
        )
        logger.info(
            "Created loan %s '%s': principal %s, EMI %s",
            loan_id,
            name,
            principal_amount,
            emi,
            extra={"loan_id": loan_id},
        )
        return self._require_loan(loan_id)

    def apply_payment(
        self, loan_id: int, amount: MoneyLike, payment_date: Optional[date] = None
    ) -> LoanPayment:
        """Record a payment against an active loan.

        The payment is split into interest (charged first on the current
        balance) and principal. The payment row and the loan's new balance and
        due date are committed together. A payment that clears the balance
        closes the loan in the same commit.

        Args:
            loan_id: Loan ID
            amount: Amount paid, must be positive
            payment_date: Date of payment (default: today)

        Returns:
            The recorded payment

        Raises:
            NotFoundError: If the loan does not exist or is inactive
            InvalidInputError: If amount is not positive
            ConcurrencyConflictError: If retries were exhausted
        """
        amount = to_money(amount)
        if amount <= 0:
            raise InvalidInputError("Payment amount must be greater than zero")
        if payment_date is None:
            payment_date = date.today()

        def attempt() -> tuple[int, Loan, bool]:
            loan = self._require_loan(loan_id, active_only=True)
            split = split_payment(loan.remaining_balance, loan.interest_rate, amount)
            new_balance = max(ZERO, loan.remaining_balance - split.principal)
            paid_off = new_balance == 0
            if paid_off:
                next_due = None
            else:
                next_due = add_months(
                    loan.next_due_date or payment_date, 1, anchor_day=loan.start_date.day
                )
            payment_id = self.db.record_loan_payment(
                loan_id=loan_id,
                expected_version=loan.version,
                amount=amount,
                principal_component=split.principal,
                interest_component=split.interest,
                payment_date=payment_date,
                status=PAYMENT_COMPLETED,
                remaining_balance=new_balance,
                next_due_date=next_due,
                is_active=not paid_off,
            )
            return payment_id, loan, paid_off

        with _loan_locks.hold(loan_id):
            payment_id, loan, paid_off = retry_on_conflict(
                attempt, "Loan", loan_id, self.max_attempts
            )

        payment = self.db.get_loan_payment(payment_id)
        logger.info(
            "Recorded payment %s on loan %s: principal %s, interest %s",
            payment.id,
            loan_id,
            payment.principal_component,
            payment.interest_component,
            extra={"loan_id": loan_id, "payment_id": payment.id},
        )
        self._publish(
            event_kinds.LOAN_PAYMENT_RECORDED,
            user_id=loan.user_id,
            loan_id=loan_id,
            loan_name=loan.name,
            payment_id=payment.id,
            amount=payment.amount,
            principal=payment.principal_component,
            interest=payment.interest_component,
            payment_date=payment.payment_date,
        )
        if paid_off:
            logger.info("Loan %s paid off", loan_id, extra={"loan_id": loan_id})
            self._publish(
                event_kinds.LOAN_PAID_OFF,
                user_id=loan.user_id,
                loan_id=loan_id,
                loan_name=loan.name,
            )
        return payment

    def update_loan(
        self,
        loan_id: int,
        name: Optional[str] = None,
        loan_type: Optional[str] = None,
        principal_amount: Optional[MoneyLike] = None,
        interest_rate: Optional[MoneyLike] = None,
        tenure_months: Optional[int] = None,
        start_date: Optional[date] = None,
    ) -> Loan:
        """Edit loan terms, recomputing the EMI when principal, rate or tenure change.

        The principal can only be changed before any payment is recorded; the
        remaining balance then resets to the new principal.

        Raises:
            NotFoundError: If the loan does not exist
            InvalidInputError: If a value is out of range or the principal
                can no longer be changed
        """
        if name is not None:
            name = _validate_name(name)
        if principal_amount is not None:
            principal_amount = to_money(principal_amount, "principal")
        if interest_rate is not None:
            interest_rate = to_rate(interest_rate)
        if tenure_months is not None:
            tenure_months = _validate_tenure(tenure_months)

        def attempt() -> Loan:
            loan = self._require_loan(loan_id)
            has_payments = bool(self.db.list_loan_payments(loan_id))
            fields = {}
            if name is not None:
                fields["name"] = name
            if loan_type is not None:
                fields["loan_type"] = loan_type
            if principal_amount is not None and principal_amount != loan.principal_amount:
                if has_payments:
                    raise InvalidInputError(
                        f"Cannot change principal of loan {loan_id}: payments already recorded"
                    )
                fields["principal_amount"] = principal_amount
                fields["remaining_balance"] = principal_amount
            if interest_rate is not None:
                fields["interest_rate"] = interest_rate
            if tenure_months is not None:
                fields["tenure_months"] = tenure_months
            if start_date is not None:
                fields["start_date"] = start_date
                if not has_payments and loan.is_active:
                    fields["next_due_date"] = add_months(start_date, 1)

            if {"principal_amount", "interest_rate", "tenure_months"} & fields.keys():
                fields["emi_amount"] = compute_emi(
                    fields.get("principal_amount", loan.principal_amount),
                    fields.get("interest_rate", loan.interest_rate),
                    fields.get("tenure_months", loan.tenure_months),
                )
            if not fields:
                return loan

            self.db.update_loan(loan_id, loan.version, **fields)
            logger.info("Updated loan %s: %s", loan_id, ", ".join(sorted(fields)), extra={"loan_id": loan_id})
            return self._require_loan(loan_id)

        with _loan_locks.hold(loan_id):
            return retry_on_conflict(attempt, "Loan", loan_id, self.max_attempts)

    def deactivate_loan(self, loan_id: int) -> Loan:
        """Stop tracking a loan without touching its balance or history.

        Raises:
            NotFoundError: If the loan does not exist
        """

        def attempt() -> Loan:
            loan = self._require_loan(loan_id)
            if not loan.is_active:
                return loan
            self.db.update_loan(loan_id, loan.version, is_active=False)
            logger.info("Deactivated loan %s", loan_id, extra={"loan_id": loan_id})
            return self._require_loan(loan_id)

        with _loan_locks.hold(loan_id):
            return retry_on_conflict(attempt, "Loan", loan_id, self.max_attempts)

    def get_loan(self, loan_id: int) -> Optional[Loan]:
        """Get loan by ID, or None if not found."""
        return self.db.get_loan(loan_id)

    def list_loans(self, scope: OwnerScope, include_inactive: bool = False) -> list[Loan]:
        """List loans visible in scope."""
        return self.db.list_loans(scope, include_inactive=include_inactive)

    def list_payments(self, loan_id: int) -> list[LoanPayment]:
        """List a loan's payments, newest first.

        Raises:
            NotFoundError: If the loan does not exist
        """
        self._require_loan(loan_id)
        return self.db.list_loan_payments(loan_id)

    def upcoming_payments(
        self, scope: OwnerScope, as_of: Optional[date] = None, limit: int = UPCOMING_LIMIT
    ) -> list[UpcomingPayment]:
        """Next installments of active loans due on or after as_of, soonest first."""
        if as_of is None:
            as_of = date.today()
        return upcoming_payments(self.db.list_loans(scope), as_of, limit)

    def projected_schedule(self, loan_id: int) -> list[AmortizationRow]:
        """Project the remaining repayment schedule from the current balance.

        Raises:
            NotFoundError: If the loan does not exist
        """
        loan = self._require_loan(loan_id)
        if loan.remaining_balance == 0:
            return []
        paid = len(self.db.list_loan_payments(loan_id))
        remaining_months = max(1, loan.tenure_months - paid)
        return build_schedule(loan.remaining_balance, loan.interest_rate, remaining_months)

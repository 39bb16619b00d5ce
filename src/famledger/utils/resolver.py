"""Resolve user-supplied names or IDs to records."""

from typing import Callable, Iterable, Optional, TypeVar, Union

from famledger.domain.account import AccountService
from famledger.domain.entities import Account, Loan, OwnerScope
from famledger.domain.errors import NotFoundError
from famledger.domain.loan import LoanService

T = TypeVar("T", Account, Loan)


def _resolve(
    kind: str,
    ref: Union[str, int],
    get_by_id: Callable[[int], Optional[T]],
    candidates: Callable[[], Iterable[T]],
    scope: OwnerScope,
) -> T:
    """Look ref up as an ID first, then by exact name within scope."""
    try:
        record_id = int(ref)
    except (TypeError, ValueError):
        record_id = None

    if record_id is not None:
        record = get_by_id(record_id)
        visible = record is not None and (
            record.user_id == scope.user_id or record.household_id in scope.household_ids
        )
        if not visible:
            raise NotFoundError(f"{kind} ID {record_id} not found")
        return record

    matches = [record for record in candidates() if record.name == ref]
    if not matches:
        raise NotFoundError(f"{kind} '{ref}' not found")
    if len(matches) > 1:
        ids = ", ".join(str(m.id) for m in matches)
        raise NotFoundError(f"{kind} name '{ref}' is ambiguous (IDs {ids}); use an ID")
    return matches[0]


def resolve_account(account_service: AccountService, scope: OwnerScope, account: Union[str, int]) -> Account:
    """Resolve account name or ID to an account visible in scope.

    Raises:
        NotFoundError: If no such account exists in scope
    """
    return _resolve(
        "Account",
        account,
        account_service.get_account,
        lambda: account_service.list_accounts(scope),
        scope,
    )


def resolve_loan(loan_service: LoanService, scope: OwnerScope, loan: Union[str, int]) -> Loan:
    """Resolve loan name or ID to a loan visible in scope (active or not).

    Raises:
        NotFoundError: If no such loan exists in scope
    """
    return _resolve(
        "Loan",
        loan,
        loan_service.get_loan,
        lambda: loan_service.list_loans(scope, include_inactive=True),
        scope,
    )

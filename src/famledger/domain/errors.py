"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class InvalidInputError(DomainError):
    """Malformed or out-of-range input rejected by domain logic."""


# Older call sites use the generic name.
ValidationError = InvalidInputError


class NotFoundError(DomainError):
    """Requested domain entity does not exist or is inactive."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class ConcurrencyConflictError(ConflictError):
    """Optimistic-lock version mismatch on a read-modify-write."""


class CollaboratorUnavailableError(DomainError):
    """Persistence or notification backend could not be reached."""


def loan_not_found(loan_id: int) -> str:
    """Return message for missing or inactive loan."""
    return f"Loan {loan_id} not found or inactive"


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def category_not_found(category_id: int) -> str:
    """Return message for missing category by ID."""
    return f"Category {category_id} not found"


def category_name_not_found(name: str) -> str:
    """Return message for missing category by name."""
    return f"Category '{name}' not found"


def recurring_not_found(recurring_id: int) -> str:
    """Return message for missing recurring transaction."""
    return f"Recurring transaction {recurring_id} not found"


def version_conflict(entity: str, entity_id: int, expected_version: int) -> str:
    """Return message for an optimistic-lock mismatch."""
    return (
        f"{entity} {entity_id} was modified concurrently "
        f"(expected version {expected_version})"
    )


def retries_exhausted(entity: str, entity_id: int, attempts: int) -> str:
    """Return message when conflict retries run out."""
    return f"Gave up updating {entity} {entity_id} after {attempts} conflicting attempts"

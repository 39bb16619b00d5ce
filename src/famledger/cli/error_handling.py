"""CLI error handling helpers."""

from typing import NoReturn

import click

from famledger.domain.errors import ConcurrencyConflictError, DomainError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> NoReturn:
    """Print error on stderr and exit with status 1.

    A lost concurrent update is safe to repeat, so the message says so.
    """
    message = str(error)
    if isinstance(error, ConcurrencyConflictError):
        message = f"{message}. Nothing was saved; run the command again."
    fail(ctx, message)


def fail(ctx: click.Context, message: str) -> NoReturn:
    click.echo(f"Error: {message}", err=True)
    ctx.exit(1)

"""Main CLI entry point."""

import click

from famledger.cli.error_handling import handle_domain_error
from famledger.config import Settings
from famledger.database.factories import create_sqlite_database
from famledger.domain.errors import InvalidInputError
from famledger.logging import setup_logging
from famledger.notifiers import build_event_bus

# Import and register all commands at module level
from famledger.cli.commands import (
    account,
    bill,
    budget,
    category,
    goal,
    household,
    loan,
    recurring,
    report,
    transaction,
)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides FAMLEDGER_DB_PATH environment variable)",
    envvar="FAMLEDGER_DB_PATH",
)
@click.option(
    "--user",
    help="User the command acts for (overrides FAMLEDGER_USER)",
    envvar="FAMLEDGER_USER",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Log level (overrides FAMLEDGER_LOG_LEVEL)",
    envvar="FAMLEDGER_LOG_LEVEL",
)
@click.pass_context
def cli(ctx, db_path: str | None, user: str | None, log_level: str | None):
    """famledger - family finance ledger.

    Track accounts, transactions, budgets, goals, bills and loans, run
    recurring transactions and build yearly and dashboard reports.
    """
    ctx.ensure_object(dict)

    # Only touch the database when a command actually runs (not for --help)
    if ctx.invoked_subcommand is None:
        return

    try:
        settings = Settings.from_env()
    except InvalidInputError as e:
        handle_domain_error(ctx, e)
    if db_path:
        settings.db_path = db_path
    if user:
        settings.user = user
    if log_level:
        settings.log_level = log_level.upper()

    setup_logging(settings.log_level, settings.log_format, user=settings.user)

    db = create_sqlite_database(database_path=settings.db_path)
    db.connect()
    db.initialize_schema()
    ctx.call_on_close(db.disconnect)

    ctx.obj["db"] = db
    ctx.obj["settings"] = settings
    ctx.obj["events"] = build_event_bus(settings.notify_webhook_url, settings.notify_timeout)


# Register all commands
household.register_commands(cli)
account.register_commands(cli)
category.register_commands(cli)
transaction.register_commands(cli)
loan.register_commands(cli)
recurring.register_commands(cli)
bill.register_commands(cli)
budget.register_commands(cli)
goal.register_commands(cli)
report.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()

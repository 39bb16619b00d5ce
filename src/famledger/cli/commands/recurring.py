"""Recurring transaction commands."""

import click

from famledger.cli.context import get_db, get_events, get_scope, get_settings, get_user
from famledger.cli.error_handling import handle_domain_error
from famledger.cli.resolution import account_or_exit, amount_or_exit, category_or_exit, date_or_exit
from famledger.domain.entities import Frequency, TransactionType
from famledger.domain.recurrence import upcoming_occurrences
from famledger.domain.recurring import RecurringTransactionService
from famledger.utils.currency import format_money

FREQUENCIES = [f.value for f in Frequency]


def _service(ctx) -> RecurringTransactionService:
    return RecurringTransactionService(
        get_db(ctx),
        events=get_events(ctx),
        max_attempts=get_settings(ctx).max_conflict_retries,
    )


@click.group()
def recurring_group():
    """Manage recurring transactions (salary, rent, subscriptions)."""
    pass


@recurring_group.command("create")
@click.argument("description")
@click.option("--account", required=True, help="Account name or ID")
@click.option("--amount", required=True, help="Amount of each occurrence")
@click.option("--frequency", type=click.Choice(FREQUENCIES), required=True)
@click.option(
    "--type",
    "txn_type",
    type=click.Choice([t.value for t in TransactionType]),
    default="expense",
    show_default=True,
)
@click.option("--start", "start_date", default="today", show_default=True, help="Schedule start date")
@click.option("--end", "end_date", help="Last date an occurrence may fall on")
@click.option("--category", help="Category name")
@click.option("--household", "household_id", type=int, help="Share with a household")
@click.pass_context
def create_recurring(
    ctx,
    description: str,
    account: str,
    amount: str,
    frequency: str,
    txn_type: str,
    start_date: str,
    end_date: str | None,
    category: str | None,
    household_id: int | None,
):
    """Create a recurring transaction; the first run is one step after --start.

    Examples:
        famledger recurring create Rent --account HDFC --amount 25000 --frequency monthly --start 2024-01-01
    """
    account_obj = account_or_exit(ctx, account)
    category_id = category_or_exit(ctx, category).id if category else None
    try:
        recurring = _service(ctx).create_recurring(
            user_id=get_user(ctx),
            account_id=account_obj.id,
            description=description,
            amount=amount_or_exit(ctx, amount),
            transaction_type=txn_type,
            frequency=frequency,
            start_date=date_or_exit(ctx, start_date, "start date"),
            end_date=date_or_exit(ctx, end_date, "end date"),
            category_id=category_id,
            household_id=household_id,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created recurring transaction '{recurring.description}' (ID: {recurring.id})")
    if recurring.schedule.is_expired:
        click.echo("  Schedule already ended; nothing will run.")
    else:
        click.echo(f"  Next run: {recurring.schedule.next_execution_date}")


@recurring_group.command("list")
@click.option("--upcoming", type=int, default=0, help="Also show the next N run dates")
@click.pass_context
def list_recurring(ctx, upcoming: int):
    """List recurring transactions."""
    items = _service(ctx).list_recurring(get_scope(ctx))
    if not items:
        click.echo("No recurring transactions found.")
        return

    currency = get_settings(ctx).currency
    for item in items:
        schedule = item.schedule
        if schedule.next_execution_date is None:
            state = "ended"
        elif not schedule.is_active:
            state = "paused"
        else:
            state = f"next {schedule.next_execution_date}"
        click.echo(
            f"ID: {item.id:3d} | {item.description:20s} | {item.transaction_type.value:8s} | "
            f"{format_money(item.amount, currency)} | {schedule.frequency.value} | {state}"
        )
        if upcoming > 0:
            dates = ", ".join(str(d) for d in upcoming_occurrences(schedule, upcoming))
            if dates:
                click.echo(f"      upcoming: {dates}")


@recurring_group.command("pause")
@click.argument("recurring_id", type=int)
@click.pass_context
def pause_recurring(ctx, recurring_id: int):
    """Stop a recurring transaction from running."""
    try:
        _service(ctx).update_recurring(recurring_id, is_active=False)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Paused recurring transaction {recurring_id}")


@recurring_group.command("resume")
@click.argument("recurring_id", type=int)
@click.pass_context
def resume_recurring(ctx, recurring_id: int):
    """Resume a paused recurring transaction."""
    try:
        _service(ctx).update_recurring(recurring_id, is_active=True)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Resumed recurring transaction {recurring_id}")


@recurring_group.command("delete")
@click.argument("recurring_id", type=int)
@click.option("--yes", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def delete_recurring(ctx, recurring_id: int, yes: bool):
    """Delete a recurring transaction. Transactions it already created are kept."""
    service = _service(ctx)
    item = service.get_recurring(recurring_id)
    if item is None:
        click.echo(f"Error: Recurring transaction {recurring_id} not found", err=True)
        ctx.exit(1)

    if not yes:
        click.confirm(f"Delete recurring transaction '{item.description}'?", abort=True)

    try:
        service.delete_recurring(recurring_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted recurring transaction {recurring_id}")


@recurring_group.command("run")
@click.option("--as-of", "as_of", default="today", show_default=True, help="Run everything due on or before this date")
@click.option("--all-users", is_flag=True, help="Run schedules of every user, not just the current one")
@click.pass_context
def run_recurring(ctx, as_of: str, all_users: bool):
    """Create the transactions of every occurrence that is due.

    Missed occurrences are caught up, each dated on its own run date.
    """
    cutoff = date_or_exit(ctx, as_of, "date")
    scope = None if all_users else get_scope(ctx)
    try:
        created = _service(ctx).run_due(as_of=cutoff, scope=scope)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created {len(created)} transaction(s) up to {cutoff}")


def register_commands(cli):
    """Register recurring commands with main CLI."""
    cli.add_command(recurring_group, name="recurring")

"""Bill reminder commands."""

import click

from famledger.cli.context import get_db, get_events, get_scope, get_settings, get_user
from famledger.cli.error_handling import handle_domain_error
from famledger.cli.resolution import amount_or_exit, category_or_exit, date_or_exit
from famledger.domain.bill import DEFAULT_REMINDER_DAYS, BillReminderService
from famledger.domain.entities import BILL_FREQUENCIES, BillReminder
from famledger.utils.currency import format_money


def _service(ctx) -> BillReminderService:
    return BillReminderService(
        get_db(ctx),
        events=get_events(ctx),
        max_attempts=get_settings(ctx).max_conflict_retries,
    )


def _format_bill(ctx, bill: BillReminder) -> str:
    amount = format_money(bill.amount, get_settings(ctx).currency) if bill.amount is not None else "-"
    repeat = bill.recurring_frequency.value if bill.recurring_frequency else "once"
    state = "done" if bill.is_completed else f"due {bill.due_date}"
    return f"ID: {bill.id:3d} | {bill.title:20s} | {amount:>16s} | {repeat:9s} | {state}"


@click.group()
def bill_group():
    """Manage bill reminders."""
    pass


@bill_group.command("create")
@click.argument("title")
@click.option("--due", "due_date", required=True, help="Due date")
@click.option("--amount", help="Expected amount")
@click.option("--remind-days", type=int, default=DEFAULT_REMINDER_DAYS, show_default=True,
              help="Days before the due date to start reminding")
@click.option("--repeat", type=click.Choice([f.value for f in BILL_FREQUENCIES]),
              help="Roll the due date forward after each payment")
@click.option("--category", help="Category name")
@click.option("--description", help="Description")
@click.option("--household", "household_id", type=int, help="Share with a household")
@click.pass_context
def create_bill(
    ctx,
    title: str,
    due_date: str,
    amount: str | None,
    remind_days: int,
    repeat: str | None,
    category: str | None,
    description: str | None,
    household_id: int | None,
):
    """Create a bill reminder.

    Examples:
        famledger bill create Electricity --due 2024-03-10 --amount 1800 --repeat monthly
    """
    category_id = category_or_exit(ctx, category).id if category else None
    try:
        bill_id = _service(ctx).create_bill(
            user_id=get_user(ctx),
            title=title,
            due_date=date_or_exit(ctx, due_date, "due date"),
            amount=amount_or_exit(ctx, amount),
            reminder_days_before=remind_days,
            recurring_frequency=repeat,
            description=description,
            category_id=category_id,
            household_id=household_id,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created bill reminder '{title}' (ID: {bill_id})")


@bill_group.command("list")
@click.option("--open", "open_only", is_flag=True, help="Hide completed bills")
@click.pass_context
def list_bills(ctx, open_only: bool):
    """List bill reminders, soonest due first."""
    bills = _service(ctx).list_bills(get_scope(ctx), include_completed=not open_only)
    if not bills:
        click.echo("No bill reminders found.")
        return
    for bill in bills:
        click.echo(_format_bill(ctx, bill))


@bill_group.command("due")
@click.option("--as-of", "as_of", default="today", show_default=True)
@click.pass_context
def due_bills(ctx, as_of: str):
    """Show bills whose reminder window has started."""
    cutoff = date_or_exit(ctx, as_of)
    bills = _service(ctx).due_reminders(get_scope(ctx), as_of=cutoff)
    if not bills:
        click.echo("No bills due.")
        return
    for bill in bills:
        overdue = " (overdue)" if bill.due_date < cutoff else ""
        click.echo(_format_bill(ctx, bill) + overdue)


@bill_group.command("paid")
@click.argument("bill_id", type=int)
@click.pass_context
def pay_bill(ctx, bill_id: int):
    """Mark a bill paid; recurring bills move to their next due date."""
    try:
        bill = _service(ctx).mark_paid(bill_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    if bill.is_completed:
        click.echo(f"Marked '{bill.title}' paid")
    else:
        click.echo(f"Marked '{bill.title}' paid; next due {bill.due_date}")


@bill_group.command("update")
@click.argument("bill_id", type=int)
@click.option("--title", help="New title")
@click.option("--due", "due_date", help="New due date")
@click.option("--amount", help="New amount")
@click.option("--remind-days", type=int, help="New reminder lead time in days")
@click.option("--description", help="New description")
@click.pass_context
def update_bill(
    ctx,
    bill_id: int,
    title: str | None,
    due_date: str | None,
    amount: str | None,
    remind_days: int | None,
    description: str | None,
):
    """Update a bill reminder."""
    try:
        bill = _service(ctx).update_bill(
            bill_id,
            title=title,
            due_date=date_or_exit(ctx, due_date, "due date"),
            amount=amount_or_exit(ctx, amount),
            reminder_days_before=remind_days,
            description=description,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated bill reminder {bill.id}")


@bill_group.command("delete")
@click.argument("bill_id", type=int)
@click.pass_context
def delete_bill(ctx, bill_id: int):
    """Delete a bill reminder."""
    try:
        _service(ctx).delete_bill(bill_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted bill reminder {bill_id}")


def register_commands(cli):
    """Register bill commands with main CLI."""
    cli.add_command(bill_group, name="bill")

"""Transaction commands: ``add`` and the ``transaction`` group."""

import click

from famledger.cli.context import get_db, get_events, get_scope, get_settings, get_user
from famledger.cli.date_filters import PERIOD_NAMES, resolve_cli_date_range
from famledger.cli.error_handling import handle_domain_error
from famledger.cli.resolution import account_or_exit, amount_or_exit, category_or_exit, date_or_exit
from famledger.domain.entities import TransactionType
from famledger.domain.transaction import TransactionService
from famledger.utils.currency import format_money

TRANSACTION_TYPES = [t.value for t in TransactionType]


def _service(ctx) -> TransactionService:
    return TransactionService(get_db(ctx), events=get_events(ctx))


@click.command("add")
@click.option("--account", required=True, help="Account name or ID")
@click.option("--amount", required=True, help="Positive amount, e.g. 1250.50")
@click.option("--type", "txn_type", type=click.Choice(TRANSACTION_TYPES), default="expense", show_default=True)
@click.option("--date", "txn_date", default="today", show_default=True, help="YYYY-MM-DD or 'today', 'yesterday', ...")
@click.option("--category", help="Category name")
@click.option("--description", help="Transaction description")
@click.option("--notes", help="Notes")
@click.option("--household", "household_id", type=int, help="Share with a household")
@click.pass_context
def add_transaction(
    ctx,
    account: str,
    amount: str,
    txn_type: str,
    txn_date: str,
    category: str | None,
    description: str | None,
    notes: str | None,
    household_id: int | None,
):
    """Add a transaction.

    Examples:
        famledger add --account "HDFC Savings" --amount 450 --category Groceries
        famledger add --account 1 --amount 85000 --type income --category Salary --date 2024-03-01
    """
    account_obj = account_or_exit(ctx, account)
    parsed_amount = amount_or_exit(ctx, amount)
    parsed_date = date_or_exit(ctx, txn_date)
    category_id = category_or_exit(ctx, category).id if category else None

    try:
        transaction_id = _service(ctx).create_transaction(
            user_id=get_user(ctx),
            account_id=account_obj.id,
            transaction_type=txn_type,
            amount=parsed_amount,
            date=parsed_date,
            category_id=category_id,
            description=description,
            notes=notes,
            household_id=household_id,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created transaction {transaction_id}")
    click.echo(f"  Account: {account_obj.name}")
    click.echo(f"  Date: {parsed_date}")
    click.echo(f"  Amount: {format_money(parsed_amount, account_obj.currency)} ({txn_type})")
    if description:
        click.echo(f"  Description: {description}")
    if category:
        click.echo(f"  Category: {category}")


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("list")
@click.option("--account", help="Only this account (name or ID)")
@click.option("--category", help="Only this category")
@click.option("--type", "txn_type", type=click.Choice(TRANSACTION_TYPES), help="Only this type")
@click.option("--from", "start_date", help="Start date (inclusive)")
@click.option("--to", "end_date", help="End date (inclusive)")
@click.option("--period", type=click.Choice(PERIOD_NAMES), help="Named period instead of --from/--to")
@click.pass_context
def list_transactions(
    ctx,
    account: str | None,
    category: str | None,
    txn_type: str | None,
    start_date: str | None,
    end_date: str | None,
    period: str | None,
):
    """List transactions, newest first."""
    start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date, period=period)
    account_id = account_or_exit(ctx, account).id if account else None
    category_id = category_or_exit(ctx, category).id if category else None

    transactions = _service(ctx).list_transactions(
        get_scope(ctx),
        start_date=start,
        end_date=end,
        account_id=account_id,
        category_id=category_id,
        transaction_type=txn_type,
    )
    if not transactions:
        click.echo("No transactions found.")
        return

    currency = get_settings(ctx).currency
    for txn in transactions:
        click.echo(
            f"{txn.id:5d} | {txn.date} | {txn.transaction_type.value:8s} | "
            f"{format_money(txn.amount, currency):>16s} | {txn.description or ''}"
        )


@transaction_group.command("show")
@click.argument("transaction_id", type=int)
@click.pass_context
def show_transaction(ctx, transaction_id: int):
    """Show one transaction."""
    db = get_db(ctx)
    txn = _service(ctx).get_transaction(transaction_id)
    if txn is None:
        handle_domain_error(ctx, ValueError(f"Transaction {transaction_id} not found"))
    account = db.get_account(txn.account_id)
    category = db.get_category(txn.category_id) if txn.category_id else None

    click.echo(f"Transaction {txn.id}")
    click.echo(f"  Date: {txn.date}")
    click.echo(f"  Type: {txn.transaction_type.value}")
    currency = account.currency if account else get_settings(ctx).currency
    click.echo(f"  Amount: {format_money(txn.amount, currency)}")
    click.echo(f"  Account: {account.name if account else txn.account_id}")
    click.echo(f"  Category: {category.name if category else '-'}")
    if txn.description:
        click.echo(f"  Description: {txn.description}")
    if txn.notes:
        click.echo(f"  Notes: {txn.notes}")
    if txn.recurring_transaction_id:
        click.echo(f"  From recurring: {txn.recurring_transaction_id}")


@transaction_group.command("update")
@click.argument("transaction_id", type=int)
@click.option("--account", help="Account name or ID")
@click.option("--amount", help="New amount")
@click.option("--type", "txn_type", type=click.Choice(TRANSACTION_TYPES), help="New type")
@click.option("--date", "txn_date", help="New date")
@click.option("--category", help="Category name, or empty string to clear")
@click.option("--description", help="New description")
@click.option("--notes", help="New notes")
@click.pass_context
def update_transaction(
    ctx,
    transaction_id: int,
    account: str | None,
    amount: str | None,
    txn_type: str | None,
    txn_date: str | None,
    category: str | None,
    description: str | None,
    notes: str | None,
) -> None:
    """Update a transaction.

    Updates only the fields that are provided. Use --category "" to clear the category.

    Examples:
        famledger transaction update 12 --amount 480
        famledger transaction update 12 --category ""
    """
    account_id = account_or_exit(ctx, account).id if account is not None else None
    category_id = category_or_exit(ctx, category).id if category else None

    try:
        _service(ctx).update_transaction(
            transaction_id,
            account_id=account_id,
            transaction_type=txn_type,
            amount=amount_or_exit(ctx, amount),
            date=date_or_exit(ctx, txn_date),
            description=description,
            notes=notes,
            category_id=category_id,
            clear_category=category == "",
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated transaction {transaction_id}")


@transaction_group.command("delete")
@click.argument("transaction_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: int, yes: bool) -> None:
    """Delete a transaction."""
    if not yes and not click.confirm(f"Delete transaction {transaction_id}?"):
        click.echo("Deletion cancelled.")
        return
    try:
        _service(ctx).delete_transaction(transaction_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted transaction {transaction_id}")


def register_commands(cli):
    """Register add and transaction commands with main CLI."""
    cli.add_command(add_transaction)
    cli.add_command(transaction_group, name="transaction")

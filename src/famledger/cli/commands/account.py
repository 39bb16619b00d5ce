"""Account management commands."""

import click

from famledger.cli.context import get_db, get_scope, get_settings, get_user
from famledger.cli.error_handling import handle_domain_error
from famledger.cli.resolution import account_or_exit, amount_or_exit
from famledger.domain.account import AccountService
from famledger.domain.reports import account_balances
from famledger.utils.currency import format_money


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--type", "account_type", default="bank", show_default=True, help="bank, cash, card, ...")
@click.option("--currency", help="ISO currency code (default: FAMLEDGER_CURRENCY)")
@click.option("--opening-balance", default="0", help="Balance before any recorded transaction")
@click.option("--household", "household_id", type=int, help="Share with a household")
@click.pass_context
def create_account(
    ctx, name: str, account_type: str, currency: str | None, opening_balance: str, household_id: int | None
):
    """Create a new account.

    Examples:
        famledger account create "HDFC Savings" --opening-balance 25000
        famledger account create "Wallet" --type cash
    """
    service = AccountService(get_db(ctx))
    balance = amount_or_exit(ctx, opening_balance, "opening balance")
    try:
        account_id = service.create_account(
            user_id=get_user(ctx),
            name=name,
            account_type=account_type,
            currency=currency or get_settings(ctx).currency,
            opening_balance=balance,
            household_id=household_id,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created account '{name}' (ID: {account_id})")


@account_group.command("list")
@click.option("--all", "include_inactive", is_flag=True, help="Include deactivated accounts")
@click.pass_context
def list_accounts(ctx, include_inactive: bool):
    """List accounts with their current balances."""
    db = get_db(ctx)
    scope = get_scope(ctx)
    accounts = AccountService(db).list_accounts(scope, include_inactive=include_inactive)
    if not accounts:
        click.echo("No accounts found.")
        return

    balances = account_balances(accounts, db.list_transactions(scope))
    click.echo("\nAccounts:")
    click.echo("-" * 70)
    for acc in accounts:
        status = "" if acc.is_active else " (inactive)"
        click.echo(
            f"ID: {acc.id:3d} | {acc.name:20s} | {acc.account_type:6s} | "
            f"{format_money(balances[acc.id], acc.currency)}{status}"
        )


@account_group.command("rename")
@click.argument("account", metavar="ACCOUNT")
@click.argument("new_name", metavar="NEW_NAME")
@click.option("--type", "account_type", help="New account type")
@click.pass_context
def rename_account(ctx, account: str, new_name: str, account_type: str | None) -> None:
    """Rename an account. ACCOUNT can be an account name or ID."""
    account_obj = account_or_exit(ctx, account)
    try:
        AccountService(get_db(ctx)).rename_account(account_obj.id, new_name, account_type=account_type)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Renamed account to '{new_name}'")


@account_group.command("deactivate")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def deactivate_account(ctx, account: str) -> None:
    """Hide an account; its transactions are kept. ACCOUNT can be a name or ID."""
    account_obj = account_or_exit(ctx, account)
    AccountService(get_db(ctx)).deactivate_account(account_obj.id)
    click.echo(f"Deactivated account '{account_obj.name}'")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")

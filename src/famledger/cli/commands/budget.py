"""Budget commands."""

import click

from famledger.cli.context import get_db, get_scope, get_settings, get_user
from famledger.cli.error_handling import handle_domain_error
from famledger.cli.resolution import amount_or_exit, category_or_exit, date_or_exit
from famledger.domain.budget import BudgetService
from famledger.domain.entities import BudgetPeriod
from famledger.domain.reports import ReportService
from famledger.utils.currency import format_money, format_percent


@click.group()
def budget_group():
    """Manage category budgets."""
    pass


@budget_group.command("create")
@click.argument("name")
@click.option("--category", required=True, help="Expense category name")
@click.option("--amount", required=True, help="Limit per period")
@click.option("--period", type=click.Choice([p.value for p in BudgetPeriod]), default="monthly", show_default=True)
@click.option("--start", "start_date", default="today", show_default=True)
@click.option("--end", "end_date", help="Optional end date")
@click.option("--household", "household_id", type=int, help="Share with a household")
@click.pass_context
def create_budget(
    ctx,
    name: str,
    category: str,
    amount: str,
    period: str,
    start_date: str,
    end_date: str | None,
    household_id: int | None,
):
    """Create a budget for a category.

    Examples:
        famledger budget create "Food" --category Groceries --amount 12000
    """
    category_obj = category_or_exit(ctx, category)
    try:
        budget_id = BudgetService(get_db(ctx)).create_budget(
            user_id=get_user(ctx),
            name=name,
            category_id=category_obj.id,
            amount=amount_or_exit(ctx, amount),
            period=period,
            start_date=date_or_exit(ctx, start_date, "start date"),
            end_date=date_or_exit(ctx, end_date, "end date"),
            household_id=household_id,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created {period} budget '{name}' (ID: {budget_id})")


@budget_group.command("list")
@click.option("--all", "include_inactive", is_flag=True, help="Include inactive budgets")
@click.pass_context
def list_budgets(ctx, include_inactive: bool):
    """List budgets."""
    budgets = BudgetService(get_db(ctx)).list_budgets(get_scope(ctx), include_inactive=include_inactive)
    if not budgets:
        click.echo("No budgets found.")
        return
    currency = get_settings(ctx).currency
    for budget in budgets:
        until = f" until {budget.end_date}" if budget.end_date else ""
        click.echo(
            f"ID: {budget.id:3d} | {budget.name:20s} | {format_money(budget.amount, currency)} "
            f"{budget.period.value} | from {budget.start_date}{until}"
        )


@budget_group.command("status")
@click.option("--as-of", "as_of", default="today", show_default=True)
@click.pass_context
def budget_status(ctx, as_of: str):
    """Show spending against each budget for its current period."""
    statuses = ReportService(get_db(ctx)).budget_status(get_scope(ctx), as_of=date_or_exit(ctx, as_of))
    if not statuses:
        click.echo("No active budgets.")
        return

    currency = get_settings(ctx).currency
    for status in statuses:
        marker = " OVER" if status.is_over else ""
        click.echo(
            f"{status.budget.name:20s} | {status.window_start} - {status.window_end} | "
            f"spent {format_money(status.spent, currency)} of "
            f"{format_money(status.budget.amount, currency)} ({format_percent(status.percent_used)}){marker}"
        )


@budget_group.command("update")
@click.argument("budget_id", type=int)
@click.option("--name", help="New name")
@click.option("--amount", help="New limit")
@click.option("--period", type=click.Choice([p.value for p in BudgetPeriod]))
@click.option("--end", "end_date", help="New end date")
@click.pass_context
def update_budget(ctx, budget_id: int, name: str | None, amount: str | None, period: str | None, end_date: str | None):
    """Update a budget."""
    try:
        BudgetService(get_db(ctx)).update_budget(
            budget_id,
            name=name,
            amount=amount_or_exit(ctx, amount),
            period=period,
            end_date=date_or_exit(ctx, end_date, "end date"),
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated budget {budget_id}")


@budget_group.command("delete")
@click.argument("budget_id", type=int)
@click.pass_context
def delete_budget(ctx, budget_id: int):
    """Deactivate a budget."""
    try:
        BudgetService(get_db(ctx)).deactivate_budget(budget_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deactivated budget {budget_id}")


def register_commands(cli):
    """Register budget commands with main CLI."""
    cli.add_command(budget_group, name="budget")

"""Report commands."""

import calendar
from datetime import date

import click

from famledger.cli.context import get_db, get_scope, get_settings
from famledger.cli.resolution import date_or_exit
from famledger.domain.reports import ReportService
from famledger.utils.currency import format_money, format_percent


@click.group()
def report_group():
    """Yearly reports and the dashboard."""
    pass


@report_group.command("year")
@click.argument("year", type=int, required=False)
@click.option("--monthly", is_flag=True, help="Show the month-by-month breakdown")
@click.pass_context
def year_report(ctx, year: int | None, monthly: bool):
    """Income, expenses and savings for YEAR (default: this year) against the year before.

    Examples:
        famledger report year 2024 --monthly
    """
    if year is None:
        year = date.today().year
    report = ReportService(get_db(ctx)).yearly_report(get_scope(ctx), year)
    currency = get_settings(ctx).currency

    def money(value):
        return format_money(value, currency)

    click.echo(f"Report for {report.year}")
    versus = f"vs {year - 1}"
    click.echo(f"  Income:   {money(report.total_income):>18s}  ({format_percent(report.income_growth)} {versus})")
    click.echo(f"  Expenses: {money(report.total_expenses):>18s}  ({format_percent(report.expense_growth)} {versus})")
    click.echo(f"  Savings:  {money(report.net_savings):>18s}  ({format_percent(report.savings_growth)} {versus})")
    click.echo(f"  Savings rate: {format_percent(report.savings_rate)}")
    click.echo(
        f"  Monthly average: income {money(report.average_monthly_income)}, "
        f"expenses {money(report.average_monthly_expenses)}, "
        f"savings {money(report.average_monthly_savings)}"
    )

    if report.top_categories:
        click.echo("\nTop spending categories:")
        for row in report.top_categories:
            click.echo(f"  {row.category:20s} {money(row.total):>18s}")

    if monthly:
        click.echo("\nBy month:")
        for row in report.monthly:
            click.echo(
                f"  {calendar.month_abbr[row.month]} | income {money(row.income):>16s} | "
                f"expenses {money(row.expenses):>16s} | net {money(row.net):>16s}"
            )


@report_group.command("dashboard")
@click.option("--as-of", "as_of", default="today", show_default=True)
@click.pass_context
def dashboard(ctx, as_of: str):
    """This month against last month, net worth and the next loan payments."""
    board = ReportService(get_db(ctx)).dashboard(get_scope(ctx), as_of=date_or_exit(ctx, as_of))
    currency = get_settings(ctx).currency

    def money(value):
        return format_money(value, currency)

    click.echo(f"Dashboard as of {board.as_of}")
    click.echo(
        f"  Income this month:   {money(board.current_month_income):>18s}  "
        f"(last month {money(board.last_month_income)}, {format_percent(board.income_growth)})"
    )
    click.echo(
        f"  Expenses this month: {money(board.current_month_expenses):>18s}  "
        f"(last month {money(board.last_month_expenses)}, {format_percent(board.expense_growth)})"
    )
    click.echo(f"  Account balances:    {money(board.total_balance):>18s}")
    click.echo(f"  Loans outstanding:   {money(board.total_loan_balance):>18s}")
    click.echo(f"  Net worth:           {money(board.net_worth):>18s}")

    if board.upcoming_payments:
        click.echo("\nUpcoming EMIs:")
        for payment in board.upcoming_payments:
            click.echo(f"  {payment.due_date} | {payment.name:20s} | {money(payment.emi_amount)}")


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")

"""Loan commands."""

import click

from famledger.cli.context import get_db, get_events, get_scope, get_settings, get_user
from famledger.cli.error_handling import fail, handle_domain_error
from famledger.cli.resolution import amount_or_exit, date_or_exit, loan_or_exit
from famledger.domain.amortization import total_interest
from famledger.domain.entities import Loan
from famledger.domain.loan import LoanService
from famledger.domain.money import to_rate
from famledger.utils.currency import format_money


def _service(ctx) -> LoanService:
    return LoanService(
        get_db(ctx),
        events=get_events(ctx),
        max_attempts=get_settings(ctx).max_conflict_retries,
    )


def _rate_or_exit(ctx, value: str | None):
    if value is None:
        return None
    try:
        return to_rate(value)
    except ValueError as e:
        fail(ctx, str(e))


def _echo_loan(ctx, loan: Loan) -> None:
    currency = get_settings(ctx).currency
    click.echo(f"Loan {loan.id}: {loan.name} ({loan.loan_type})")
    click.echo(f"  Status: {loan.status.value}")
    click.echo(f"  Principal: {format_money(loan.principal_amount, currency)}")
    click.echo(f"  Rate: {loan.interest_rate}% for {loan.tenure_months} months")
    click.echo(f"  EMI: {format_money(loan.emi_amount, currency)}")
    click.echo(f"  Remaining: {format_money(loan.remaining_balance, currency)}")
    click.echo(f"  Next due: {loan.next_due_date or '-'}")


@click.group()
def loan_group():
    """Track loans and their EMI payments."""
    pass


@loan_group.command("create")
@click.argument("name")
@click.option("--principal", required=True, help="Amount borrowed")
@click.option("--rate", required=True, help="Annual interest rate in percent, e.g. 10.5")
@click.option("--tenure", type=int, required=True, help="Number of monthly installments")
@click.option("--start", "start_date", default="today", show_default=True, help="Disbursement date")
@click.option("--type", "loan_type", default="personal", show_default=True, help="home, car, personal, ...")
@click.option("--household", "household_id", type=int, help="Share with a household")
@click.pass_context
def create_loan(
    ctx,
    name: str,
    principal: str,
    rate: str,
    tenure: int,
    start_date: str,
    loan_type: str,
    household_id: int | None,
):
    """Create a loan; the EMI is computed from principal, rate and tenure.

    Examples:
        famledger loan create "Car loan" --principal 541272 --rate 19 --tenure 48 --start 2024-01-05
    """
    try:
        loan = _service(ctx).create_loan(
            user_id=get_user(ctx),
            name=name,
            principal=amount_or_exit(ctx, principal, "principal"),
            interest_rate=_rate_or_exit(ctx, rate),
            tenure_months=tenure,
            start_date=date_or_exit(ctx, start_date, "start date"),
            loan_type=loan_type,
            household_id=household_id,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created loan '{loan.name}' (ID: {loan.id})")
    click.echo(f"  EMI: {format_money(loan.emi_amount, get_settings(ctx).currency)}")
    click.echo(f"  First due: {loan.next_due_date}")


@loan_group.command("list")
@click.option("--all", "include_inactive", is_flag=True, help="Include paid-off and deactivated loans")
@click.pass_context
def list_loans(ctx, include_inactive: bool):
    """List loans."""
    loans = _service(ctx).list_loans(get_scope(ctx), include_inactive=include_inactive)
    if not loans:
        click.echo("No loans found.")
        return
    currency = get_settings(ctx).currency
    for loan in loans:
        click.echo(
            f"ID: {loan.id:3d} | {loan.name:20s} | {loan.status.value:11s} | "
            f"EMI {format_money(loan.emi_amount, currency)} | "
            f"left {format_money(loan.remaining_balance, currency)} | next {loan.next_due_date or '-'}"
        )


@loan_group.command("show")
@click.argument("loan")
@click.pass_context
def show_loan(ctx, loan: str):
    """Show a loan and its payment history. LOAN is a name or ID."""
    loan_obj = loan_or_exit(ctx, loan)
    _echo_loan(ctx, loan_obj)

    payments = _service(ctx).list_payments(loan_obj.id)
    if payments:
        currency = get_settings(ctx).currency
        click.echo("\nPayments:")
        for payment in payments:
            click.echo(
                f"  {payment.payment_date} | {format_money(payment.amount, currency)} | "
                f"principal {format_money(payment.principal_component, currency)} | "
                f"interest {format_money(payment.interest_component, currency)}"
            )


@loan_group.command("pay")
@click.argument("loan")
@click.option("--amount", help="Amount paid (default: the EMI)")
@click.option("--date", "payment_date", default="today", show_default=True)
@click.pass_context
def pay_loan(ctx, loan: str, amount: str | None, payment_date: str):
    """Record a payment against a loan. LOAN is a name or ID.

    Examples:
        famledger loan pay "Car loan"
        famledger loan pay 3 --amount 20000 --date 2024-02-05
    """
    loan_obj = loan_or_exit(ctx, loan)
    paid = amount_or_exit(ctx, amount) if amount is not None else loan_obj.emi_amount
    try:
        payment = _service(ctx).apply_payment(loan_obj.id, paid, date_or_exit(ctx, payment_date))
    except ValueError as e:
        handle_domain_error(ctx, e)

    currency = get_settings(ctx).currency
    updated = _service(ctx).get_loan(loan_obj.id)
    click.echo(f"Recorded payment of {format_money(payment.amount, currency)} on '{loan_obj.name}'")
    click.echo(f"  Principal: {format_money(payment.principal_component, currency)}")
    click.echo(f"  Interest: {format_money(payment.interest_component, currency)}")
    click.echo(f"  Remaining: {format_money(updated.remaining_balance, currency)}")
    if updated.remaining_balance == 0:
        click.echo("  Loan paid off!")


@loan_group.command("update")
@click.argument("loan")
@click.option("--name", help="New name")
@click.option("--type", "loan_type", help="New loan type")
@click.option("--principal", help="New principal (only before the first payment)")
@click.option("--rate", help="New annual interest rate in percent")
@click.option("--tenure", type=int, help="New tenure in months")
@click.option("--start", "start_date", help="New start date")
@click.pass_context
def update_loan(
    ctx,
    loan: str,
    name: str | None,
    loan_type: str | None,
    principal: str | None,
    rate: str | None,
    tenure: int | None,
    start_date: str | None,
):
    """Edit a loan; the EMI is recomputed when principal, rate or tenure change."""
    loan_obj = loan_or_exit(ctx, loan)
    try:
        updated = _service(ctx).update_loan(
            loan_obj.id,
            name=name,
            loan_type=loan_type,
            principal_amount=amount_or_exit(ctx, principal, "principal"),
            interest_rate=_rate_or_exit(ctx, rate),
            tenure_months=tenure,
            start_date=date_or_exit(ctx, start_date, "start date"),
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated loan {updated.id}")
    _echo_loan(ctx, updated)


@loan_group.command("delete")
@click.argument("loan")
@click.pass_context
def delete_loan(ctx, loan: str):
    """Deactivate a loan; its payment history is kept. LOAN is a name or ID."""
    loan_obj = loan_or_exit(ctx, loan)
    try:
        _service(ctx).deactivate_loan(loan_obj.id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deactivated loan '{loan_obj.name}'")


@loan_group.command("schedule")
@click.argument("loan")
@click.option("--limit", type=int, help="Show only the first N months")
@click.pass_context
def loan_schedule(ctx, loan: str, limit: int | None):
    """Show the projected repayment schedule from the current balance."""
    loan_obj = loan_or_exit(ctx, loan)
    rows = _service(ctx).projected_schedule(loan_obj.id)
    if not rows:
        click.echo("Loan is paid off.")
        return

    currency = get_settings(ctx).currency
    click.echo(f"{'#':>4s} | {'Payment':>16s} | {'Principal':>16s} | {'Interest':>16s} | {'Balance':>16s}")
    for row in rows[:limit] if limit else rows:
        click.echo(
            f"{row.period:4d} | {format_money(row.payment, currency):>16s} | "
            f"{format_money(row.principal, currency):>16s} | "
            f"{format_money(row.interest, currency):>16s} | "
            f"{format_money(row.closing_balance, currency):>16s}"
        )
    click.echo(f"Total interest: {format_money(total_interest(rows), currency)}")


def register_commands(cli):
    """Register loan commands with main CLI."""
    cli.add_command(loan_group, name="loan")

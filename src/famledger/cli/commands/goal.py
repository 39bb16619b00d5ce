"""Savings goal commands."""

import click

from famledger.cli.context import get_db, get_events, get_scope, get_settings, get_user
from famledger.cli.error_handling import handle_domain_error
from famledger.cli.resolution import amount_or_exit, date_or_exit
from famledger.domain.goal import GoalService
from famledger.domain.reports import goal_progress
from famledger.utils.currency import format_money, format_percent


def _service(ctx) -> GoalService:
    return GoalService(
        get_db(ctx),
        events=get_events(ctx),
        max_attempts=get_settings(ctx).max_conflict_retries,
    )


@click.group()
def goal_group():
    """Manage savings goals."""
    pass


@goal_group.command("create")
@click.argument("name")
@click.option("--target", required=True, help="Target amount")
@click.option("--saved", default="0", show_default=True, help="Amount already saved")
@click.option("--by", "target_date", help="Target date")
@click.option("--description", help="Description")
@click.option("--household", "household_id", type=int, help="Share with a household")
@click.pass_context
def create_goal(
    ctx,
    name: str,
    target: str,
    saved: str,
    target_date: str | None,
    description: str | None,
    household_id: int | None,
):
    """Create a savings goal.

    Examples:
        famledger goal create "Emergency fund" --target 300000 --by 2025-12-31
    """
    try:
        goal_id = _service(ctx).create_goal(
            user_id=get_user(ctx),
            name=name,
            target_amount=amount_or_exit(ctx, target, "target"),
            current_amount=amount_or_exit(ctx, saved, "saved amount"),
            target_date=date_or_exit(ctx, target_date, "target date"),
            description=description,
            household_id=household_id,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created goal '{name}' (ID: {goal_id})")


@goal_group.command("list")
@click.option("--all", "include_inactive", is_flag=True, help="Include inactive goals")
@click.pass_context
def list_goals(ctx, include_inactive: bool):
    """List goals with their progress."""
    goals = _service(ctx).list_goals(get_scope(ctx), include_inactive=include_inactive)
    if not goals:
        click.echo("No goals found.")
        return
    currency = get_settings(ctx).currency
    for goal in goals:
        by = f" by {goal.target_date}" if goal.target_date else ""
        click.echo(
            f"ID: {goal.id:3d} | {goal.name:20s} | {format_money(goal.current_amount, currency)} of "
            f"{format_money(goal.target_amount, currency)} ({format_percent(goal_progress(goal))}){by}"
        )


@goal_group.command("contribute")
@click.argument("goal_id", type=int)
@click.argument("amount")
@click.pass_context
def contribute(ctx, goal_id: int, amount: str):
    """Add AMOUNT to a goal's savings."""
    try:
        goal = _service(ctx).contribute(goal_id, amount_or_exit(ctx, amount))
    except ValueError as e:
        handle_domain_error(ctx, e)
    currency = get_settings(ctx).currency
    click.echo(
        f"'{goal.name}': {format_money(goal.current_amount, currency)} of "
        f"{format_money(goal.target_amount, currency)} ({format_percent(goal_progress(goal))})"
    )
    if goal.current_amount >= goal.target_amount:
        click.echo("Goal reached!")


@goal_group.command("delete")
@click.argument("goal_id", type=int)
@click.pass_context
def delete_goal(ctx, goal_id: int):
    """Deactivate a goal."""
    try:
        _service(ctx).deactivate_goal(goal_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deactivated goal {goal_id}")


def register_commands(cli):
    """Register goal commands with main CLI."""
    cli.add_command(goal_group, name="goal")

"""Household management commands."""

import click

from famledger.cli.context import get_db, get_user
from famledger.cli.error_handling import handle_domain_error
from famledger.domain.entities import HouseholdRole
from famledger.domain.household import HouseholdService


@click.group()
def household_group():
    """Manage households shared between users."""
    pass


@household_group.command("create")
@click.argument("name")
@click.pass_context
def create_household(ctx, name: str):
    """Create a household owned by the current user.

    Examples:
        famledger household create "Sharma family"
    """
    service = HouseholdService(get_db(ctx))
    try:
        household_id = service.create_household(name=name, created_by=get_user(ctx))
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created household '{name}' (ID: {household_id})")


@household_group.command("list")
@click.pass_context
def list_households(ctx):
    """List households the current user belongs to."""
    households = HouseholdService(get_db(ctx)).list_households(get_user(ctx))
    if not households:
        click.echo("No households found.")
        return
    for household in households:
        click.echo(f"ID: {household.id:3d} | {household.name} (created by {household.created_by})")


@household_group.command("add-member")
@click.argument("household_id", type=int)
@click.argument("user_id")
@click.option(
    "--role",
    type=click.Choice([r.value for r in HouseholdRole]),
    default=HouseholdRole.MEMBER.value,
    show_default=True,
)
@click.pass_context
def add_member(ctx, household_id: int, user_id: str, role: str):
    """Add USER_ID to a household."""
    try:
        HouseholdService(get_db(ctx)).add_member(household_id, user_id, HouseholdRole(role))
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Added '{user_id}' to household {household_id} as {role}")


@household_group.command("remove-member")
@click.argument("household_id", type=int)
@click.argument("user_id")
@click.pass_context
def remove_member(ctx, household_id: int, user_id: str):
    """Remove USER_ID from a household."""
    try:
        HouseholdService(get_db(ctx)).remove_member(household_id, user_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Removed '{user_id}' from household {household_id}")


@household_group.command("members")
@click.argument("household_id", type=int)
@click.pass_context
def list_members(ctx, household_id: int):
    """List members of a household."""
    try:
        members = HouseholdService(get_db(ctx)).list_members(household_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    for member in members:
        click.echo(f"{member.user_id:20s} | {member.role.value}")


def register_commands(cli):
    """Register household commands with main CLI."""
    cli.add_command(household_group, name="household")

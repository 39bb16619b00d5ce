"""Category management commands."""

import click

from famledger.cli.context import get_db
from famledger.cli.error_handling import handle_domain_error
from famledger.domain.category import CategoryService
from famledger.domain.entities import CategoryType

CATEGORY_TYPES = [t.value for t in CategoryType]


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("create")
@click.argument("name")
@click.option("--type", "category_type", type=click.Choice(CATEGORY_TYPES), default="expense", show_default=True)
@click.pass_context
def create_category(ctx, name: str, category_type: str):
    """Create a category.

    Examples:
        famledger category create "Pets"
        famledger category create "Freelance" --type income
    """
    try:
        category_id = CategoryService(get_db(ctx)).create_category(name, category_type)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created {category_type} category '{name}' (ID: {category_id})")


@category_group.command("list")
@click.option("--type", "category_type", type=click.Choice(CATEGORY_TYPES), help="Only one type")
@click.pass_context
def list_categories(ctx, category_type: str | None):
    """List categories."""
    categories = CategoryService(get_db(ctx)).list_categories(category_type)
    if not categories:
        click.echo("No categories found. Run 'famledger category init' to create the defaults.")
        return
    for cat in categories:
        click.echo(f"ID: {cat.id:3d} | {cat.name:20s} | {cat.category_type.value}")


@category_group.command("init")
@click.pass_context
def init_categories(ctx):
    """Create the default income and expense categories."""
    created = CategoryService(get_db(ctx)).init_defaults()
    if created == 0:
        click.echo("Default categories already exist.")
    else:
        click.echo(f"Created {created} categories.")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")

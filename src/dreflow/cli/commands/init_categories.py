"""Initialize default categories."""

import click
from dreflow.domain.category import CategoryService


@click.command("init-categories")
@click.option("--force", is_flag=True, help="Add missing default categories even if some exist")
@click.pass_context
def init_categories(ctx, force: bool):
    """Initialize database with one default category per statement line."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    # Check if categories already exist
    existing = service.list_categories()
    if existing and not force:
        click.echo("Categories already exist. Use --force to add missing defaults.")
        return

    click.echo("Creating default categories...")
    created = service.seed_defaults()
    click.echo(f"Successfully created {created} categories.")


def register_commands(cli):
    """Register init-categories command with main CLI."""
    cli.add_command(init_categories)

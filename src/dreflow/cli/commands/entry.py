"""Manual entry commands."""

import click
from dreflow.cli.error_handling import handle_domain_error
from dreflow.cli.formatting import format_money
from dreflow.domain.category import CategoryService
from dreflow.domain.period import PeriodService
from dreflow.utils.amount_parser import parse_amount


@click.group()
def entry_group():
    """Manage manual statement entries."""
    pass


@entry_group.command("add")
@click.argument("period_id", type=int)
@click.option("--category", required=True, help="Category name or ID")
@click.option("--description", required=True, help="Entry description")
@click.option("--value", required=True, help="Amount, e.g. 1.234,56 or 1234.56")
@click.option("--notes", help="Notes")
@click.option("--replace", is_flag=True, help="Overwrite the entry with the same category and description")
@click.pass_context
def add_entry(ctx, period_id: int, category: str, description: str, value: str, notes: str | None, replace: bool):
    """Add a manual entry to an open period."""
    db = ctx.obj["db"]
    service = PeriodService(db)
    category_service = CategoryService(db)

    try:
        cat = category_service.resolve_category(category)
        amount = parse_amount(value)
        if replace:
            entry_id = service.upsert_entry(period_id, cat.id, description, amount, notes=notes)
        else:
            entry_id = service.add_entry(period_id, cat.id, description, amount, notes=notes)
        click.echo(f"Saved entry '{description}' under '{cat.name}' (ID: {entry_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@entry_group.command("list")
@click.argument("period_id", type=int)
@click.pass_context
def list_entries(ctx, period_id: int):
    """List the manual entries of a period."""
    db = ctx.obj["db"]
    service = PeriodService(db)
    category_service = CategoryService(db)

    try:
        entries = service.list_entries(period_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not entries:
        click.echo("No entries found.")
        return

    names = {c.id: c.name for c in category_service.list_categories()}
    click.echo(f"\n{'ID':<6} {'Category':<28} {'Value':>16}  Description")
    click.echo("-" * 80)
    for e in entries:
        click.echo(
            f"{e.id:<6} {names.get(e.category_id, '?'):<28} {format_money(e.value):>16}  {e.description}"
        )


@entry_group.command("edit")
@click.argument("entry_id", type=int)
@click.option("--category", help="Category name or ID")
@click.option("--description", help="Entry description")
@click.option("--value", help="Amount")
@click.option("--notes", help="Notes")
@click.pass_context
def edit_entry(
    ctx, entry_id: int, category: str | None, description: str | None, value: str | None, notes: str | None
):
    """Update fields of a manual entry. Only the given fields change."""
    db = ctx.obj["db"]
    service = PeriodService(db)
    category_service = CategoryService(db)

    try:
        category_id = category_service.resolve_category(category).id if category is not None else None
        amount = parse_amount(value) if value is not None else None
        service.update_entry(
            entry_id, category_id=category_id, description=description, value=amount, notes=notes
        )
        click.echo(f"Updated entry {entry_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@entry_group.command("delete")
@click.argument("entry_id", type=int)
@click.pass_context
def delete_entry(ctx, entry_id: int):
    """Delete a manual entry."""
    db = ctx.obj["db"]
    service = PeriodService(db)

    try:
        service.delete_entry(entry_id)
        click.echo(f"Deleted entry {entry_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register entry commands with main CLI."""
    cli.add_command(entry_group, name="entry")

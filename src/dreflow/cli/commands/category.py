"""Category management commands."""

import click
from dreflow.cli.error_handling import handle_domain_error
from dreflow.domain.category import CategoryService
from dreflow.domain.entities import DreBucket


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("list")
@click.option("--keywords", "-k", is_flag=True, help="Show classifier keywords")
@click.pass_context
def list_categories(ctx, keywords: bool):
    """List all categories in statement order."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    categories = service.list_categories()
    if not categories:
        click.echo("No categories found. Run 'init-categories' to create default categories.")
        return

    click.echo("\nCategories:")
    for cat in categories:
        click.echo(f"  {cat.name} (ID: {cat.id}) [{cat.bucket.value}]")
        if keywords and cat.keywords:
            click.echo(f"      keywords: {', '.join(cat.keywords)}")


@category_group.command("add")
@click.argument("name")
@click.option(
    "--bucket",
    required=True,
    type=click.Choice([b.value for b in DreBucket], case_sensitive=False),
    help="Statement line the category rolls up into",
)
@click.option("--keyword", "keywords", multiple=True, help="Classifier keyword (repeatable)")
@click.option("--position", type=int, help="Display and tie-break position (default: last)")
@click.pass_context
def add_category(ctx, name: str, bucket: str, keywords: tuple[str, ...], position: int | None):
    """Create a new category."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    try:
        category_id = service.create_category(name=name, bucket=bucket, keywords=keywords, position=position)
        click.echo(f"Created category '{name}' in {bucket.lower()} (ID: {category_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@category_group.command("keywords")
@click.argument("category")
@click.argument("keywords", nargs=-1)
@click.pass_context
def set_keywords(ctx, category: str, keywords: tuple[str, ...]):
    """Replace the classifier keywords of CATEGORY (name or ID)."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    try:
        cat = service.resolve_category(category)
        service.set_keywords(cat.id, keywords)
        click.echo(f"Updated keywords of '{cat.name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


@category_group.command("delete")
@click.argument("category")
@click.pass_context
def delete_category(ctx, category: str):
    """Delete CATEGORY (name or ID) if nothing uses it."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    try:
        cat = service.resolve_category(category)
        service.delete_category(cat.id)
        click.echo(f"Deleted category '{cat.name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")

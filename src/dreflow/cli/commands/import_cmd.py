"""Statement import command."""

import click
from dreflow.cli.error_handling import handle_domain_error
from dreflow.cli.formatting import format_money, format_signed
from dreflow.domain.category import CategoryService
from dreflow.domain.errors import ValidationError
from dreflow.domain.statement_import import ImportService, kind_mismatches


def parse_assignments(assignments: tuple[str, ...], category_service: CategoryService) -> dict[int, int | None]:
    """Parse --assign values of the form ROW=CATEGORY (empty CATEGORY clears)."""
    parsed: dict[int, int | None] = {}
    for assignment in assignments:
        row, sep, identifier = assignment.partition("=")
        if not sep or not row.strip().isdigit():
            raise ValidationError(f"Invalid assignment '{assignment}'. Use ROW=CATEGORY, e.g. 3=Despesas Gerais")
        identifier = identifier.strip()
        parsed[int(row)] = category_service.resolve_category(identifier).id if identifier else None
    return parsed


@click.command("import")
@click.argument("statement_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--yes", "-y", is_flag=True, help="Import without asking for confirmation")
@click.option("--settle", is_flag=True, help="Store transactions as received/paid instead of pending")
@click.option(
    "--min-confidence",
    type=click.FloatRange(0.0, 1.0),
    help="Minimum classifier confidence for a suggestion (overrides DREFLOW_MIN_CONFIDENCE)",
)
@click.option(
    "--assign",
    multiple=True,
    help="Override the category of a row: ROW=CATEGORY (name or ID, empty to clear). Repeatable.",
)
@click.pass_context
def import_statement(
    ctx,
    statement_file: str,
    yes: bool,
    settle: bool,
    min_confidence: float | None,
    assign: tuple[str, ...],
):
    """Import transactions from a bank statement file.

    The file is parsed and classified first, and the suggestions are shown for
    review. Nothing is stored until the import is confirmed.

    Examples:
        dreflow import extrato.ofx
        dreflow import extrato.csv --assign "2=Despesas Gerais" --yes
    """
    db = ctx.obj["db"]
    settings = ctx.obj["settings"]
    service = ImportService(db)
    category_service = CategoryService(db)
    threshold = min_confidence if min_confidence is not None else settings.min_confidence

    try:
        preview = service.preview_file(statement_file, min_score=threshold)
        overrides = parse_assignments(assign, category_service)
    except (ValueError, FileNotFoundError) as e:
        handle_domain_error(ctx, e)

    results = list(preview.results)
    for row, category_id in overrides.items():
        if not 1 <= row <= len(results):
            handle_domain_error(ctx, ValidationError(f"Row {row} is out of range (1-{len(results)})"))
        results[row - 1] = results[row - 1].override(category_id)

    categories = category_service.list_categories()
    names = {c.id: c.name for c in categories}

    click.echo(f"\n{preview.file_name} ({preview.format.value}): {len(results)} transaction(s)")
    click.echo("-" * 100)
    click.echo(f"{'#':>4}  {'Date':<10}  {'Amount':>16}  {'Description':<38}  Category")
    click.echo("-" * 100)
    for row, result in enumerate(results, start=1):
        txn = result.transaction
        if result.is_classified:
            suggestion = f"{names.get(result.suggested_category_id, '?')} ({result.confidence:.0%})"
            if result.matched_rule_id is not None:
                suggestion += f" [rule {result.matched_rule_id}]"
        else:
            suggestion = "-"
        description = txn.description if len(txn.description) <= 38 else txn.description[:35] + "..."
        click.echo(
            f"{row:>4}  {txn.date.isoformat():<10}  {format_signed(txn.value, txn.kind):>16}  "
            f"{description:<38}  {suggestion}"
        )

    mismatched = kind_mismatches(results, categories)
    if mismatched:
        click.echo(
            f"\nWarning: row(s) {', '.join(map(str, mismatched))} are filed under a line "
            "that usually holds the opposite kind (income vs expense)",
            err=True,
        )

    if preview.errors:
        click.echo(f"\nSkipped {preview.skipped} row(s):", err=True)
        for error in preview.errors:
            click.echo(f"  {error}", err=True)

    if not yes and not click.confirm("\nImport these transactions?", default=True):
        click.echo("Import cancelled.")
        return

    try:
        batch = service.commit(preview.file_name, preview.format, results, settle=settle)
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo("\nImport complete:")
    click.echo(f"  Batch ID: {batch.id}")
    click.echo(f"  Imported: {batch.total_transactions} transactions")
    click.echo(f"  Classified: {batch.classified_count}")
    click.echo(f"  Unclassified: {batch.unclassified_count}")
    click.echo(f"  Income: {format_money(batch.total_income)}")
    click.echo(f"  Expense: {format_money(batch.total_expense)}")


def register_commands(cli):
    """Register import command with main CLI."""
    cli.add_command(import_statement)

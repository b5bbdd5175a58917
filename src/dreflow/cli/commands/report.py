"""Statement report command."""

import click
from dreflow.cli.error_handling import handle_domain_error
from dreflow.cli.formatting import format_money, format_percent
from dreflow.domain.calculator import MARGIN_LINES, REPORT_LINES
from dreflow.domain.category import CategoryService
from dreflow.domain.statement import StatementService


@click.command("report")
@click.argument("period_id", type=int)
@click.option("--by-category", is_flag=True, help="Also show totals per category")
@click.pass_context
def report(ctx, period_id: int, by_category: bool):
    """Show the income statement (DRE) of a period."""
    db = ctx.obj["db"]
    service = StatementService(db)

    try:
        dre = service.report(period_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    period = dre.period
    status = "closed" if period.is_closed else "open"
    click.echo(f"\nDRE - {period.name} ({period.start_date} to {period.end_date}, {status})")
    click.echo("=" * 60)
    for attribute, label, is_subtotal in REPORT_LINES:
        line = f"{label:<40}{format_money(getattr(dre, attribute)):>20}"
        click.echo(click.style(line, bold=True) if is_subtotal else line)
    click.echo("-" * 60)
    for attribute, label in MARGIN_LINES:
        click.echo(f"{label:<40}{format_percent(getattr(dre, attribute)):>20}")

    if by_category and dre.category_totals:
        categories = CategoryService(db).list_categories()
        click.echo("\nBy category:")
        for cat in categories:
            if cat.id in dre.category_totals:
                click.echo(f"  {cat.name:<38}{format_money(dre.category_totals[cat.id]):>20}")


def register_commands(cli):
    """Register report command with main CLI."""
    cli.add_command(report)

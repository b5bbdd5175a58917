"""Trend and forecast command."""

import click
from dreflow.cli.error_handling import handle_domain_error
from dreflow.cli.formatting import format_money, format_percent
from dreflow.domain.forecast import forecast
from dreflow.domain.statement import DEFAULT_TRAILING_PERIODS, StatementService


@click.command("trend")
@click.option(
    "--last",
    "count",
    type=click.IntRange(min=1),
    default=DEFAULT_TRAILING_PERIODS,
    show_default=True,
    help="Number of trailing monthly periods",
)
@click.option(
    "--months-ahead",
    type=click.IntRange(min=0),
    default=12,
    show_default=True,
    help="Months to project",
)
@click.pass_context
def trend(ctx, count: int, months_ahead: int):
    """Show recent monthly statements and a linear projection."""
    db = ctx.obj["db"]
    service = StatementService(db)

    try:
        reports = service.trailing_reports(count=count)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not reports:
        click.echo("No monthly periods found. Create some with 'period create'.")
        return

    header = f"{'Period':<12}{'Receita Líquida':>20}{'EBITDA':>20}{'Lucro Líquido':>20}{'Margem EBITDA':>16}"
    click.echo(f"\nLast {len(reports)} period(s):")
    click.echo(header)
    click.echo("-" * len(header))
    for r in reports:
        click.echo(
            f"{r.period.name:<12}{format_money(r.receita_liquida):>20}{format_money(r.ebitda):>20}"
            f"{format_money(r.lucro_liquido):>20}{format_percent(r.margem_ebitda):>16}"
        )

    result = forecast(reports, months_ahead=months_ahead)
    click.echo(
        f"\nGrowth: {result.growth_rate:.1f}% per year, trend {result.trend}, "
        f"confidence {result.confidence:.0%}"
    )
    if result.periods:
        click.echo("\nProjection:")
        click.echo(header)
        click.echo("-" * len(header))
        for p in result.periods:
            click.echo(
                f"{p.month:<12}{format_money(p.receita_liquida):>20}{format_money(p.ebitda):>20}"
                f"{format_money(p.lucro_liquido):>20}{format_percent(p.margem_ebitda):>16}"
            )


def register_commands(cli):
    """Register trend command with main CLI."""
    cli.add_command(trend)

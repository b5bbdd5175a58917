"""Valuation command."""

import click
from dreflow.cli.error_handling import handle_domain_error
from dreflow.cli.formatting import format_money
from dreflow.domain.statement import VALUATION_TRAILING_PERIODS, StatementService
from dreflow.domain.valuation import SECTOR_MULTIPLES
from dreflow.utils.amount_parser import parse_amount


@click.command("valuation")
@click.option(
    "--sector",
    default="",
    help=f"Sector used to estimate the multiple ({', '.join(SECTOR_MULTIPLES)})",
)
@click.option("--multiple", type=click.FloatRange(min=0), help="EV/EBITDA multiple (default: estimated)")
@click.option("--gross-debt", default="0", help="Gross debt, e.g. 250.000,00")
@click.option("--cash", default="0", help="Cash and equivalents")
@click.option(
    "--last",
    "count",
    type=click.IntRange(min=1),
    default=VALUATION_TRAILING_PERIODS,
    show_default=True,
    help="Number of trailing monthly periods",
)
@click.pass_context
def valuation(ctx, sector: str, multiple: float | None, gross_debt: str, cash: str, count: int):
    """Estimate enterprise and equity value from trailing EBITDA.

    Examples:
        dreflow valuation --sector servicos --gross-debt 100.000,00 --cash 20.000,00
    """
    service = StatementService(ctx.obj["db"])

    try:
        result = service.valuation(
            sector=sector,
            multiple=multiple,
            gross_debt=parse_amount(gross_debt),
            cash=parse_amount(cash),
            count=count,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo("\nValuation (EV/EBITDA):")
    click.echo(f"  Annual EBITDA: {format_money(result.annual_ebitda)}")
    click.echo(f"  Multiple: {result.multiple:.1f}x")
    click.echo(f"  Enterprise value: {format_money(result.enterprise_value)}")
    click.echo(f"  Net debt: {format_money(result.net_debt)}")
    click.echo(f"  Equity value: {format_money(result.equity_value)}")


def register_commands(cli):
    """Register valuation command with main CLI."""
    cli.add_command(valuation)

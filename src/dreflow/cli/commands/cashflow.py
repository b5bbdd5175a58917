"""Cash flow command."""

from decimal import Decimal

import click
from dreflow.cli.error_handling import handle_domain_error
from dreflow.cli.formatting import format_money
from dreflow.domain.transaction import TransactionService
from dreflow.utils.amount_parser import parse_amount
from dreflow.utils.date_parser import parse_date


@click.command("cashflow")
@click.option("--start-date", help="Start date (YYYY-MM-DD or DD/MM/YYYY)")
@click.option("--end-date", help="End date, inclusive")
@click.option("--opening-balance", default="0", help="Balance before the first month, e.g. 1.000,00")
@click.pass_context
def cashflow(ctx, start_date: str | None, end_date: str | None, opening_balance: str):
    """Show money in and out per month with a running balance.

    Cancelled transactions are left out; pending ones are included.
    """
    service = TransactionService(ctx.obj["db"])

    try:
        start = parse_date(start_date) if start_date else None
        end = parse_date(end_date) if end_date else None
        opening = parse_amount(opening_balance) if opening_balance.strip() else Decimal("0")
        summary = service.cash_flow(start_date=start, end_date=end, opening_balance=opening)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not summary.months:
        click.echo("No transactions found.")
        return

    header = f"{'Month':<10}{'Income':>18}{'Expense':>18}{'Net':>18}{'Balance':>18}"
    click.echo(f"\nOpening balance: {format_money(summary.opening_balance)}")
    click.echo(header)
    click.echo("-" * len(header))
    for m in summary.months:
        click.echo(
            f"{m.month:<10}{format_money(m.total_income):>18}{format_money(m.total_expense):>18}"
            f"{format_money(m.net_flow):>18}{format_money(m.cumulative_balance):>18}"
        )
    click.echo("-" * len(header))
    click.echo(
        f"{'Total':<10}{format_money(summary.total_income):>18}{format_money(summary.total_expense):>18}"
        f"{format_money(summary.net_total):>18}{format_money(summary.closing_balance):>18}"
    )


def register_commands(cli):
    """Register cashflow command with main CLI."""
    cli.add_command(cashflow)

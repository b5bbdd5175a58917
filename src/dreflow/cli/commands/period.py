"""Period management commands."""

from datetime import date

import click
from dreflow.cli.error_handling import handle_domain_error
from dreflow.domain.entities import PeriodGranularity
from dreflow.domain.period import PeriodService
from dreflow.utils.date_parser import parse_date


@click.group()
def period_group():
    """Manage reporting periods."""
    pass


@period_group.command("create")
@click.option(
    "--granularity",
    type=click.Choice([g.value for g in PeriodGranularity], case_sensitive=False),
    default=PeriodGranularity.MONTHLY.value,
    help="Period length (default: monthly)",
)
@click.option("--date", "anchor", help="Any date inside the period (default: today)")
@click.option("--start", help="Explicit start date (requires --end)")
@click.option("--end", help="Explicit end date, inclusive (requires --start)")
@click.option("--name", help="Period name (default derived from the dates)")
@click.pass_context
def create_period(ctx, granularity: str, anchor: str | None, start: str | None, end: str | None, name: str | None):
    """Create an open period.

    Examples:
        dreflow period create --date 2026-03-15
        dreflow period create --granularity quarterly --date 2026-02-01
        dreflow period create --start 2026-03-01 --end 2026-03-31 --name "Março"
    """
    db = ctx.obj["db"]
    service = PeriodService(db)

    if bool(start) != bool(end):
        click.echo("Error: --start and --end must be given together.", err=True)
        ctx.exit(1)
    if start and anchor:
        click.echo("Error: --date cannot be combined with --start/--end.", err=True)
        ctx.exit(1)

    try:
        if start:
            start_date, end_date = parse_date(start), parse_date(end)
            period_id = service.create_period(
                name=name or f"{start_date.isoformat()} - {end_date.isoformat()}",
                granularity=granularity,
                start_date=start_date,
                end_date=end_date,
            )
        else:
            period_id = service.create_period_for(
                granularity, parse_date(anchor) if anchor else date.today(), name=name
            )
    except ValueError as e:
        handle_domain_error(ctx, e)

    period = service.get_period(period_id)
    click.echo(
        f"Created period '{period.name}' ({period.start_date} to {period.end_date}) (ID: {period_id})"
    )


@period_group.command("list")
@click.pass_context
def list_periods(ctx):
    """List all periods."""
    db = ctx.obj["db"]
    service = PeriodService(db)

    periods = service.list_periods()
    if not periods:
        click.echo("No periods found. Create one with 'period create'.")
        return

    click.echo(f"\n{'ID':<6} {'Name':<20} {'Granularity':<12} {'Start':<12} {'End':<12} Status")
    click.echo("-" * 74)
    for p in periods:
        status = "closed" if p.is_closed else "open"
        click.echo(
            f"{p.id:<6} {p.name:<20} {p.granularity.value:<12} "
            f"{p.start_date.isoformat():<12} {p.end_date.isoformat():<12} {status}"
        )


@period_group.command("close")
@click.argument("period_id", type=int)
@click.pass_context
def close_period(ctx, period_id: int):
    """Close a period. Its entries can no longer change afterwards."""
    db = ctx.obj["db"]
    service = PeriodService(db)

    try:
        period = service.close_period(period_id)
        click.echo(f"Closed period '{period.name}' (ID: {period_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@period_group.command("delete")
@click.argument("period_id", type=int)
@click.option("--yes", "-y", is_flag=True, help="Delete without asking for confirmation")
@click.pass_context
def delete_period(ctx, period_id: int, yes: bool):
    """Delete a period and its manual entries. Transactions are kept."""
    db = ctx.obj["db"]
    service = PeriodService(db)

    period = service.get_period(period_id)
    if period is None:
        click.echo(f"Error: Period {period_id} not found", err=True)
        ctx.exit(1)

    if not yes and not click.confirm(f"Delete period '{period.name}' and its entries?", default=False):
        click.echo("Cancelled.")
        return

    try:
        service.delete_period(period_id)
        click.echo(f"Deleted period '{period.name}' (ID: {period_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register period commands with main CLI."""
    cli.add_command(period_group, name="period")

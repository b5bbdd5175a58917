"""Main CLI entry point."""

from dataclasses import replace

import click
from dreflow.config import LOG_LEVELS, Settings
from dreflow.database.factories import create_sqlite_database
from dreflow.domain.errors import ValidationError
from dreflow.cli.error_handling import handle_domain_error
from dreflow.logger import setup_logging

# Import and register all commands at module level
from dreflow.cli.commands import (
    import_cmd,
    category,
    init_categories,
    period,
    entry,
    transaction,
    report,
    trend,
    rule,
    cashflow,
    valuation,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides DREFLOW_DB_PATH environment variable)",
    envvar="DREFLOW_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Log level (overrides DREFLOW_LOG_LEVEL environment variable)",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str | None):
    """Dreflow - Bank statement import and DRE reporting.

    Import bank statements (CSV, OFX, XML, XLSX), review the suggested
    categories, and compute income statements per period.
    """
    ctx.ensure_object(dict)

    try:
        settings = Settings.from_env()
    except ValidationError as e:
        handle_domain_error(ctx, e)
    if db_path:
        settings = replace(settings, db_path=db_path)
    if log_level:
        settings = replace(settings, log_level=log_level.upper())

    setup_logging(settings.log_level)
    ctx.obj["settings"] = settings

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=settings.db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
import_cmd.register_commands(cli)
category.register_commands(cli)
init_categories.register_commands(cli)
period.register_commands(cli)
entry.register_commands(cli)
transaction.register_commands(cli)
report.register_commands(cli)
trend.register_commands(cli)
rule.register_commands(cli)
cashflow.register_commands(cli)
valuation.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()

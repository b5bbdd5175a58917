"""Transaction management commands."""

import click
from dreflow.cli.error_handling import handle_domain_error
from dreflow.cli.formatting import format_signed
from dreflow.domain.category import CategoryService
from dreflow.domain.entities import TransactionStatus
from dreflow.domain.statement_import import settled_status
from dreflow.domain.transaction import TransactionService
from dreflow.utils.amount_parser import parse_amount, split_amount
from dreflow.utils.date_parser import parse_date


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD or DD/MM/YYYY)")
@click.option("--end-date", help="End date, inclusive")
@click.option("--category", help="Category name or ID")
@click.option("--uncategorized", is_flag=True, help="Show only unclassified transactions")
@click.option(
    "--status",
    type=click.Choice([s.value for s in TransactionStatus], case_sensitive=False),
    help="Only transactions with this status",
)
@click.option("--batch", "batch_id", type=int, help="Only transactions of this import batch")
@click.pass_context
def list_transactions(
    ctx,
    start_date: str | None,
    end_date: str | None,
    category: str | None,
    uncategorized: bool,
    status: str | None,
    batch_id: int | None,
):
    """View transactions with optional filters."""
    db = ctx.obj["db"]
    service = TransactionService(db)
    category_service = CategoryService(db)

    try:
        start = parse_date(start_date) if start_date else None
        end = parse_date(end_date) if end_date else None
        category_id = category_service.resolve_category(category).id if category else None
    except ValueError as e:
        handle_domain_error(ctx, e)

    transactions = service.list_transactions(
        start_date=start,
        end_date=end,
        category_id=category_id,
        uncategorized=uncategorized,
        status=status.lower() if status else None,
        import_batch_id=batch_id,
    )
    if not transactions:
        click.echo("No transactions found.")
        return

    names = {c.id: c.name for c in category_service.list_categories()}
    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo(f"{'ID':<6} {'Date':<10}  {'Amount':>16}  {'Status':<9}  {'Category':<26}  Description")
    click.echo("-" * 110)
    for txn in transactions:
        category_name = names.get(txn.category_id, "?") if txn.is_classified else "Uncategorized"
        click.echo(
            f"{txn.id:<6} {txn.date.isoformat():<10}  {format_signed(txn.value, txn.kind):>16}  "
            f"{txn.status.value:<9}  {category_name:<26}  {txn.description}"
        )


@transaction_group.command("add")
@click.option("--date", "txn_date", required=True, help="Transaction date")
@click.option("--amount", required=True, help="Signed amount: negative for expenses, e.g. -150,00")
@click.option("--description", required=True, help="Transaction description")
@click.option("--category", help="Category name or ID")
@click.option("--settled", is_flag=True, help="Mark as received/paid on its date")
@click.option("--notes", help="Notes")
@click.pass_context
def add_transaction(
    ctx, txn_date: str, amount: str, description: str, category: str | None, settled: bool, notes: str | None
):
    """Add a manual transaction."""
    db = ctx.obj["db"]
    service = TransactionService(db)
    category_service = CategoryService(db)

    try:
        value, kind = split_amount(parse_amount(amount))
        status = settled_status(kind) if settled else TransactionStatus.PENDING
        transaction_id = service.create_transaction(
            kind=kind,
            description=description,
            value=value,
            date=parse_date(txn_date),
            category_id=category_service.resolve_category(category).id if category else None,
            status=status,
            notes=notes,
        )
        click.echo(f"Created transaction {transaction_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("categorize")
@click.argument("transaction_id", type=int)
@click.argument("category", required=False)
@click.option("--clear", is_flag=True, help="Remove the category")
@click.pass_context
def categorize_transaction(ctx, transaction_id: int, category: str | None, clear: bool):
    """Assign CATEGORY (name or ID) to a transaction, or --clear it."""
    db = ctx.obj["db"]
    service = TransactionService(db)
    category_service = CategoryService(db)

    if clear == bool(category):
        click.echo("Error: Give either a CATEGORY or --clear.", err=True)
        ctx.exit(1)

    try:
        if clear:
            service.categorize(transaction_id, None)
            click.echo(f"Cleared category of transaction {transaction_id}")
        else:
            cat = category_service.resolve_category(category)
            service.categorize(transaction_id, cat.id)
            click.echo(f"Categorized transaction {transaction_id} as '{cat.name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("settle")
@click.argument("transaction_id", type=int)
@click.option("--date", "paid_on", help="Settlement date (default: transaction date)")
@click.pass_context
def settle_transaction(ctx, transaction_id: int, paid_on: str | None):
    """Mark a transaction as received (income) or paid (expense)."""
    db = ctx.obj["db"]
    service = TransactionService(db)

    try:
        status = service.settle(transaction_id, paid_date=parse_date(paid_on) if paid_on else None)
        click.echo(f"Transaction {transaction_id} marked as {status.value}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")

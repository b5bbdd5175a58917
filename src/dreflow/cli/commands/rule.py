"""Classification rule commands."""

import click
from dreflow.cli.error_handling import handle_domain_error
from dreflow.domain.category import CategoryService
from dreflow.domain.entities import TransactionKind
from dreflow.domain.rules import RuleService


@click.group()
def rule_group():
    """Manage classification rules."""
    pass


@rule_group.command("list")
@click.option("--active", "active_only", is_flag=True, help="Hide disabled rules")
@click.pass_context
def list_rules(ctx, active_only: bool):
    """List rules in the order they are tried."""
    db = ctx.obj["db"]
    service = RuleService(db)

    rules = service.list_rules(active_only=active_only)
    if not rules:
        click.echo("No rules found.")
        return

    names = {c.id: c.name for c in CategoryService(db).list_categories()}
    click.echo("\nRules:")
    for rule in rules:
        state = "" if rule.is_active else " (disabled)"
        click.echo(
            f"  #{rule.id} [{rule.kind.value}, priority {rule.priority}] "
            f"{', '.join(rule.keywords)} -> {names.get(rule.category_id, '?')}{state}"
        )


@rule_group.command("add")
@click.argument("keywords", nargs=-1, required=True)
@click.option("--category", "-c", required=True, help="Category name or ID the rule suggests")
@click.option(
    "--kind",
    required=True,
    type=click.Choice([k.value for k in TransactionKind], case_sensitive=False),
    help="Kind of transaction the rule applies to",
)
@click.option("--priority", type=int, default=0, show_default=True, help="Higher priorities are tried first")
@click.pass_context
def add_rule(ctx, keywords: tuple[str, ...], category: str, kind: str, priority: int):
    """Create a rule suggesting CATEGORY for descriptions containing any of KEYWORDS.

    Examples:
        dreflow rule add "posto shell" combustivel --category "Despesas Gerais" --kind expense
    """
    db = ctx.obj["db"]
    service = RuleService(db)

    try:
        cat = CategoryService(db).resolve_category(category)
        rule_id = service.create_rule(keywords, cat.id, kind, priority=priority)
        click.echo(f"Created rule {rule_id} -> '{cat.name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


def _set_active(ctx, rule_id: int, is_active: bool):
    service = RuleService(ctx.obj["db"])
    try:
        service.set_active(rule_id, is_active)
        click.echo(f"Rule {rule_id} {'enabled' if is_active else 'disabled'}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@rule_group.command("enable")
@click.argument("rule_id", type=int)
@click.pass_context
def enable_rule(ctx, rule_id: int):
    """Enable a rule."""
    _set_active(ctx, rule_id, True)


@rule_group.command("disable")
@click.argument("rule_id", type=int)
@click.pass_context
def disable_rule(ctx, rule_id: int):
    """Disable a rule without deleting it."""
    _set_active(ctx, rule_id, False)


@rule_group.command("delete")
@click.argument("rule_id", type=int)
@click.pass_context
def delete_rule(ctx, rule_id: int):
    """Delete a rule."""
    service = RuleService(ctx.obj["db"])
    try:
        service.delete_rule(rule_id)
        click.echo(f"Deleted rule {rule_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register rule commands with main CLI."""
    cli.add_command(rule_group, name="rule")

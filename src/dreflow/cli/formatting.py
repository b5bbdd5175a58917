"""Display helpers shared by CLI commands."""

from decimal import Decimal

from dreflow.domain.entities import TransactionKind


def format_money(value: Decimal) -> str:
    """Format an amount the Brazilian way: R$ 1.234,56."""
    text = f"{abs(value):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    sign = "-" if value < 0 else ""
    return f"{sign}R$ {text}"


def format_signed(value: Decimal, kind: TransactionKind) -> str:
    """Format a transaction magnitude with the sign implied by its kind."""
    return format_money(value if kind == TransactionKind.INCOME else -value)


def format_percent(value: float) -> str:
    return f"{value:.2f}%"

"""EV/EBITDA valuation.

Enterprise value is annual EBITDA times a multiple. Equity value subtracts net
debt (gross debt minus cash) from it. When no multiple is given, one is
estimated from the sector and the annual revenue growth.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Sequence

from dreflow.domain.entities import DreReport, Valuation
from dreflow.domain.errors import ValidationError
from dreflow.utils.text import normalize_text

CENTS = Decimal("0.01")

DEFAULT_MULTIPLE = 8.0
SECTOR_MULTIPLES: dict[str, float] = {
    "tecnologia": 15.0,
    "saas": 20.0,
    "varejo": 8.0,
    "industria": 6.0,
    "servicos": 10.0,
    "saude": 12.0,
    "educacao": 10.0,
    "financeiro": 12.0,
}

# Growth above this rate (% per year) raises the multiple by 1x per 10 points
GROWTH_PREMIUM_FLOOR = 10.0


def estimate_multiple(sector: str, growth_rate: float) -> float:
    """Estimate an EV/EBITDA multiple.

    Unknown sectors start from ``DEFAULT_MULTIPLE``. Names are matched without
    accents or case, so "Saúde" and "saude" are the same sector.

    Args:
        sector: Sector name
        growth_rate: Annual revenue growth in percent

    Returns:
        The multiple, rounded to one decimal
    """
    base = SECTOR_MULTIPLES.get(normalize_text(sector), DEFAULT_MULTIPLE)
    adjustment = max(0.0, (growth_rate - GROWTH_PREMIUM_FLOOR) / 10)
    return round(base + adjustment, 1)


def annual_ebitda(reports: Sequence[DreReport]) -> Decimal:
    """EBITDA of monthly reports scaled to twelve months."""
    if not reports:
        return Decimal("0")
    total = sum((r.ebitda for r in reports), Decimal("0"))
    return (total * 12 / len(reports)).quantize(CENTS, rounding=ROUND_HALF_UP)


def calculate_valuation(
    ebitda: Decimal,
    multiple: float,
    gross_debt: Decimal = Decimal("0"),
    cash: Decimal = Decimal("0"),
) -> Valuation:
    """Value a company from its annual EBITDA.

    Raises:
        ValidationError: If the multiple, debt or cash is negative
    """
    if multiple < 0:
        raise ValidationError(f"Multiple cannot be negative, got {multiple}")
    if gross_debt < 0 or cash < 0:
        raise ValidationError("Debt and cash must be zero or positive")

    ebitda = Decimal(ebitda)
    enterprise_value = (ebitda * Decimal(str(multiple))).quantize(CENTS, rounding=ROUND_HALF_UP)
    net_debt = Decimal(gross_debt) - Decimal(cash)
    return Valuation(
        annual_ebitda=ebitda,
        multiple=multiple,
        enterprise_value=enterprise_value,
        net_debt=net_debt,
        equity_value=enterprise_value - net_debt,
    )

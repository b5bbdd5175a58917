"""Projection of future statements from a series of past reports."""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Sequence

from dateutil.relativedelta import relativedelta

from dreflow.domain.entities import DreReport, ForecastPeriod, ForecastResult

TREND_THRESHOLD = 2.0
CENTS = Decimal("0.01")


def linear_regression(values: Sequence[float]) -> tuple[float, float]:
    """Least-squares fit of values against their index. Returns (slope, intercept)."""
    n = len(values)
    if n == 0:
        return 0.0, 0.0
    if n < 2:
        return 0.0, values[0]

    sum_x = sum(range(n))
    sum_y = sum(values)
    sum_xy = sum(i * v for i, v in enumerate(values))
    sum_x2 = sum(i * i for i in range(n))

    denominator = n * sum_x2 - sum_x * sum_x
    if denominator == 0:
        return 0.0, sum_y / n

    slope = (n * sum_xy - sum_x * sum_y) / denominator
    intercept = (sum_y - slope * sum_x) / n
    return slope, intercept


def r_squared(values: Sequence[float], slope: float, intercept: float) -> float:
    """Goodness of fit, clamped to [0, 1]. Short series get a neutral 0.5."""
    n = len(values)
    if n < 3:
        return 0.5

    mean = sum(values) / n
    ss_res = sum((v - (intercept + slope * i)) ** 2 for i, v in enumerate(values))
    ss_tot = sum((v - mean) ** 2 for v in values)
    if ss_tot == 0:
        return 1.0
    return max(0.0, min(1.0, 1 - ss_res / ss_tot))


def annualized_growth(values: Sequence[float]) -> float:
    """Annualized growth (%) between the first and last monthly value."""
    if len(values) < 2:
        return 0.0
    first, last = values[0], values[-1]
    # A sign change or a zero base has no meaningful compound rate
    if first <= 0 or last <= 0:
        return 0.0
    return ((last / first) ** (12 / len(values)) - 1) * 100


def determine_trend(growth_rate: float) -> str:
    if growth_rate > TREND_THRESHOLD:
        return "up"
    if growth_rate < -TREND_THRESHOLD:
        return "down"
    return "stable"


def _money(value: float) -> Decimal:
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def forecast(reports: Sequence[DreReport], months_ahead: int = 12) -> ForecastResult:
    """Project receita líquida, EBITDA and lucro líquido month by month.

    Args:
        reports: Historical reports, oldest first
        months_ahead: Number of months to project

    Returns:
        ForecastResult with one ForecastPeriod per projected month
    """
    if not reports:
        return ForecastResult(periods=(), growth_rate=0.0, trend="stable", confidence=0.0)

    revenues = [float(r.receita_liquida) for r in reports]
    rev_slope, rev_intercept = linear_regression(revenues)
    ebitda_slope, ebitda_intercept = linear_regression([float(r.ebitda) for r in reports])
    profit_slope, profit_intercept = linear_regression([float(r.lucro_liquido) for r in reports])

    n = len(reports)
    base_date: date = reports[-1].period.end_date
    periods = []
    for i in range(1, months_ahead + 1):
        x = n - 1 + i
        receita_liquida = max(0.0, rev_intercept + rev_slope * x)
        ebitda = ebitda_intercept + ebitda_slope * x
        lucro_liquido = profit_intercept + profit_slope * x
        month = base_date + relativedelta(months=i)

        periods.append(
            ForecastPeriod(
                month=month.strftime("%Y-%m"),
                receita_liquida=_money(receita_liquida),
                ebitda=_money(ebitda),
                lucro_liquido=_money(lucro_liquido),
                margem_ebitda=ebitda / receita_liquida * 100 if receita_liquida > 0 else 0.0,
            )
        )

    growth_rate = annualized_growth(revenues)
    return ForecastResult(
        periods=tuple(periods),
        growth_rate=round(growth_rate, 1),
        trend=determine_trend(growth_rate),
        confidence=r_squared(revenues, rev_slope, rev_intercept),
    )

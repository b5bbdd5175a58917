"""Statement (DRE) reporting service."""

import logging
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
from typing import Optional, Union

from dreflow.database.base import Database
from dreflow.domain.calculator import calculate
from dreflow.domain.entities import (
    DreReport,
    ForecastResult,
    Period,
    PeriodGranularity,
    Valuation,
)
from dreflow.domain.errors import NotFoundError, ValidationError, period_not_found
from dreflow.domain.forecast import annualized_growth, forecast
from dreflow.domain.valuation import annual_ebitda, calculate_valuation, estimate_multiple

logger = logging.getLogger(__name__)

DEFAULT_TRAILING_PERIODS = 6
VALUATION_TRAILING_PERIODS = 12


class StatementService:
    """Service for computing income statements from stored data."""

    def __init__(self, db: Database):
        """Initialize statement service.

        Args:
            db: Database instance
        """
        self.db = db

    def _inputs(self, period: Period) -> tuple:
        """Load everything the calculator needs for one period."""
        return (
            period,
            self.db.list_entries(period.id),
            self.db.list_categories(),
            self.db.list_transactions(start_date=period.start_date, end_date=period.end_date),
        )

    def report(self, period_id: int) -> DreReport:
        """Compute the statement of a period.

        Args:
            period_id: Period ID

        Returns:
            DreReport

        Raises:
            NotFoundError: If the period doesn't exist
        """
        period = self.db.get_period(period_id)
        if period is None:
            raise NotFoundError(period_not_found(period_id))
        return calculate(*self._inputs(period))

    def trailing_reports(
        self,
        count: int = DEFAULT_TRAILING_PERIODS,
        granularity: Optional[Union[str, PeriodGranularity]] = PeriodGranularity.MONTHLY,
        max_workers: Optional[int] = None,
    ) -> list[DreReport]:
        """Compute the statements of the most recent periods, oldest first.

        Inputs are loaded up front through the database session; only the
        pure calculations run on the worker threads.

        Args:
            count: Number of periods to include
            granularity: Only consider periods of this granularity; None for all
            max_workers: Thread pool size

        Returns:
            List of DreReport in period order
        """
        if count < 1:
            raise ValidationError(f"Number of periods must be at least 1, got {count}")

        periods = self.db.list_periods()
        if granularity is not None:
            granularity = PeriodGranularity(granularity)
            periods = [p for p in periods if p.granularity == granularity]
        periods = periods[-count:]
        if not periods:
            return []

        inputs = [self._inputs(period) for period in periods]
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            reports = list(executor.map(lambda args: calculate(*args), inputs))

        logger.info("Computed %d trailing reports", len(reports))
        return reports

    def forecast(
        self, count: int = DEFAULT_TRAILING_PERIODS, months_ahead: int = 12
    ) -> ForecastResult:
        """Project the next months from the trailing monthly statements.

        Raises:
            ValidationError: If months_ahead is negative
        """
        if months_ahead < 0:
            raise ValidationError(f"Months ahead cannot be negative, got {months_ahead}")
        return forecast(self.trailing_reports(count=count), months_ahead=months_ahead)

    def valuation(
        self,
        sector: str = "",
        multiple: Optional[float] = None,
        gross_debt: Decimal = Decimal("0"),
        cash: Decimal = Decimal("0"),
        count: int = VALUATION_TRAILING_PERIODS,
    ) -> Valuation:
        """Value the company from its trailing monthly statements.

        Annual EBITDA is the trailing monthly EBITDA scaled to twelve months.
        Without an explicit multiple, one is estimated from the sector and the
        annualized growth of receita líquida.

        Raises:
            ValidationError: If there are no monthly periods, or the inputs are negative
        """
        reports = self.trailing_reports(count=count)
        if not reports:
            raise ValidationError("No monthly periods to value. Create some with 'period create'.")

        if multiple is None:
            growth = annualized_growth([float(r.receita_liquida) for r in reports])
            multiple = estimate_multiple(sector, growth)
            logger.info("Estimated multiple %.1fx for sector '%s' (growth %.1f%%)", multiple, sector, growth)
        return calculate_valuation(annual_ebitda(reports), multiple, gross_debt=gross_debt, cash=cash)

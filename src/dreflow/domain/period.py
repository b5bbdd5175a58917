"""Period domain service.

A period is created open and can be closed exactly once. While it is closed
its manual entries are frozen. Deleting a period removes its entries but
never touches transactions, which are matched to periods by date only.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional, Union

from dreflow.database.base import Database
from dreflow.domain.entities import ManualEntry, Period, PeriodGranularity
from dreflow.domain.errors import (
    AlreadyClosed,
    ConflictError,
    NotFoundError,
    PeriodClosed,
    ValidationError,
    category_not_found,
    entry_not_found,
    period_not_found,
)
from dreflow.utils.date_parser import default_period_name, period_bounds
from dreflow.utils.text import clean_description

logger = logging.getLogger(__name__)


def parse_granularity(value: Union[str, PeriodGranularity]) -> PeriodGranularity:
    try:
        return PeriodGranularity(value.strip().lower() if isinstance(value, str) else value)
    except ValueError as e:
        valid = ", ".join(g.value for g in PeriodGranularity)
        raise ValidationError(f"Invalid granularity '{value}'. Valid values: {valid}") from e


class PeriodService:
    """Service for managing periods and their manual entries."""

    def __init__(self, db: Database):
        """Initialize period service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_period(
        self,
        name: str,
        granularity: Union[str, PeriodGranularity],
        start_date: date,
        end_date: date,
    ) -> int:
        """Create an open period.

        Args:
            name: Display name
            granularity: monthly, quarterly or annual
            start_date: First day of the period
            end_date: Last day of the period (inclusive)

        Returns:
            Period ID

        Raises:
            ValidationError: If the name is empty or end_date precedes start_date
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Period name cannot be empty")
        if end_date < start_date:
            raise ValidationError(
                f"Period end date {end_date} is before its start date {start_date}"
            )
        return self.db.create_period(
            name=name,
            granularity=parse_granularity(granularity),
            start_date=start_date,
            end_date=end_date,
        )

    def create_period_for(
        self,
        granularity: Union[str, PeriodGranularity],
        anchor: date,
        name: Optional[str] = None,
    ) -> int:
        """Create the calendar period of a granularity that contains a date.

        Args:
            granularity: monthly, quarterly or annual
            anchor: Any day inside the wanted period
            name: Optional name; defaults to "2026-03", "2026-Q1" or "2026"

        Returns:
            Period ID
        """
        granularity = parse_granularity(granularity)
        start_date, end_date = period_bounds(granularity, anchor)
        return self.create_period(
            name=name or default_period_name(granularity, start_date),
            granularity=granularity,
            start_date=start_date,
            end_date=end_date,
        )

    def get_period(self, period_id: int) -> Optional[Period]:
        """Get period by ID.

        Args:
            period_id: Period ID

        Returns:
            Period entity or None if not found
        """
        return self.db.get_period(period_id)

    def require_period(self, period_id: int) -> Period:
        period = self.db.get_period(period_id)
        if period is None:
            raise NotFoundError(period_not_found(period_id))
        return period

    def list_periods(self) -> list[Period]:
        """List periods ordered by start date."""
        return self.db.list_periods()

    def close_period(self, period_id: int) -> Period:
        """Close a period, freezing its manual entries.

        Raises:
            NotFoundError: If the period doesn't exist
            AlreadyClosed: If the period is already closed
        """
        period = self.require_period(period_id)
        if period.is_closed:
            raise AlreadyClosed(period_id)
        self.db.set_period_closed(period_id)
        logger.info("Closed period %d (%s)", period_id, period.name)
        return self.require_period(period_id)

    def delete_period(self, period_id: int) -> None:
        """Delete a period, open or closed, along with its manual entries.

        Raises:
            NotFoundError: If the period doesn't exist
        """
        self.require_period(period_id)
        self.db.delete_period(period_id)
        logger.info("Deleted period %d", period_id)

    # Manual entries
    def _require_open(self, period_id: int) -> Period:
        period = self.require_period(period_id)
        if period.is_closed:
            raise PeriodClosed(period_id)
        return period

    def _validated(self, category_id: Optional[int], description: Optional[str], value: Optional[Decimal]):
        if category_id is not None and self.db.get_category(category_id) is None:
            raise NotFoundError(category_not_found(category_id))
        if description is not None:
            description = clean_description(description)
            if not description:
                raise ValidationError("Entry description cannot be empty")
        if value is not None:
            value = Decimal(value)
            if value < 0:
                raise ValidationError(
                    f"Entry value must be zero or positive, got {value}; "
                    "the category decides whether it adds or subtracts"
                )
        return category_id, description, value

    def add_entry(
        self,
        period_id: int,
        category_id: int,
        description: str,
        value: Decimal,
        notes: Optional[str] = None,
    ) -> int:
        """Add a manual entry to an open period.

        Args:
            period_id: Owning period
            category_id: Category the entry is booked under
            description: Entry description
            value: Non-negative amount
            notes: Optional notes

        Returns:
            Entry ID

        Raises:
            NotFoundError: If the period or category doesn't exist
            PeriodClosed: If the period is closed
            ValidationError: If the description is empty or the value negative
            ConflictError: If the same entry already exists
        """
        self._require_open(period_id)
        category_id, description, value = self._validated(category_id, description, value)
        if self.db.find_entry(period_id, category_id, description) is not None:
            raise ConflictError(
                f"Entry '{description}' already exists in period {period_id}"
            )
        return self.db.create_entry(
            period_id=period_id,
            category_id=category_id,
            description=description,
            value=value,
            notes=notes,
        )

    def upsert_entry(
        self,
        period_id: int,
        category_id: int,
        description: str,
        value: Decimal,
        notes: Optional[str] = None,
    ) -> int:
        """Set the value of the entry keyed by (period, category, description).

        Creates the entry when it does not exist yet.

        Returns:
            Entry ID
        """
        self._require_open(period_id)
        category_id, description, value = self._validated(category_id, description, value)
        existing = self.db.find_entry(period_id, category_id, description)
        if existing is None:
            return self.db.create_entry(
                period_id=period_id,
                category_id=category_id,
                description=description,
                value=value,
                notes=notes,
            )
        self.db.update_entry(existing.id, value=value, notes=notes)
        return existing.id

    def get_entry(self, entry_id: int) -> Optional[ManualEntry]:
        return self.db.get_entry(entry_id)

    def _require_entry(self, entry_id: int) -> ManualEntry:
        entry = self.db.get_entry(entry_id)
        if entry is None:
            raise NotFoundError(entry_not_found(entry_id))
        return entry

    def list_entries(self, period_id: int) -> list[ManualEntry]:
        """List the manual entries of a period.

        Raises:
            NotFoundError: If the period doesn't exist
        """
        self.require_period(period_id)
        return self.db.list_entries(period_id)

    def update_entry(
        self,
        entry_id: int,
        category_id: Optional[int] = None,
        description: Optional[str] = None,
        value: Optional[Decimal] = None,
        notes: Optional[str] = None,
    ) -> None:
        """Update the provided fields of a manual entry.

        Raises:
            NotFoundError: If the entry or category doesn't exist
            PeriodClosed: If the entry's period is closed
            ValidationError: If the description is empty or the value negative
            ConflictError: If another entry already has the resulting key
        """
        entry = self._require_entry(entry_id)
        self._require_open(entry.period_id)
        category_id, description, value = self._validated(category_id, description, value)
        clash = self.db.find_entry(
            entry.period_id, category_id or entry.category_id, description or entry.description
        )
        if clash is not None and clash.id != entry_id:
            raise ConflictError(
                f"Entry '{clash.description}' already exists in period {entry.period_id}"
            )
        self.db.update_entry(
            entry_id,
            category_id=category_id,
            description=description,
            value=value,
            notes=notes,
        )

    def delete_entry(self, entry_id: int) -> None:
        """Delete a manual entry.

        Raises:
            NotFoundError: If the entry doesn't exist
            PeriodClosed: If the entry's period is closed
        """
        entry = self._require_entry(entry_id)
        self._require_open(entry.period_id)
        self.db.delete_entry(entry_id)

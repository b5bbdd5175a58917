"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional, Sequence
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from dreflow.domain.entities import (
    Category,
    ClassificationRule,
    DreBucket,
    HistoricalAssignment,
    ImportBatch,
    ManualEntry,
    Period,
    PeriodGranularity,
    PersistedTransaction,
    TransactionKind,
    TransactionSource,
    TransactionStatus,
)


class Database(ABC):
    """Abstract database interface for dreflow."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Category operations
    @abstractmethod
    def create_category(
        self,
        name: str,
        bucket: DreBucket,
        keywords: Sequence[str] = (),
        position: Optional[int] = None,
    ) -> int:
        """Create a category. Returns category ID.

        When position is None the category is appended after the last one.
        """
        pass

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def get_category_by_name(self, name: str) -> Optional[Category]:
        """Get category by name."""
        pass

    @abstractmethod
    def list_categories(self) -> list[Category]:
        """List all categories ordered by position, then ID."""
        pass

    @abstractmethod
    def update_category_keywords(self, category_id: int, keywords: Sequence[str]) -> None:
        """Replace the keyword set of a category."""
        pass

    @abstractmethod
    def delete_category(self, category_id: int) -> None:
        """Delete a category that no entry or transaction references."""
        pass

    # Period operations
    @abstractmethod
    def create_period(
        self,
        name: str,
        granularity: PeriodGranularity,
        start_date: date,
        end_date: date,
    ) -> int:
        """Create an open period. Returns period ID."""
        pass

    @abstractmethod
    def get_period(self, period_id: int) -> Optional[Period]:
        """Get period by ID."""
        pass

    @abstractmethod
    def list_periods(self) -> list[Period]:
        """List periods ordered by start date."""
        pass

    @abstractmethod
    def set_period_closed(self, period_id: int) -> None:
        """Mark a period closed."""
        pass

    @abstractmethod
    def delete_period(self, period_id: int) -> None:
        """Delete a period and its manual entries."""
        pass

    # Manual entry operations
    @abstractmethod
    def create_entry(
        self,
        period_id: int,
        category_id: int,
        description: str,
        value: Decimal,
        notes: Optional[str] = None,
    ) -> int:
        """Create a manual entry. Returns entry ID."""
        pass

    @abstractmethod
    def get_entry(self, entry_id: int) -> Optional[ManualEntry]:
        """Get manual entry by ID."""
        pass

    @abstractmethod
    def find_entry(self, period_id: int, category_id: int, description: str) -> Optional[ManualEntry]:
        """Get the entry matching (period, category, description), if any."""
        pass

    @abstractmethod
    def list_entries(self, period_id: int) -> list[ManualEntry]:
        """List manual entries of a period."""
        pass

    @abstractmethod
    def update_entry(
        self,
        entry_id: int,
        category_id: Optional[int] = None,
        description: Optional[str] = None,
        value: Optional[Decimal] = None,
        notes: Optional[str] = None,
    ) -> None:
        """Update manual entry fields that are not None."""
        pass

    @abstractmethod
    def delete_entry(self, entry_id: int) -> None:
        """Delete a manual entry."""
        pass

    # Import operations
    @abstractmethod
    def record_import(
        self, batch: ImportBatch, transactions: Sequence[PersistedTransaction]
    ) -> ImportBatch:
        """Store a batch and its transactions as one unit.

        Either everything is stored, or nothing is and PartialImportFailure
        is raised.

        Returns:
            The stored batch, with id and created_at assigned
        """
        pass

    @abstractmethod
    def get_import_batch(self, batch_id: int) -> Optional[ImportBatch]:
        """Get import batch by ID."""
        pass

    @abstractmethod
    def list_import_batches(self) -> list[ImportBatch]:
        """List import batches, newest first."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        kind: TransactionKind,
        status: TransactionStatus,
        source: TransactionSource,
        description: str,
        value: Decimal,
        date: date,
        due_date: Optional[date] = None,
        paid_date: Optional[date] = None,
        category_id: Optional[int] = None,
        document_number: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Create a transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[PersistedTransaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category_id: Optional[int] = None,
        uncategorized: bool = False,
        status: Optional[TransactionStatus] = None,
        import_batch_id: Optional[int] = None,
    ) -> list[PersistedTransaction]:
        """List transactions with optional filters.

        Args:
            start_date: Optional start date filter (inclusive)
            end_date: Optional end date filter (inclusive)
            category_id: Optional category ID filter
            uncategorized: If True, only return transactions without a category
            status: Optional status filter
            import_batch_id: Optional import batch filter
        """
        pass

    @abstractmethod
    def update_transaction_category(self, transaction_id: int, category_id: Optional[int]) -> None:
        """Update transaction category, keeping is_classified in step."""
        pass

    @abstractmethod
    def update_transaction_status(
        self, transaction_id: int, status: TransactionStatus, paid_date: Optional[date] = None
    ) -> None:
        """Update transaction status and paid date."""
        pass

    @abstractmethod
    def list_historical_assignments(self) -> list[HistoricalAssignment]:
        """Get description/category pairs of every classified transaction."""
        pass

    # Classification rule operations
    @abstractmethod
    def create_rule(
        self,
        keywords: Sequence[str],
        category_id: int,
        kind: TransactionKind,
        priority: int = 0,
    ) -> int:
        """Create an active classification rule. Returns rule ID."""
        pass

    @abstractmethod
    def get_rule(self, rule_id: int) -> Optional[ClassificationRule]:
        """Get classification rule by ID."""
        pass

    @abstractmethod
    def list_rules(self, active_only: bool = False) -> list[ClassificationRule]:
        """List rules by descending priority, then ID."""
        pass

    @abstractmethod
    def set_rule_active(self, rule_id: int, is_active: bool) -> None:
        """Enable or disable a rule."""
        pass

    @abstractmethod
    def delete_rule(self, rule_id: int) -> None:
        """Delete a rule."""
        pass

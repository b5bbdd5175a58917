"""Transaction domain service."""

from typing import Optional, Union
from datetime import date
from decimal import Decimal

from dreflow.database.base import Database
from dreflow.domain.cashflow import calculate_cash_flow
from dreflow.domain.entities import (
    CashFlowSummary,
    PersistedTransaction,
    TransactionKind,
    TransactionSource,
    TransactionStatus,
)
from dreflow.domain.errors import (
    NotFoundError,
    ValidationError,
    category_not_found,
    transaction_not_found,
)
from dreflow.domain.statement_import import settled_status
from dreflow.utils.text import clean_description


class TransactionService:
    """Service for managing transactions."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_transaction(
        self,
        kind: Union[str, TransactionKind],
        description: str,
        value: Decimal,
        date: date,
        category_id: Optional[int] = None,
        status: Union[str, TransactionStatus] = TransactionStatus.PENDING,
        due_date: Optional[date] = None,
        paid_date: Optional[date] = None,
        document_number: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Create a manual transaction.

        Args:
            kind: income or expense
            description: Transaction description
            value: Non-negative amount
            date: Transaction date
            category_id: Optional category ID
            status: Initial status
            due_date: Optional due date; defaults to date
            paid_date: Optional paid date; defaults to date for settled statuses
            document_number: Optional document number
            notes: Optional notes

        Returns:
            Transaction ID

        Raises:
            ValidationError: If the value is negative, the description empty, or
                the status does not fit the kind
            NotFoundError: If the category doesn't exist
        """
        kind = TransactionKind(kind)
        status = TransactionStatus(status)

        description = clean_description(description)
        if not description:
            raise ValidationError("Transaction description cannot be empty")
        value = Decimal(value)
        if value < 0:
            raise ValidationError(f"Transaction value must be zero or positive, got {value}")

        if status in (TransactionStatus.PAID, TransactionStatus.RECEIVED) and status != settled_status(kind):
            raise ValidationError(f"An {kind.value} transaction cannot be '{status.value}'")

        # Verify category if provided
        if category_id is not None and self.db.get_category(category_id) is None:
            raise NotFoundError(category_not_found(category_id))

        if paid_date is None and status == settled_status(kind):
            paid_date = date

        return self.db.create_transaction(
            kind=kind,
            status=status,
            source=TransactionSource.MANUAL,
            description=description,
            value=value,
            date=date,
            due_date=due_date or date,
            paid_date=paid_date,
            category_id=category_id,
            document_number=document_number,
            notes=notes,
        )

    def get_transaction(self, transaction_id: int) -> Optional[PersistedTransaction]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            PersistedTransaction or None if not found
        """
        return self.db.get_transaction(transaction_id)

    def _require_transaction(self, transaction_id: int) -> PersistedTransaction:
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return txn

    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category_id: Optional[int] = None,
        uncategorized: bool = False,
        status: Optional[Union[str, TransactionStatus]] = None,
        import_batch_id: Optional[int] = None,
    ) -> list[PersistedTransaction]:
        """List transactions, newest first, with optional filters."""
        return self.db.list_transactions(
            start_date=start_date,
            end_date=end_date,
            category_id=category_id,
            uncategorized=uncategorized,
            status=TransactionStatus(status) if status is not None else None,
            import_batch_id=import_batch_id,
        )

    def categorize(self, transaction_id: int, category_id: Optional[int]) -> None:
        """Assign or clear the category of a transaction.

        Args:
            transaction_id: Transaction ID
            category_id: Category ID, or None to mark it unclassified

        Raises:
            NotFoundError: If the transaction or category doesn't exist
        """
        self._require_transaction(transaction_id)
        if category_id is not None and self.db.get_category(category_id) is None:
            raise NotFoundError(category_not_found(category_id))
        self.db.update_transaction_category(transaction_id, category_id)

    def settle(self, transaction_id: int, paid_date: Optional[date] = None) -> TransactionStatus:
        """Mark a transaction received (income) or paid (expense).

        Args:
            transaction_id: Transaction ID
            paid_date: Settlement date; defaults to the transaction date

        Returns:
            The new status

        Raises:
            NotFoundError: If the transaction doesn't exist
            ValidationError: If it is cancelled or already settled
        """
        txn = self._require_transaction(transaction_id)
        if txn.status == TransactionStatus.CANCELLED:
            raise ValidationError(f"Transaction {transaction_id} is cancelled")
        if txn.is_settled:
            raise ValidationError(f"Transaction {transaction_id} is already {txn.status.value}")

        status = settled_status(txn.kind)
        self.db.update_transaction_status(transaction_id, status, paid_date=paid_date or txn.date)
        return status

    def cash_flow(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        opening_balance: Decimal = Decimal("0"),
    ) -> CashFlowSummary:
        """Summarize money in and out per month over a date range.

        Args:
            start_date: Optional first day (inclusive)
            end_date: Optional last day (inclusive)
            opening_balance: Balance before start_date

        Raises:
            ValidationError: If start_date is after end_date
        """
        if start_date is not None and end_date is not None and start_date > end_date:
            raise ValidationError(f"Start date {start_date} is after end date {end_date}")
        transactions = self.db.list_transactions(start_date=start_date, end_date=end_date)
        return calculate_cash_flow(transactions, opening_balance=opening_balance)

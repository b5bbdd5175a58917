"""Statement import domain service.

Importing is split in two steps so a reviewer can correct suggestions in
between: ``preview`` detects, parses and classifies a file without writing
anything, and ``commit`` stores the reviewed results as one import batch.
"""

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

from dreflow.database.base import Database
from dreflow.domain.batch import build_batch
from dreflow.domain.classifier import DEFAULT_MIN_SCORE, HistoryIndex, classify
from dreflow.domain.entities import (
    Category,
    ClassificationResult,
    ImportBatch,
    ImportFormat,
    PersistedTransaction,
    TransactionKind,
    TransactionSource,
    TransactionStatus,
)
from dreflow.domain.errors import ValidationError
from dreflow.parsers import RowError, parse_statement

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportPreview:
    """Parsed and classified content of one file, ready for review."""

    file_name: str
    format: ImportFormat
    results: tuple[ClassificationResult, ...]
    errors: tuple[RowError, ...] = ()

    @property
    def skipped(self) -> int:
        return len(self.errors)

    @property
    def batch(self) -> ImportBatch:
        """Summary of the batch that committing these results would create."""
        return build_batch(self.file_name, self.format, self.results)


def settled_status(kind: TransactionKind) -> TransactionStatus:
    """Status of a transaction whose money has already moved."""
    return TransactionStatus.RECEIVED if kind == TransactionKind.INCOME else TransactionStatus.PAID


def kind_mismatches(
    results: Sequence[ClassificationResult], categories: Iterable[Category]
) -> list[int]:
    """Rows (1-based) whose category bucket usually holds the other kind.

    An expense filed under revenue, or income under an expense line, is
    allowed but usually a misclassification worth a second look.
    """
    buckets = {category.id: category.bucket for category in categories}
    rows = []
    for row, result in enumerate(results, start=1):
        bucket = buckets.get(result.suggested_category_id)
        if bucket is not None and bucket.natural_kind != result.transaction.kind:
            rows.append(row)
    return rows


def to_persisted(
    result: ClassificationResult, fmt: ImportFormat, settle: bool = False
) -> PersistedTransaction:
    """Build the transaction stored for one reviewed classification result."""
    txn = result.transaction
    return PersistedTransaction(
        id=None,
        kind=txn.kind,
        status=settled_status(txn.kind) if settle else TransactionStatus.PENDING,
        source=TransactionSource.for_format(fmt),
        description=txn.description,
        value=txn.value,
        date=txn.date,
        due_date=txn.date,
        paid_date=txn.date if settle else None,
        category_id=result.suggested_category_id,
        document_number=txn.document_number,
        notes=None,
    )


class ImportService:
    """Service for importing bank statements."""

    def __init__(self, db: Database):
        """Initialize import service.

        Args:
            db: Database instance
        """
        self.db = db

    def preview(
        self,
        file_name: str,
        content: Union[bytes, str],
        cancel_event: Optional[threading.Event] = None,
        min_score: float = DEFAULT_MIN_SCORE,
    ) -> ImportPreview:
        """Parse a statement and classify its transactions.

        Active rules are tried first. Otherwise the stored categories are
        scored, with every previously classified transaction as memory.
        Nothing is written.

        Args:
            file_name: Uploaded file name, used for format detection
            content: Raw file content
            cancel_event: Optional event that aborts long spreadsheet parses
            min_score: Minimum classifier score for a suggestion

        Returns:
            ImportPreview with one result per parsed transaction

        Raises:
            UnsupportedFormat: If the format is not recognized
            InvalidStatement: If the document cannot be read
            EmptyStatement: If no transaction could be parsed
            ImportCancelled: If cancel_event was set during the parse
        """
        parsed = parse_statement(file_name, content, cancel_event=cancel_event)
        categories = self.db.list_categories()
        history = HistoryIndex(self.db.list_historical_assignments())
        rules = self.db.list_rules(active_only=True)

        results = classify(parsed.transactions, history, categories, min_score=min_score, rules=rules)
        return ImportPreview(
            file_name=file_name,
            format=parsed.format,
            results=tuple(results),
            errors=parsed.errors,
        )

    def preview_file(
        self,
        file_path: str,
        cancel_event: Optional[threading.Event] = None,
        min_score: float = DEFAULT_MIN_SCORE,
    ) -> ImportPreview:
        """Read a statement from disk and preview it.

        Raises:
            FileNotFoundError: If the file doesn't exist
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"Statement file not found: {file_path}")
        return self.preview(path.name, path.read_bytes(), cancel_event=cancel_event, min_score=min_score)

    def commit(
        self,
        file_name: str,
        format: ImportFormat,
        results: Sequence[ClassificationResult],
        settle: bool = False,
    ) -> ImportBatch:
        """Store reviewed results as one import batch.

        Args:
            file_name: Uploaded file name
            format: Format the file was parsed as
            results: Reviewed classification results
            settle: Store transactions as received/paid on their own date
                instead of pending

        Returns:
            The stored ImportBatch

        Raises:
            ValidationError: If there is nothing to import or a category doesn't exist
            PartialImportFailure: If storing failed; nothing was kept
        """
        if not results:
            raise ValidationError(f"Nothing to import from '{file_name}'")

        known = {category.id for category in self.db.list_categories()}
        for result in results:
            if result.is_classified and result.suggested_category_id not in known:
                raise ValidationError(
                    f"Category {result.suggested_category_id} not found "
                    f"for '{result.transaction.description}'"
                )

        fmt = ImportFormat(format)
        batch = build_batch(file_name, fmt, results)
        transactions = [to_persisted(result, fmt, settle=settle) for result in results]
        stored = self.db.record_import(batch, transactions)

        logger.info(
            "Imported %d transactions from '%s' (%d classified)",
            stored.total_transactions,
            file_name,
            stored.classified_count,
        )
        return stored

"""Import batch aggregation."""

from decimal import Decimal
from typing import Sequence

from dreflow.domain.entities import (
    ClassificationResult,
    ImportBatch,
    ImportBatchStatus,
    ImportFormat,
    TransactionKind,
)


def build_batch(
    file_name: str,
    format: ImportFormat,
    results: Sequence[ClassificationResult],
    status: ImportBatchStatus = ImportBatchStatus.COMPLETE,
) -> ImportBatch:
    """Summarize a reviewed classification pass into an import batch.

    Args:
        file_name: Name of the uploaded file
        format: Format the file was parsed as
        results: Classification results, after any manual overrides
        status: Batch status to record

    Returns:
        ImportBatch without id or created_at; those are assigned on storage
    """
    total_income = Decimal("0")
    total_expense = Decimal("0")
    classified = 0

    for result in results:
        txn = result.transaction
        if txn.kind == TransactionKind.INCOME:
            total_income += txn.value
        else:
            total_expense += txn.value
        if result.is_classified:
            classified += 1

    return ImportBatch(
        file_name=file_name,
        format=ImportFormat(format),
        total_transactions=len(results),
        classified_count=classified,
        unclassified_count=len(results) - classified,
        total_income=total_income,
        total_expense=total_expense,
        status=status,
    )

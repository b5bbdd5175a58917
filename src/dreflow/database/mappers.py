"""Mapper functions to convert between domain models and SQLAlchemy models.

Enumerations are stored as their string values and rebuilt here, so the rest
of the code only ever sees domain enums.
"""

from decimal import Decimal

from dreflow.domain import entities as domain
from dreflow.database.models import (
    Category as ORMCategory,
    Period as ORMPeriod,
    ManualEntry as ORMManualEntry,
    ImportBatch as ORMImportBatch,
    Transaction as ORMTransaction,
    ClassificationRule as ORMClassificationRule,
)


def _decimal(value) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        name=orm_category.name,
        bucket=domain.DreBucket(orm_category.bucket),
        keywords=tuple(orm_category.keywords or ()),
        position=orm_category.position,
        created_at=orm_category.created_at,
    )


def period_to_domain(orm_period: ORMPeriod) -> domain.Period:
    """Convert SQLAlchemy Period model to domain Period entity."""
    return domain.Period(
        id=orm_period.id,
        name=orm_period.name,
        granularity=domain.PeriodGranularity(orm_period.granularity),
        start_date=orm_period.start_date,
        end_date=orm_period.end_date,
        is_closed=orm_period.is_closed,
        created_at=orm_period.created_at,
    )


def entry_to_domain(orm_entry: ORMManualEntry) -> domain.ManualEntry:
    """Convert SQLAlchemy ManualEntry model to domain ManualEntry entity."""
    return domain.ManualEntry(
        id=orm_entry.id,
        period_id=orm_entry.period_id,
        category_id=orm_entry.category_id,
        description=orm_entry.description,
        value=_decimal(orm_entry.value),
        notes=orm_entry.notes,
        created_at=orm_entry.created_at,
        updated_at=orm_entry.updated_at,
    )


def import_batch_to_domain(orm_batch: ORMImportBatch) -> domain.ImportBatch:
    """Convert SQLAlchemy ImportBatch model to domain ImportBatch entity."""
    return domain.ImportBatch(
        id=orm_batch.id,
        file_name=orm_batch.file_name,
        format=domain.ImportFormat(orm_batch.format),
        total_transactions=orm_batch.total_transactions,
        classified_count=orm_batch.classified_count,
        unclassified_count=orm_batch.unclassified_count,
        total_income=_decimal(orm_batch.total_income),
        total_expense=_decimal(orm_batch.total_expense),
        status=domain.ImportBatchStatus(orm_batch.status),
        created_at=orm_batch.created_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.PersistedTransaction:
    """Convert SQLAlchemy Transaction model to domain PersistedTransaction entity."""
    return domain.PersistedTransaction(
        id=orm_transaction.id,
        kind=domain.TransactionKind(orm_transaction.kind),
        status=domain.TransactionStatus(orm_transaction.status),
        source=domain.TransactionSource(orm_transaction.source),
        description=orm_transaction.description,
        value=_decimal(orm_transaction.value),
        date=orm_transaction.date,
        due_date=orm_transaction.due_date,
        paid_date=orm_transaction.paid_date,
        category_id=orm_transaction.category_id,
        document_number=orm_transaction.document_number,
        notes=orm_transaction.notes,
        import_batch_id=orm_transaction.import_batch_id,
        created_at=orm_transaction.created_at,
    )


def transaction_from_domain(
    txn: domain.PersistedTransaction, import_batch_id=None
) -> ORMTransaction:
    """Build a SQLAlchemy Transaction row from a domain PersistedTransaction."""
    return ORMTransaction(
        kind=txn.kind.value,
        status=txn.status.value,
        source=txn.source.value,
        description=txn.description,
        value=txn.value,
        date=txn.date,
        due_date=txn.due_date,
        paid_date=txn.paid_date,
        category_id=txn.category_id,
        is_classified=txn.category_id is not None,
        document_number=txn.document_number,
        notes=txn.notes,
        import_batch_id=import_batch_id if import_batch_id is not None else txn.import_batch_id,
    )


def rule_to_domain(orm_rule: ORMClassificationRule) -> domain.ClassificationRule:
    """Convert SQLAlchemy ClassificationRule model to domain ClassificationRule entity."""
    return domain.ClassificationRule(
        id=orm_rule.id,
        keywords=tuple(orm_rule.keywords or ()),
        category_id=orm_rule.category_id,
        kind=domain.TransactionKind(orm_rule.kind),
        priority=orm_rule.priority,
        is_active=orm_rule.is_active,
        created_at=orm_rule.created_at,
    )

"""Shared domain error messages and error types."""

from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class UnsupportedFormat(DomainError):
    """The uploaded file is not one of the recognized statement formats."""

    def __init__(self, file_name: str):
        self.file_name = file_name
        super().__init__(
            f"Unsupported statement format for '{file_name}'. "
            "Supported: .csv, .txt, .ofx, .qfx, .xml, .xlsx, .xlsm"
        )


class InvalidStatement(DomainError):
    """The statement document itself could not be read."""


class EmptyStatement(DomainError):
    """A parse produced no transactions."""

    def __init__(self, source_name: Optional[str], skipped: int = 0):
        self.source_name = source_name
        self.skipped = skipped
        name = f"'{source_name}'" if source_name else "statement"
        super().__init__(
            f"No transactions found in {name} ({skipped} row{'s' if skipped != 1 else ''} skipped)"
        )


class ImportCancelled(DomainError):
    """The caller abandoned a long-running parse."""

    def __init__(self, source_name: Optional[str], row_num: int):
        self.source_name = source_name
        self.row_num = row_num
        super().__init__(f"Import of '{source_name or 'statement'}' cancelled at row {row_num}")


class PeriodClosed(DomainError):
    """Manual entries of a closed period cannot change."""

    def __init__(self, period_id: int):
        self.period_id = period_id
        super().__init__(f"Period {period_id} is closed; its entries can no longer be changed")


class AlreadyClosed(DomainError):
    """A period can only be closed once."""

    def __init__(self, period_id: int):
        self.period_id = period_id
        super().__init__(f"Period {period_id} is already closed")


class PartialImportFailure(DomainError):
    """Transaction insertion failed after the batch summary was computed.

    The import unit was rolled back, so no batch record claims success.
    """

    def __init__(self, file_name: str, row_index: Optional[int], cause: Exception):
        self.file_name = file_name
        self.row_index = row_index
        where = f" at transaction {row_index}" if row_index is not None else ""
        super().__init__(
            f"Import of '{file_name}' failed{where}: {cause}. No transactions were saved."
        )


def category_not_found(category_id: int) -> str:
    """Return message for missing category by ID."""
    return f"Category {category_id} not found"


def period_not_found(period_id: int) -> str:
    """Return message for missing period."""
    return f"Period {period_id} not found"


def entry_not_found(entry_id: int) -> str:
    """Return message for missing manual entry."""
    return f"Entry {entry_id} not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def category_delete_blocked(category_id: int, entry_count: int, transaction_count: int) -> str:
    """Return message when a category is still referenced."""
    parts = []
    if entry_count > 0:
        parts.append(f"{entry_count} entr{'ies' if entry_count != 1 else 'y'}")
    if transaction_count > 0:
        parts.append(
            f"{transaction_count} transaction{'s' if transaction_count != 1 else ''}"
        )
    return (
        f"Cannot delete category {category_id}: it has {', '.join(parts)}. "
        "Please reassign or delete them first."
    )


def rule_not_found(rule_id: int) -> str:
    """Return message for missing classification rule."""
    return f"Rule {rule_id} not found"

"""Base class for statement parsers.

Every format parser turns raw file content into canonical
``ParsedTransaction`` records. Subclasses only implement ``iter_rows``;
counting skipped rows, ordering, and the empty-statement check live here so
every format behaves identically.
"""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterator, Optional, Union

from dreflow.domain.entities import ImportFormat, ParsedTransaction, TransactionKind
from dreflow.domain.errors import EmptyStatement, ImportCancelled
from dreflow.utils.amount_parser import parse_amount, split_amount
from dreflow.utils.date_parser import parse_date
from dreflow.utils.text import clean_description

logger = logging.getLogger(__name__)

NO_DESCRIPTION = "Sem descrição"


@dataclass(frozen=True)
class RowError:
    """A row that was skipped, with the reason."""

    row_num: int
    message: str

    def __str__(self) -> str:
        return f"Row {self.row_num}: {self.message}"


@dataclass(frozen=True)
class ParseResult:
    """Outcome of parsing one statement file."""

    format: ImportFormat
    transactions: tuple[ParsedTransaction, ...]
    errors: tuple[RowError, ...] = field(default_factory=tuple)
    source_name: Optional[str] = None

    @property
    def skipped(self) -> int:
        return len(self.errors)


RowOutcome = Union[ParsedTransaction, RowError]


class StatementParser(ABC):
    """Abstract base class for statement parsers."""

    format: ImportFormat

    def parse(
        self,
        content: Union[bytes, str],
        source_name: Optional[str] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> ParseResult:
        """Parse statement content.

        Args:
            content: Raw file content (bytes, or already-decoded text)
            source_name: File name, used in diagnostics
            cancel_event: Optional event; when set, parsing stops

        Returns:
            ParseResult with transactions ordered by date

        Raises:
            EmptyStatement: If no transaction could be parsed
            ImportCancelled: If cancel_event was set during parsing
            InvalidStatement: If the document itself is unreadable
        """
        transactions: list[ParsedTransaction] = []
        errors: list[RowError] = []

        for outcome in self.iter_rows(content, cancel_event=cancel_event, source_name=source_name):
            if isinstance(outcome, RowError):
                logger.warning("%s: skipping %s", source_name or self.format.value, outcome)
                errors.append(outcome)
            else:
                transactions.append(outcome)

        if not transactions:
            raise EmptyStatement(source_name, skipped=len(errors))

        # Stable sort keeps file order within a day
        transactions.sort(key=lambda txn: txn.date)

        logger.info(
            "Parsed %d transactions from %s (%d rows skipped)",
            len(transactions),
            source_name or self.format.value,
            len(errors),
        )
        return ParseResult(
            format=self.format,
            transactions=tuple(transactions),
            errors=tuple(errors),
            source_name=source_name,
        )

    @abstractmethod
    def iter_rows(
        self,
        content: Union[bytes, str],
        cancel_event: Optional[threading.Event] = None,
        source_name: Optional[str] = None,
    ) -> Iterator[RowOutcome]:
        """Yield one ParsedTransaction or RowError per data row."""

    @staticmethod
    def check_cancelled(
        cancel_event: Optional[threading.Event], source_name: Optional[str], row_num: int
    ) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise ImportCancelled(source_name, row_num)

    @staticmethod
    def build_transaction(
        row_num: int,
        date_value,
        description,
        amount,
        raw_line: str,
        document_number: Optional[str] = None,
        debit: bool = False,
    ) -> RowOutcome:
        """Normalize one row, or describe why it cannot be used.

        Args:
            row_num: 1-based row number in the source file
            date_value: Date string or date object
            description: Description text (may be empty)
            amount: Signed amount string or number
            raw_line: Original source text, kept for audit
            document_number: Optional document/check number
            debit: True when a format-specific marker flags a debit

        Returns:
            ParsedTransaction, or RowError when the row is unusable
        """
        if date_value is None or (isinstance(date_value, str) and not date_value.strip()):
            return RowError(row_num, "Missing date")
        if amount is None or (isinstance(amount, str) and not amount.strip()):
            return RowError(row_num, "Missing amount")

        try:
            txn_date = parse_date(date_value)
        except ValueError as e:
            return RowError(row_num, str(e))

        try:
            if isinstance(amount, Decimal):
                signed = amount
            elif isinstance(amount, (int, float)):
                signed = Decimal(str(amount))
            else:
                signed = parse_amount(amount)
        except ValueError as e:
            return RowError(row_num, str(e))

        if signed == 0:
            return RowError(row_num, "Zero amount")

        value, kind = split_amount(signed)
        if debit:
            kind = TransactionKind.EXPENSE

        document_number = clean_description(document_number) or None

        return ParsedTransaction(
            date=txn_date,
            description=clean_description(description) or NO_DESCRIPTION,
            value=value,
            kind=kind,
            document_number=document_number,
            raw_line=raw_line,
        )


def decode_content(content: Union[bytes, str]) -> str:
    """Decode text statement content.

    Bank exports are UTF-8 (often with a BOM) or Windows-1252.
    """
    if isinstance(content, str):
        return content.lstrip("\ufeff")
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        return content.decode("cp1252", errors="replace")

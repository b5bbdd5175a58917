"""Delimited text (CSV) statement parser."""

import csv
import io
import re
import threading
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterator, Optional, Union

from dreflow.domain.entities import ImportFormat
from dreflow.parsers.base import RowError, RowOutcome, StatementParser, decode_content
from dreflow.utils.amount_parser import parse_amount
from dreflow.utils.date_parser import parse_date
from dreflow.utils.text import normalize_text

CANDIDATE_DELIMITERS = (";", "\t", ",", "|")
HEADER_SCAN_LINES = 20

DATE_HEADER_RE = re.compile(r"^(data|date|dt|vencimento)")
VALUE_HEADER_RE = re.compile(r"^(valor|value|amount|vlr)")
DESCRIPTION_HEADER_RE = re.compile(r"^(descri|historico|hist|memo|detalhe|observa|lancamento)")
DEBIT_HEADER_RE = re.compile(r"^(debito|debit|saida)")
CREDIT_HEADER_RE = re.compile(r"^(credito|credit|entrada)")
TYPE_HEADER_RE = re.compile(r"^(tipo|type|d c|dc|natureza)$")
DOCUMENT_HEADER_RE = re.compile(r"^(documento|doc|numero|num doc|n doc)")

DEBIT_TYPE_VALUES = {"d", "deb", "debito", "debit", "saida", "dr"}


@dataclass
class ColumnLayout:
    """Column positions of a delimited statement."""

    header_index: Optional[int]
    date_col: int = 0
    description_cols: list[int] = field(default_factory=lambda: [1])
    value_col: Optional[int] = 2
    debit_col: Optional[int] = None
    credit_col: Optional[int] = None
    type_col: Optional[int] = None
    document_col: Optional[int] = None

    @property
    def max_col(self) -> int:
        cols = [self.date_col, *self.description_cols]
        cols.extend(
            c for c in (self.value_col, self.debit_col, self.credit_col) if c is not None
        )
        return max(cols)


def detect_delimiter(lines: list[str]) -> str:
    """Pick the delimiter that splits the most sample lines consistently.

    Only consistency counts. Ties go to the earlier candidate, so ";" wins
    over "," in Brazilian files whose descriptions contain commas.
    """
    best = CANDIDATE_DELIMITERS[0]
    best_frequency = 0
    for candidate in CANDIDATE_DELIMITERS:
        counts = Counter(
            len(row) - 1
            for row in csv.reader(lines, delimiter=candidate)
            if row
        )
        if not counts:
            continue
        field_count, frequency = counts.most_common(1)[0]
        if field_count == 0:
            continue
        if frequency > best_frequency:
            best, best_frequency = candidate, frequency
    return best


def detect_columns(rows: list[list[str]]) -> Optional[ColumnLayout]:
    """Find the header row and map its columns.

    Some banks (e.g. Inter) put account information lines above the real
    header, so the first rows are scanned rather than assuming row 0.
    """
    for index, row in enumerate(rows[:HEADER_SCAN_LINES]):
        cols = [normalize_text(c) for c in row]

        date_col = _find(cols, DATE_HEADER_RE)
        if date_col is None:
            continue
        value_col = _find(cols, VALUE_HEADER_RE, exclude={date_col})
        debit_col = _find(cols, DEBIT_HEADER_RE, exclude={date_col})
        credit_col = _find(cols, CREDIT_HEADER_RE, exclude={date_col})
        if value_col is None and (debit_col is None or credit_col is None):
            continue

        taken = {date_col, value_col, debit_col, credit_col}
        description_cols = [
            idx
            for idx, c in enumerate(cols)
            if idx not in taken and DESCRIPTION_HEADER_RE.match(c)
        ]
        type_col = _find(cols, TYPE_HEADER_RE, exclude=taken)
        document_col = _find(cols, DOCUMENT_HEADER_RE, exclude=taken | {type_col})

        if not description_cols:
            fallback = next(
                (idx for idx in range(len(cols)) if idx not in taken | {type_col, document_col}),
                None,
            )
            description_cols = [fallback] if fallback is not None else []

        return ColumnLayout(
            header_index=index,
            date_col=date_col,
            description_cols=description_cols,
            value_col=value_col,
            debit_col=debit_col if value_col is None else None,
            credit_col=credit_col if value_col is None else None,
            type_col=type_col,
            document_col=document_col,
        )
    return None


def _find(cols: list[str], pattern: re.Pattern, exclude: Optional[set] = None) -> Optional[int]:
    exclude = exclude or set()
    for idx, c in enumerate(cols):
        if idx not in exclude and pattern.match(c):
            return idx
    return None


class DelimitedParser(StatementParser):
    """Parser for CSV-like exports (any of ; , tab | delimiters)."""

    format = ImportFormat.CSV

    def iter_rows(
        self,
        content: Union[bytes, str],
        cancel_event: Optional[threading.Event] = None,
        source_name: Optional[str] = None,
    ) -> Iterator[RowOutcome]:
        text = decode_content(content)
        lines = text.splitlines()
        sample = [line for line in lines[:HEADER_SCAN_LINES * 2] if line.strip()]
        if not sample:
            return

        delimiter = detect_delimiter(sample)
        rows = list(csv.reader(lines, delimiter=delimiter))

        layout = detect_columns(rows)
        if layout is not None:
            start = layout.header_index + 1
        else:
            layout = ColumnLayout(header_index=None)
            start = 0 if self._first_row_is_data(rows) else 1

        for index in range(start, len(rows)):
            row_num = index + 1
            self.check_cancelled(cancel_event, source_name, row_num)

            row = [c.strip() for c in rows[index]]
            if not any(row):
                continue

            raw_line = lines[index] if index < len(lines) else delimiter.join(row)
            if len(row) <= layout.max_col:
                yield RowError(row_num, f"Expected at least {layout.max_col + 1} columns, got {len(row)}")
                continue

            yield self._row_to_transaction(row_num, row, layout, raw_line)

    def _row_to_transaction(
        self, row_num: int, row: list[str], layout: ColumnLayout, raw_line: str
    ) -> RowOutcome:
        description = " - ".join(row[col] for col in layout.description_cols if row[col])

        debit = False
        if layout.value_col is not None:
            amount = row[layout.value_col]
        else:
            amount, debit = self._pick_debit_credit(
                row[layout.debit_col], row[layout.credit_col]
            )

        if layout.type_col is not None and layout.type_col < len(row):
            debit = debit or normalize_text(row[layout.type_col]) in DEBIT_TYPE_VALUES

        document_number = None
        if layout.document_col is not None and layout.document_col < len(row):
            document_number = row[layout.document_col]

        return self.build_transaction(
            row_num,
            row[layout.date_col],
            description,
            amount,
            raw_line=raw_line,
            document_number=document_number,
            debit=debit,
        )

    @staticmethod
    def _pick_debit_credit(debit_str: str, credit_str: str) -> tuple[str, bool]:
        """Choose the filled side of a debit/credit column pair."""
        if debit_str:
            try:
                if parse_amount(debit_str) != 0:
                    return debit_str, True
            except ValueError:
                return debit_str, True
        return credit_str, False

    @staticmethod
    def _first_row_is_data(rows: list[list[str]]) -> bool:
        for row in rows:
            if not any(c.strip() for c in row):
                continue
            try:
                parse_date(row[0].strip())
            except ValueError:
                return False
            return True
        return False

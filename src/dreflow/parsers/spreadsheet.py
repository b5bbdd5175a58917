"""XLSX statement parser.

Workbooks are opened in openpyxl's read-only mode and rows are pulled one at
a time from the first worksheet, so memory stays bounded by the few header
rows buffered for layout detection. Three layouts are recognized:

- sicoob: a title row, a header row, then entries that may continue on
  following rows with an empty date cell
- stone: a wide header with movement type, value and balance columns
- generic: any sheet with recognizable date and value headers
"""

import io
import json
import threading
import zipfile
from datetime import date, datetime
from itertools import chain, islice
from typing import Iterable, Iterator, Optional, Union

from openpyxl import load_workbook
from openpyxl.utils.datetime import from_excel
from openpyxl.utils.exceptions import InvalidFileException

from dreflow.domain.entities import ImportFormat
from dreflow.domain.errors import InvalidStatement
from dreflow.parsers.base import RowError, RowOutcome, StatementParser
from dreflow.parsers.delimited import DEBIT_TYPE_VALUES, HEADER_SCAN_LINES, detect_columns
from dreflow.utils.amount_parser import parse_amount
from dreflow.utils.text import normalize_text

SICOOB = "sicoob"
STONE = "stone"
GENERIC = "generic"

SICOOB_TITLE = "extrato conta corrente"
SICOOB_BALANCE_ROW = "SALDO DO DIA"
SICOOB_FIRST_DATA_ROW = 3

STONE_IGNORED_COUNTERPARTS = ("desconhecido", "stone principal")


def _text(cell) -> str:
    if cell is None:
        return ""
    return str(cell).replace("\xa0", " ").strip()


def detect_bank_layout(head: list[tuple]) -> str:
    """Detect which bank produced the sheet from its first rows."""
    if len(head) < 2:
        return GENERIC

    first_row = head[0] or ()
    first_cell = normalize_text(_text(first_row[0])) if first_row else ""
    if first_cell == SICOOB_TITLE:
        second_row = [normalize_text(_text(c)) for c in head[1] or ()]
        if "data" in second_row and "valor" in second_row:
            return SICOOB

    header = [normalize_text(_text(c)) for c in first_row]
    if (
        any("movimenta" in h for h in header)
        and "tipo" in header
        and any("saldo antes" in h for h in header)
    ):
        return STONE

    return GENERIC


def _cell_date(cell):
    """Spreadsheet dates arrive as datetimes, serial numbers or text."""
    if isinstance(cell, (datetime, date)):
        return cell
    if isinstance(cell, (int, float)) and not isinstance(cell, bool):
        try:
            return from_excel(cell)
        except (ValueError, OverflowError):
            return str(cell)
    return _text(cell)


class SpreadsheetParser(StatementParser):
    """Parser for XLSX workbooks exported by banks."""

    format = ImportFormat.XLSX

    def iter_rows(
        self,
        content: Union[bytes, str],
        cancel_event: Optional[threading.Event] = None,
        source_name: Optional[str] = None,
    ) -> Iterator[RowOutcome]:
        if isinstance(content, str):
            raise InvalidStatement(
                f"Spreadsheet '{source_name or 'statement'}' must be provided as binary content"
            )

        try:
            workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
        except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as e:
            raise InvalidStatement(
                f"Could not open spreadsheet '{source_name or 'statement'}': {e}"
            ) from e

        try:
            if not workbook.worksheets:
                return
            rows = workbook.worksheets[0].iter_rows(values_only=True)
            head = list(islice(rows, HEADER_SCAN_LINES))
            if not head:
                return
            layout = detect_bank_layout(head)
            stream = enumerate(chain(head, rows), start=1)

            if layout == SICOOB:
                outcomes = self._iter_sicoob(stream, cancel_event, source_name)
            elif layout == STONE:
                outcomes = self._iter_stone(stream, cancel_event, source_name)
            else:
                outcomes = self._iter_generic(head, stream, cancel_event, source_name)
            yield from outcomes
        finally:
            workbook.close()

    def _iter_sicoob(
        self,
        stream: Iterable[tuple[int, tuple]],
        cancel_event: Optional[threading.Event],
        source_name: Optional[str],
    ) -> Iterator[RowOutcome]:
        entry: Optional[dict] = None

        for row_num, row in stream:
            self.check_cancelled(cancel_event, source_name, row_num)
            if row_num < SICOOB_FIRST_DATA_ROW:
                continue

            cells = list(row or ()) + [None] * 4
            date_cell, doc, history, value = cells[0], _text(cells[1]), _text(cells[2]), cells[3]

            if history == SICOOB_BALANCE_ROW:
                if entry is not None:
                    yield self._flush_sicoob(entry)
                    entry = None
                continue

            if _text(date_cell):
                if entry is not None:
                    yield self._flush_sicoob(entry)
                entry = {
                    "row_num": row_num,
                    "date": _cell_date(date_cell),
                    "doc": doc,
                    "history": history,
                    "value": value,
                    "continuation": [],
                }
            elif entry is not None and history:
                entry["continuation"].append(history)

        if entry is not None:
            yield self._flush_sicoob(entry)

    def _flush_sicoob(self, entry: dict) -> RowOutcome:
        description = " | ".join(part for part in [entry["history"], *entry["continuation"]] if part)
        value = entry["value"]
        return self.build_transaction(
            entry["row_num"],
            entry["date"],
            description,
            value if isinstance(value, (int, float)) else _text(value),
            raw_line=json.dumps(entry, default=str, ensure_ascii=False),
            document_number=entry["doc"] or None,
        )

    def _iter_stone(
        self,
        stream: Iterable[tuple[int, tuple]],
        cancel_event: Optional[threading.Event],
        source_name: Optional[str],
    ) -> Iterator[RowOutcome]:
        headers: list[str] = []
        index: dict[str, int] = {}

        for row_num, row in stream:
            self.check_cancelled(cancel_event, source_name, row_num)
            cells = list(row or ())

            if row_num == 1:
                headers = [normalize_text(_text(c)) for c in cells]
                for position, name in enumerate(headers):
                    index.setdefault(name, position)
                continue

            def cell(name: str):
                position = index.get(name)
                if position is None or position >= len(cells):
                    return None
                return cells[position]

            if not any(_text(c) for c in cells):
                continue

            raw_value = cell("valor")
            kind_text = _text(cell("tipo"))
            counterpart = ""
            try:
                signed = (
                    raw_value
                    if isinstance(raw_value, (int, float))
                    else parse_amount(_text(raw_value))
                )
                counterpart = _text(cell("destino") if signed < 0 else cell("origem"))
            except ValueError:
                pass

            useful = counterpart and not any(
                ignored in counterpart.lower() for ignored in STONE_IGNORED_COUNTERPARTS
            )
            description = f"{kind_text} - {counterpart}" if useful else kind_text

            yield self.build_transaction(
                row_num,
                _cell_date(cell("data")),
                description,
                raw_value if isinstance(raw_value, (int, float)) else _text(raw_value),
                raw_line=json.dumps(
                    dict(zip(headers, cells)), default=str, ensure_ascii=False
                ),
            )

    def _iter_generic(
        self,
        head: list[tuple],
        stream: Iterable[tuple[int, tuple]],
        cancel_event: Optional[threading.Event],
        source_name: Optional[str],
    ) -> Iterator[RowOutcome]:
        layout = detect_columns([[_text(c) for c in (row or ())] for row in head])
        if layout is None:
            raise InvalidStatement(
                f"Could not identify date and value columns in '{source_name or 'spreadsheet'}'. "
                "Check that the headers contain 'Data' and 'Valor'."
            )

        for row_num, row in stream:
            self.check_cancelled(cancel_event, source_name, row_num)
            if row_num <= layout.header_index + 1:
                continue

            cells = list(row or ())
            if not any(_text(c) for c in cells):
                continue
            if len(cells) <= layout.max_col:
                yield RowError(row_num, f"Expected at least {layout.max_col + 1} columns, got {len(cells)}")
                continue

            description = " - ".join(
                _text(cells[col]) for col in layout.description_cols if _text(cells[col])
            )

            debit = False
            if layout.value_col is not None:
                amount = cells[layout.value_col]
            elif _text(cells[layout.debit_col]) and self._nonzero(cells[layout.debit_col]):
                amount, debit = cells[layout.debit_col], True
            else:
                amount = cells[layout.credit_col]
            if isinstance(amount, (int, float)) and debit:
                amount = -abs(amount)

            if layout.type_col is not None and layout.type_col < len(cells):
                debit = debit or normalize_text(_text(cells[layout.type_col])) in DEBIT_TYPE_VALUES

            document_number = None
            if layout.document_col is not None and layout.document_col < len(cells):
                document_number = _text(cells[layout.document_col])

            yield self.build_transaction(
                row_num,
                _cell_date(cells[layout.date_col]),
                description,
                amount if isinstance(amount, (int, float)) else _text(amount),
                raw_line=json.dumps(cells, default=str, ensure_ascii=False),
                document_number=document_number,
                debit=debit,
            )

    @staticmethod
    def _nonzero(cell) -> bool:
        if isinstance(cell, (int, float)):
            return cell != 0
        try:
            return parse_amount(_text(cell)) != 0
        except ValueError:
            return True

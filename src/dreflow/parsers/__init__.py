"""Statement parsers, one per supported file format."""

import threading
from typing import Optional, Union

from dreflow.domain.entities import ImportFormat
from dreflow.parsers.base import ParseResult, RowError, StatementParser
from dreflow.parsers.delimited import DelimitedParser
from dreflow.parsers.detector import detect_format
from dreflow.parsers.markup import XMLParser
from dreflow.parsers.ofx import OFXParser
from dreflow.parsers.spreadsheet import SpreadsheetParser

_PARSERS: dict[ImportFormat, type[StatementParser]] = {
    ImportFormat.CSV: DelimitedParser,
    ImportFormat.OFX: OFXParser,
    ImportFormat.XML: XMLParser,
    ImportFormat.XLSX: SpreadsheetParser,
}


def get_parser(fmt: ImportFormat) -> StatementParser:
    """Get a parser instance for a format."""
    return _PARSERS[ImportFormat(fmt)]()


def get_available_formats() -> list[str]:
    """Get list of supported format names."""
    return [fmt.value for fmt in _PARSERS]


def parse_statement(
    file_name: str,
    content: Union[bytes, str],
    cancel_event: Optional[threading.Event] = None,
) -> ParseResult:
    """Detect the format of an uploaded file and parse it.

    Raises:
        UnsupportedFormat: If the format is not recognized
        EmptyStatement: If no transaction could be parsed
    """
    fmt = detect_format(file_name, content)
    return get_parser(fmt).parse(content, source_name=file_name, cancel_event=cancel_event)


__all__ = [
    "ParseResult",
    "RowError",
    "StatementParser",
    "DelimitedParser",
    "OFXParser",
    "XMLParser",
    "SpreadsheetParser",
    "detect_format",
    "get_parser",
    "get_available_formats",
    "parse_statement",
]

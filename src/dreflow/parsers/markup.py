"""Generic XML statement parser."""

import threading
import xml.etree.ElementTree as ET
from typing import Iterator, Optional, Union

from dreflow.domain.entities import ImportFormat
from dreflow.domain.errors import InvalidStatement
from dreflow.parsers.base import RowOutcome, StatementParser, decode_content
from dreflow.utils.text import normalize_text

ROW_TAGS = {"lancamento", "transaction", "movimento", "entry"}

DATE_FIELDS = ("data", "date", "dtmovimento", "datalancamento")
DESCRIPTION_FIELDS = ("descricao", "description", "historico", "memo")
VALUE_FIELDS = ("valor", "value", "amount")
DOCUMENT_FIELDS = ("documento", "docnumber")
TYPE_FIELDS = ("tipo", "type")

DEBIT_TYPE_VALUES = {"d", "deb", "debito", "debit", "saida"}


def _local_name(tag: str) -> str:
    """Strip any namespace and lowercase an element tag."""
    if "}" in tag:
        tag = tag.rsplit("}", 1)[1]
    return tag.lower()


def _field(element: ET.Element, names: tuple[str, ...]) -> str:
    """Read the first matching child element or attribute."""
    attributes = {key.lower(): value for key, value in element.attrib.items()}
    children = {}
    for child in element:
        children.setdefault(_local_name(child.tag), (child.text or "").strip())

    for name in names:
        if children.get(name):
            return children[name]
        if attributes.get(name):
            return attributes[name].strip()
    return ""


class XMLParser(StatementParser):
    """Parser for bank XML exports with one element per movement."""

    format = ImportFormat.XML

    def iter_rows(
        self,
        content: Union[bytes, str],
        cancel_event: Optional[threading.Event] = None,
        source_name: Optional[str] = None,
    ) -> Iterator[RowOutcome]:
        if isinstance(content, str):
            content = decode_content(content)
        try:
            root = ET.fromstring(content)
        except ET.ParseError as e:
            raise InvalidStatement(f"Malformed XML in '{source_name or 'statement'}': {e}") from e

        rows = (el for el in root.iter() if _local_name(el.tag) in ROW_TAGS)
        for row_num, element in enumerate(rows, start=1):
            self.check_cancelled(cancel_event, source_name, row_num)

            kind_marker = normalize_text(_field(element, TYPE_FIELDS))

            yield self.build_transaction(
                row_num,
                _field(element, DATE_FIELDS),
                _field(element, DESCRIPTION_FIELDS),
                _field(element, VALUE_FIELDS),
                raw_line=ET.tostring(element, encoding="unicode").strip(),
                document_number=_field(element, DOCUMENT_FIELDS) or None,
                debit=kind_marker in DEBIT_TYPE_VALUES,
            )

"""OFX/QFX (Quicken-style) statement parser.

OFX 1.x files are SGML: leaf tags are usually not closed, so the blocks are
read with regular expressions instead of an XML parser. OFX 2.x (XML) files
go through the same path.
"""

import re
import threading
from typing import Iterator, Optional, Union

from dreflow.domain.entities import ImportFormat
from dreflow.parsers.base import RowOutcome, StatementParser, decode_content

_STMTTRN_RE = re.compile(
    r"<STMTTRN>(.*?)(?:</STMTTRN>|(?=<STMTTRN>)|(?=</BANKTRANLIST>)|\Z)",
    re.IGNORECASE | re.DOTALL,
)

DEBIT_TRANSACTION_TYPES = {"DEBIT", "CHECK", "FEE", "SRVCHG", "DIRECTDEBIT", "PAYMENT"}


def extract_tag(block: str, tag: str) -> str:
    """Return the text of the first <tag> in a block, or ''."""
    match = re.search(rf"<{tag}>([^<\r\n]+)", block, re.IGNORECASE)
    return match.group(1).strip() if match else ""


class OFXParser(StatementParser):
    """Parser for OFX and QFX exports."""

    format = ImportFormat.OFX

    def iter_rows(
        self,
        content: Union[bytes, str],
        cancel_event: Optional[threading.Event] = None,
        source_name: Optional[str] = None,
    ) -> Iterator[RowOutcome]:
        text = decode_content(content)

        for row_num, match in enumerate(_STMTTRN_RE.finditer(text), start=1):
            self.check_cancelled(cancel_event, source_name, row_num)
            block = match.group(1)

            trn_type = extract_tag(block, "TRNTYPE").upper()
            memo = extract_tag(block, "MEMO") or extract_tag(block, "NAME") or trn_type
            document_number = extract_tag(block, "CHECKNUM") or extract_tag(block, "FITID")

            yield self.build_transaction(
                row_num,
                extract_tag(block, "DTPOSTED"),
                memo,
                extract_tag(block, "TRNAMT"),
                raw_line=block.strip(),
                document_number=document_number,
                debit=trn_type in DEBIT_TRANSACTION_TYPES,
            )

"""Statement format detection."""

from pathlib import PurePath
from typing import Optional, Union

from dreflow.domain.entities import ImportFormat
from dreflow.domain.errors import UnsupportedFormat

EXTENSION_FORMATS = {
    ".csv": ImportFormat.CSV,
    ".txt": ImportFormat.CSV,
    ".ofx": ImportFormat.OFX,
    ".qfx": ImportFormat.OFX,
    ".xml": ImportFormat.XML,
    ".xlsx": ImportFormat.XLSX,
    ".xlsm": ImportFormat.XLSX,
}

SNIFF_BYTES = 4096


def _sniff_text(content: Union[bytes, str, None]) -> str:
    if content is None:
        return ""
    if isinstance(content, bytes):
        return content[:SNIFF_BYTES].decode("utf-8", errors="ignore")
    return content[:SNIFF_BYTES]


def _looks_like_ofx(sample: str) -> bool:
    upper = sample.upper()
    return "OFXHEADER" in upper or "<OFX>" in upper


def detect_format(file_name: str, content: Optional[Union[bytes, str]] = None) -> ImportFormat:
    """Map a file name (and optionally its content) to a statement format.

    Args:
        file_name: Uploaded file name
        content: Optional raw content used to sniff text formats

    Returns:
        Detected ImportFormat

    Raises:
        UnsupportedFormat: If the file is not a recognized statement format
    """
    extension = PurePath(file_name or "").suffix.lower()
    fmt = EXTENSION_FORMATS.get(extension)
    if fmt == ImportFormat.XLSX:
        return fmt

    sample = _sniff_text(content).lstrip("\ufeff").strip()
    if sample and _looks_like_ofx(sample):
        return ImportFormat.OFX
    if fmt is not None:
        return fmt
    if sample.startswith("<?xml") or sample.startswith("<"):
        return ImportFormat.XML

    raise UnsupportedFormat(file_name)

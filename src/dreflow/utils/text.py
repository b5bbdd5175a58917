"""Text normalization shared by parsers and the classifier."""

import re
import unicodedata

_WHITESPACE_RE = re.compile(r"\s+")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")


def clean_description(text) -> str:
    """Trim a description and collapse inner whitespace."""
    if text is None:
        return ""
    return _WHITESPACE_RE.sub(" ", str(text).replace("\xa0", " ")).strip()


def normalize_text(text) -> str:
    """Lowercase, strip accents and punctuation, collapse whitespace.

    "Energia Elétrica - CPFL" becomes "energia eletrica cpfl".
    """
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFD", str(text).lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    stripped = _NON_ALNUM_RE.sub(" ", stripped)
    return _WHITESPACE_RE.sub(" ", stripped).strip()

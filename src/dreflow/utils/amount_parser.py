"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

from dreflow.domain.entities import TransactionKind

_MARKER_RE = re.compile(r"(?<=[\d\s])([DC])$", re.IGNORECASE)
_NUMBER_CHARS_RE = re.compile(r"[^\d,.]")
_CURRENCY_RE = re.compile(r"(?:R|US)?\$|[€£]", re.IGNORECASE)


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a signed Decimal.

    Handles Brazilian and US styles:
    - "1.234,56" and "1234,56"
    - "1,234.56" and "1234.56"
    - "R$ -450,00", "-$123.45", "€ 10"
    - "(123.45)", "R$ (450,00)" (negative in parentheses)
    - "450,00-" (trailing minus)
    - "-\\xa0486,60 D" / "70,00 C" (debit/credit suffix, D is negative)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount, negative for debits

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if amount_str is None or not str(amount_str).strip():
        raise ValueError("Empty amount string")

    text = str(amount_str).replace("\xa0", " ").strip()

    # Debit/credit suffix is authoritative when present
    marker = None
    match = _MARKER_RE.search(text)
    if match:
        marker = match.group(1).upper()
        text = text[: match.start()].strip()

    # Parentheses may follow the currency symbol: "R$ (450,00)"
    text = _CURRENCY_RE.sub("", text).strip()

    is_negative = False
    if text.startswith("(") and text.endswith(")"):
        is_negative = True
        text = text[1:-1].strip()

    if "-" in text:
        first_digit = re.search(r"\d", text)
        minus_at = text.find("-")
        if first_digit is None or minus_at < first_digit.start() or text.endswith("-"):
            is_negative = True

    cleaned = _NUMBER_CHARS_RE.sub("", text)
    if not re.search(r"\d", cleaned):
        raise ValueError(f"Could not parse amount '{amount_str}'")

    cleaned = _normalize_separators(cleaned)

    try:
        amount = Decimal(cleaned)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}")

    if marker == "D":
        is_negative = True
    elif marker == "C":
        is_negative = False

    return -amount if is_negative else amount


def _normalize_separators(cleaned: str) -> str:
    """Reduce a digits-and-separators string to Decimal syntax."""
    has_comma = "," in cleaned
    has_dot = "." in cleaned

    if has_comma and has_dot:
        # Whichever separator comes last is the decimal one
        if cleaned.rfind(",") > cleaned.rfind("."):
            return cleaned.replace(".", "").replace(",", ".")
        return cleaned.replace(",", "")

    if has_comma:
        if cleaned.count(",") > 1:
            return cleaned.replace(",", "")
        return cleaned.replace(",", ".")

    if has_dot and cleaned.count(".") > 1:
        return cleaned.replace(".", "")

    return cleaned


def split_amount(amount: Decimal) -> tuple[Decimal, TransactionKind]:
    """Split a signed amount into its magnitude and transaction kind."""
    if amount < 0:
        return -amount, TransactionKind.EXPENSE
    return amount, TransactionKind.INCOME

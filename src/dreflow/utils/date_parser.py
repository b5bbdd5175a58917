"""Date parsing utilities."""

import re
from datetime import date, datetime, timedelta

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from dreflow.domain.entities import PeriodGranularity

# A date may only be followed by a time of day (and, for ISO, a UTC offset)
_TIME = r"(?:[\sT]+\d{1,2}:\d{2}(?::\d{2}(?:\.\d+)?)?)?"
_DAY_FIRST_RE = re.compile(r"^(\d{1,2})[/.-](\d{1,2})[/.-](\d{2,4})" + _TIME + r"$")
_ISO_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})" + _TIME + r"(?:Z|[+-]\d{2}:?\d{2})?$")
_COMPACT_RE = re.compile(r"^(\d{4})(\d{2})(\d{2})(?:\d{0,6}(?:\.\d+)?)?(?:\[.*\])?$")


def parse_date(value) -> date:
    """Parse a statement date into a calendar date.

    Supports the shapes banks export, always discarding any time of day:
    - Day-first: "01/03/2026", "1-3-26", "01/03/2026 14:05"
    - ISO: "2026-03-01", "2026-03-01T10:00:00"
    - Compact/OFX: "20260301", "20260301120000[-3:BRT]"
    - datetime and date objects
    - Anything else python-dateutil understands, read day-first

    Args:
        value: Date string or date/datetime object

    Returns:
        Date object

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value is None or not str(value).strip():
        raise ValueError("Empty date string")

    date_str = str(value).strip()

    try:
        match = _DAY_FIRST_RE.match(date_str)
        if match:
            day, month, year = (int(part) for part in match.groups())
            if year < 100:
                year += 2000
            return date(year, month, day)

        match = _ISO_RE.match(date_str)
        if match:
            year, month, day = (int(part) for part in match.groups())
            return date(year, month, day)

        match = _COMPACT_RE.match(date_str)
        if match:
            year, month, day = (int(part) for part in match.groups())
            return date(year, month, day)
    except ValueError as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")

    try:
        return date_parser.parse(date_str, dayfirst=True).date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def period_bounds(granularity: PeriodGranularity, anchor: date) -> tuple[date, date]:
    """Get start and end dates of the period containing an anchor date.

    Args:
        granularity: monthly, quarterly or annual
        anchor: Any date inside the wanted period

    Returns:
        Tuple of (start_date, end_date), end inclusive
    """
    granularity = PeriodGranularity(granularity)

    if granularity == PeriodGranularity.MONTHLY:
        start_date = anchor.replace(day=1)
        end_date = start_date + relativedelta(months=1) - timedelta(days=1)
    elif granularity == PeriodGranularity.QUARTERLY:
        first_month = 3 * ((anchor.month - 1) // 3) + 1
        start_date = anchor.replace(month=first_month, day=1)
        end_date = start_date + relativedelta(months=3) - timedelta(days=1)
    else:
        start_date = anchor.replace(month=1, day=1)
        end_date = anchor.replace(month=12, day=31)

    return (start_date, end_date)


def default_period_name(granularity: PeriodGranularity, start_date: date) -> str:
    """Build a display name such as '2026-03', '2026-Q1' or '2026'."""
    granularity = PeriodGranularity(granularity)
    if granularity == PeriodGranularity.MONTHLY:
        return start_date.strftime("%Y-%m")
    if granularity == PeriodGranularity.QUARTERLY:
        return f"{start_date.year}-Q{(start_date.month - 1) // 3 + 1}"
    return str(start_date.year)

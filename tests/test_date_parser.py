"""Tests for date parsing utilities."""

from datetime import date, datetime

import pytest

from dreflow.domain.entities import PeriodGranularity
from dreflow.utils.date_parser import default_period_name, parse_date, period_bounds


class TestParseDate:
    """Tests for parse_date."""

    @pytest.mark.parametrize(
        "text",
        [
            "01/03/2026",
            "1/3/2026",
            "01-03-2026",
            "01.03.2026",
            "1-3-26",
            "01/03/2026 14:05",
            "01/03/2026 14:05:33",
        ],
    )
    def test_day_first_formats(self, text):
        assert parse_date(text) == date(2026, 3, 1)

    @pytest.mark.parametrize(
        "text",
        ["2026-03-01", "2026-03-01T10:00:00", "2026-3-1", "2026-03-01T10:00:00Z", "2026-03-01 10:00:00-03:00"],
    )
    def test_iso_formats(self, text):
        assert parse_date(text) == date(2026, 3, 1)

    @pytest.mark.parametrize(
        "text", ["20260301", "20260301120000", "20260301120000[-3:BRT]", "20260301120000.000"]
    )
    def test_compact_ofx_formats(self, text):
        assert parse_date(text) == date(2026, 3, 1)

    def test_date_and_datetime_objects(self):
        assert parse_date(date(2026, 3, 1)) == date(2026, 3, 1)
        assert parse_date(datetime(2026, 3, 1, 23, 59)) == date(2026, 3, 1)

    def test_dateutil_fallback(self):
        assert parse_date("March 5, 2026") == date(2026, 3, 5)

    def test_impossible_date_raises(self):
        with pytest.raises(ValueError, match="Could not parse date"):
            parse_date("31/02/2026")

    def test_empty_raises(self):
        with pytest.raises(ValueError, match="Empty date"):
            parse_date("  ")

    def test_garbage_raises(self):
        with pytest.raises(ValueError, match="Could not parse date"):
            parse_date("not a date")

    @pytest.mark.parametrize("text", ["01/03/2026;Pgto fornecedor", "2026-03-01;Pgto fornecedor"])
    def test_trailing_text_is_not_a_date(self, text):
        with pytest.raises(ValueError, match="Could not parse date"):
            parse_date(text)


class TestPeriodBounds:
    """Tests for period_bounds and default_period_name."""

    def test_monthly(self):
        assert period_bounds(PeriodGranularity.MONTHLY, date(2026, 2, 14)) == (
            date(2026, 2, 1),
            date(2026, 2, 28),
        )

    def test_monthly_leap_year(self):
        assert period_bounds(PeriodGranularity.MONTHLY, date(2028, 2, 10))[1] == date(2028, 2, 29)

    def test_quarterly(self):
        assert period_bounds(PeriodGranularity.QUARTERLY, date(2026, 5, 20)) == (
            date(2026, 4, 1),
            date(2026, 6, 30),
        )

    def test_annual(self):
        assert period_bounds("annual", date(2026, 7, 4)) == (date(2026, 1, 1), date(2026, 12, 31))

    @pytest.mark.parametrize(
        "granularity,expected",
        [
            (PeriodGranularity.MONTHLY, "2026-03"),
            (PeriodGranularity.QUARTERLY, "2026-Q1"),
            (PeriodGranularity.ANNUAL, "2026"),
        ],
    )
    def test_default_names(self, granularity, expected):
        start, _ = period_bounds(granularity, date(2026, 3, 10))
        assert default_period_name(granularity, start) == expected

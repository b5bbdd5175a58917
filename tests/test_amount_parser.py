"""Tests for amount parsing utilities."""

from decimal import Decimal

import pytest

from dreflow.domain.entities import TransactionKind
from dreflow.utils.amount_parser import parse_amount, split_amount


class TestParseAmount:
    """Tests for parse_amount."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("1.234,56", Decimal("1234.56")),
            ("1234,56", Decimal("1234.56")),
            ("1,234.56", Decimal("1234.56")),
            ("1234.56", Decimal("1234.56")),
            ("2.000.000", Decimal("2000000")),
            ("1,5", Decimal("1.5")),
            ("R$ 1.500,00", Decimal("1500.00")),
            ("€ 10", Decimal("10")),
        ],
    )
    def test_separator_styles(self, text, expected):
        assert parse_amount(text) == expected

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("-450,00", Decimal("-450.00")),
            ("R$ -450,00", Decimal("-450.00")),
            ("-$123.45", Decimal("-123.45")),
            ("(123.45)", Decimal("-123.45")),
            ("R$ (450,00)", Decimal("-450.00")),
            ("$ (12.00)", Decimal("-12.00")),
            ("(R$ 1.234,56)", Decimal("-1234.56")),
            ("450,00-", Decimal("-450.00")),
        ],
    )
    def test_negative_notations(self, text, expected):
        assert parse_amount(text) == expected

    def test_debit_credit_suffix(self):
        """A trailing D or C decides the sign."""
        assert parse_amount("-\xa0486,60 D") == Decimal("-486.60")
        assert parse_amount("486,60 D") == Decimal("-486.60")
        assert parse_amount("70,00 C") == Decimal("70.00")
        assert parse_amount("1.500,00C") == Decimal("1500.00")

    def test_non_breaking_space_is_ignored(self):
        assert parse_amount("R$\xa01.000,00") == Decimal("1000.00")

    @pytest.mark.parametrize("text", ["", "   ", None])
    def test_empty_amount_raises(self, text):
        with pytest.raises(ValueError, match="Empty amount"):
            parse_amount(text)

    def test_garbage_raises(self):
        with pytest.raises(ValueError, match="Could not parse amount"):
            parse_amount("abc")


class TestSplitAmount:
    """Tests for split_amount."""

    def test_negative_is_expense_magnitude(self):
        assert split_amount(Decimal("-450.00")) == (Decimal("450.00"), TransactionKind.EXPENSE)

    def test_positive_is_income(self):
        assert split_amount(Decimal("12.5")) == (Decimal("12.5"), TransactionKind.INCOME)


def test_parenthesized_amount_after_currency_is_expense():
    assert split_amount(parse_amount("R$ (450,00)")) == (Decimal("450.00"), TransactionKind.EXPENSE)

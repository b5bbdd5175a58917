"""Tests for the monthly cash flow summary."""

from datetime import date
from decimal import Decimal

import pytest

from dreflow.domain.cashflow import calculate_cash_flow
from dreflow.domain.entities import (
    PersistedTransaction,
    TransactionKind,
    TransactionSource,
    TransactionStatus,
)
from dreflow.domain.errors import ValidationError


def _txn(day, value, kind=TransactionKind.EXPENSE, status=TransactionStatus.PENDING):
    return PersistedTransaction(
        id=None,
        kind=kind,
        status=status,
        source=TransactionSource.MANUAL,
        description="Lançamento",
        value=Decimal(value),
        date=day,
    )


INCOME = TransactionKind.INCOME


class TestCalculateCashFlow:
    """Tests for calculate_cash_flow."""

    def test_groups_by_month_in_order(self):
        summary = calculate_cash_flow(
            [
                _txn(date(2026, 4, 3), "300.00"),
                _txn(date(2026, 3, 2), "1000.00", INCOME),
                _txn(date(2026, 3, 20), "250.50"),
                _txn(date(2026, 4, 28), "100.00", INCOME, TransactionStatus.RECEIVED),
            ],
            opening_balance=Decimal("500"),
        )

        assert [m.month for m in summary.months] == ["2026-03", "2026-04"]
        march, april = summary.months
        assert march.total_income == Decimal("1000.00")
        assert march.total_expense == Decimal("250.50")
        assert march.net_flow == Decimal("749.50")
        assert march.cumulative_balance == Decimal("1249.50")
        assert april.net_flow == Decimal("-200.00")
        assert april.cumulative_balance == Decimal("1049.50")

        assert summary.total_income == Decimal("1100.00")
        assert summary.total_expense == Decimal("550.50")
        assert summary.net_total == Decimal("549.50")
        assert summary.opening_balance == Decimal("500")
        assert summary.closing_balance == Decimal("1049.50")

    def test_cancelled_transactions_are_left_out(self):
        summary = calculate_cash_flow(
            [
                _txn(date(2026, 3, 2), "80", status=TransactionStatus.CANCELLED),
                _txn(date(2026, 5, 2), "10", INCOME),
            ]
        )
        assert [m.month for m in summary.months] == ["2026-05"]
        assert summary.total_expense == Decimal("0")

    def test_month_with_only_expenses(self):
        (month,) = calculate_cash_flow([_txn(date(2026, 3, 2), "80")]).months
        assert month.total_income == Decimal("0")
        assert month.net_flow == Decimal("-80")

    def test_empty(self):
        summary = calculate_cash_flow([], opening_balance=Decimal("-25"))
        assert summary.months == ()
        assert summary.net_total == Decimal("0")
        assert summary.closing_balance == Decimal("-25")


class TestCashFlowService:
    """Tests for TransactionService.cash_flow."""

    def test_range_filter(self, transaction_service):
        for day, value, kind in [
            (date(2026, 2, 27), "999", INCOME),
            (date(2026, 3, 5), "400", INCOME),
            (date(2026, 3, 9), "150", TransactionKind.EXPENSE),
        ]:
            transaction_service.create_transaction(kind=kind, description="Item", value=Decimal(value), date=day)

        summary = transaction_service.cash_flow(
            start_date=date(2026, 3, 1), end_date=date(2026, 3, 31), opening_balance=Decimal("100")
        )

        assert [m.month for m in summary.months] == ["2026-03"]
        assert summary.closing_balance == Decimal("350")

    def test_inverted_range(self, transaction_service):
        with pytest.raises(ValidationError, match="after end date"):
            transaction_service.cash_flow(start_date=date(2026, 4, 1), end_date=date(2026, 3, 1))

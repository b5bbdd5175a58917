"""Tests for period lifecycle and manual entries."""

import logging
from datetime import date
from decimal import Decimal

import pytest

from dreflow.domain.entities import DreBucket, PeriodGranularity, TransactionKind, TransactionStatus
from dreflow.domain.errors import (
    AlreadyClosed,
    ConflictError,
    NotFoundError,
    PeriodClosed,
    ValidationError,
)


class TestPeriodLifecycle:
    """Tests for creating, closing and deleting periods."""

    def test_create_period(self, period_service):
        period_id = period_service.create_period(
            name="Março", granularity="monthly", start_date=date(2026, 3, 1), end_date=date(2026, 3, 31)
        )
        period = period_service.get_period(period_id)

        assert period.name == "Março"
        assert period.granularity == PeriodGranularity.MONTHLY
        assert period.start_date == date(2026, 3, 1)
        assert period.end_date == date(2026, 3, 31)
        assert period.is_closed is False

    def test_create_period_for_quarter(self, period_service):
        period_id = period_service.create_period_for(PeriodGranularity.QUARTERLY, date(2026, 2, 14))
        period = period_service.get_period(period_id)

        assert period.name == "2026-Q1"
        assert (period.start_date, period.end_date) == (date(2026, 1, 1), date(2026, 3, 31))

    def test_create_period_rejects_inverted_range(self, period_service):
        with pytest.raises(ValidationError, match="before its start date"):
            period_service.create_period("X", "monthly", date(2026, 3, 31), date(2026, 3, 1))

    def test_create_period_rejects_empty_name(self, period_service):
        with pytest.raises(ValidationError, match="name cannot be empty"):
            period_service.create_period("  ", "monthly", date(2026, 3, 1), date(2026, 3, 31))

    def test_invalid_granularity(self, period_service):
        with pytest.raises(ValidationError, match="Invalid granularity"):
            period_service.create_period_for("weekly", date(2026, 3, 1))

    def test_close_then_close_again(self, period_service, march_period):
        closed = period_service.close_period(march_period.id)
        assert closed.is_closed is True
        assert period_service.get_period(march_period.id).is_closed is True

        with pytest.raises(AlreadyClosed):
            period_service.close_period(march_period.id)

    def test_close_unknown_period(self, period_service):
        with pytest.raises(NotFoundError, match="Period 99 not found"):
            period_service.close_period(99)

    def test_entries_frozen_after_close(self, period_service, march_period, sample_categories):
        category_id = sample_categories[DreBucket.RECEITA_BRUTA]
        entry_id = period_service.add_entry(march_period.id, category_id, "Vendas", Decimal("100"))
        period_service.close_period(march_period.id)

        with pytest.raises(PeriodClosed):
            period_service.add_entry(march_period.id, category_id, "Outra", Decimal("1"))
        with pytest.raises(PeriodClosed):
            period_service.upsert_entry(march_period.id, category_id, "Vendas", Decimal("2"))
        with pytest.raises(PeriodClosed):
            period_service.update_entry(entry_id, value=Decimal("3"))
        with pytest.raises(PeriodClosed):
            period_service.delete_entry(entry_id)

        assert period_service.get_entry(entry_id).value == Decimal("100")

    def test_list_periods_ordered_by_start(self, period_service):
        period_service.create_period_for("monthly", date(2026, 5, 1))
        period_service.create_period_for("monthly", date(2026, 3, 1))
        assert [p.name for p in period_service.list_periods()] == ["2026-03", "2026-05"]

    def test_delete_period_removes_entries_keeps_transactions(
        self, period_service, transaction_service, march_period, sample_categories
    ):
        category_id = sample_categories[DreBucket.DESPESAS_GERAIS]
        entry_id = period_service.add_entry(march_period.id, category_id, "Aluguel", Decimal("2000"))
        txn_id = transaction_service.create_transaction(
            kind=TransactionKind.EXPENSE,
            description="Conta de luz",
            value=Decimal("300"),
            date=date(2026, 3, 10),
            category_id=category_id,
            status=TransactionStatus.PAID,
        )
        period_service.close_period(march_period.id)

        period_service.delete_period(march_period.id)

        assert period_service.get_period(march_period.id) is None
        assert period_service.get_entry(entry_id) is None
        assert transaction_service.get_transaction(txn_id) is not None

    def test_close_is_logged(self, period_service, march_period, caplog):
        with caplog.at_level(logging.INFO, logger="dreflow"):
            period_service.close_period(march_period.id)
        assert f"Closed period {march_period.id} (2026-03)" in caplog.text


class TestManualEntries:
    """Tests for manual entry operations."""

    def test_add_and_list(self, period_service, march_period, sample_categories):
        category_id = sample_categories[DreBucket.RECEITA_BRUTA]
        entry_id = period_service.add_entry(
            march_period.id, category_id, "  Vendas   balcão ", Decimal("1500.50"), notes="NF 10-20"
        )

        entries = period_service.list_entries(march_period.id)
        assert [e.id for e in entries] == [entry_id]
        assert entries[0].description == "Vendas balcão"
        assert entries[0].value == Decimal("1500.50")
        assert entries[0].notes == "NF 10-20"
        assert entries[0].category_id == category_id

    def test_negative_value_rejected(self, period_service, march_period, sample_categories):
        with pytest.raises(ValidationError, match="zero or positive"):
            period_service.add_entry(
                march_period.id, sample_categories[DreBucket.CSLL], "CSLL", Decimal("-1")
            )

    def test_empty_description_rejected(self, period_service, march_period, sample_categories):
        with pytest.raises(ValidationError, match="description cannot be empty"):
            period_service.add_entry(march_period.id, sample_categories[DreBucket.CSLL], "  ", Decimal("1"))

    def test_unknown_category_rejected(self, period_service, march_period):
        with pytest.raises(NotFoundError, match="Category 42 not found"):
            period_service.add_entry(march_period.id, 42, "X", Decimal("1"))

    def test_unknown_period_rejected(self, period_service, sample_categories):
        with pytest.raises(NotFoundError, match="Period 7 not found"):
            period_service.add_entry(7, sample_categories[DreBucket.CSLL], "X", Decimal("1"))

    def test_duplicate_entry_conflicts(self, period_service, march_period, sample_categories):
        category_id = sample_categories[DreBucket.DESPESAS_GERAIS]
        period_service.add_entry(march_period.id, category_id, "Aluguel", Decimal("1"))
        with pytest.raises(ConflictError, match="already exists"):
            period_service.add_entry(march_period.id, category_id, "Aluguel", Decimal("2"))

    def test_upsert_creates_then_replaces(self, period_service, march_period, sample_categories):
        category_id = sample_categories[DreBucket.DESPESAS_GERAIS]
        first = period_service.upsert_entry(march_period.id, category_id, "Aluguel", Decimal("1000"))
        second = period_service.upsert_entry(march_period.id, category_id, "Aluguel", Decimal("1200"))

        assert first == second
        entries = period_service.list_entries(march_period.id)
        assert len(entries) == 1
        assert entries[0].value == Decimal("1200")

    def test_update_entry_fields(self, period_service, march_period, sample_categories):
        entry_id = period_service.add_entry(
            march_period.id, sample_categories[DreBucket.DESPESAS_GERAIS], "Aluguel", Decimal("1000")
        )
        period_service.update_entry(
            entry_id,
            category_id=sample_categories[DreBucket.DESPESAS_ADMINISTRATIVAS],
            value=Decimal("1100"),
        )

        entry = period_service.get_entry(entry_id)
        assert entry.category_id == sample_categories[DreBucket.DESPESAS_ADMINISTRATIVAS]
        assert entry.value == Decimal("1100")
        assert entry.description == "Aluguel"

    def test_update_entry_onto_existing_key_conflicts(self, period_service, march_period, sample_categories):
        category_id = sample_categories[DreBucket.DESPESAS_GERAIS]
        period_service.add_entry(march_period.id, category_id, "Aluguel", Decimal("1"))
        other = period_service.add_entry(march_period.id, category_id, "Condomínio", Decimal("2"))

        with pytest.raises(ConflictError):
            period_service.update_entry(other, description="Aluguel")

    def test_delete_entry(self, period_service, march_period, sample_categories):
        entry_id = period_service.add_entry(
            march_period.id, sample_categories[DreBucket.CSLL], "CSLL", Decimal("10")
        )
        period_service.delete_entry(entry_id)

        assert period_service.list_entries(march_period.id) == []
        with pytest.raises(NotFoundError, match=f"Entry {entry_id} not found"):
            period_service.delete_entry(entry_id)

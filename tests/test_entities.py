"""Tests for domain entities."""

import pytest
from dataclasses import FrozenInstanceError
from datetime import date
from decimal import Decimal

from dreflow.domain.entities import (
    Category,
    ClassificationResult,
    DreBucket,
    ImportFormat,
    ParsedTransaction,
    Period,
    PeriodGranularity,
    PersistedTransaction,
    TransactionKind,
    TransactionSource,
    TransactionStatus,
)


def _parsed(value="10.00"):
    return ParsedTransaction(
        date=date(2026, 3, 1), description="Venda", value=Decimal(value), kind=TransactionKind.INCOME
    )


class TestParsedTransaction:
    """Tests for ParsedTransaction entity."""

    def test_create(self):
        txn = _parsed()
        assert txn.value == Decimal("10.00")
        assert txn.document_number is None
        assert txn.raw_line == ""

    def test_value_is_a_magnitude(self):
        with pytest.raises(ValueError, match="magnitude"):
            _parsed("-1")

    def test_immutability(self):
        txn = _parsed()
        with pytest.raises(FrozenInstanceError):
            txn.description = "Outra"


class TestCategory:
    """Tests for Category entity."""

    def test_defaults(self):
        category = Category(id=1, name="Vendas", bucket=DreBucket.RECEITA_BRUTA)
        assert category.keywords == ()
        assert category.position == 0

    def test_equality(self):
        first = Category(id=1, name="Vendas", bucket=DreBucket.RECEITA_BRUTA, keywords=("venda",))
        second = Category(id=1, name="Vendas", bucket=DreBucket.RECEITA_BRUTA, keywords=("venda",))
        assert first == second


class TestClassificationResult:
    """Tests for ClassificationResult entity."""

    def test_unclassified(self):
        result = ClassificationResult(transaction=_parsed())
        assert not result.is_classified
        assert result.confidence == 0.0

    @pytest.mark.parametrize("category_id,confidence", [(1, 0.0), (None, 0.5), (1, 1.5)])
    def test_invalid_confidence(self, category_id, confidence):
        with pytest.raises(ValueError):
            ClassificationResult(transaction=_parsed(), suggested_category_id=category_id, confidence=confidence)

    def test_override(self):
        result = ClassificationResult(transaction=_parsed(), suggested_category_id=1, confidence=0.6)

        chosen = result.override(4)
        assert chosen.suggested_category_id == 4
        assert chosen.confidence == 1.0

        cleared = result.override(None)
        assert not cleared.is_classified
        assert cleared.confidence == 0.0
        assert result.suggested_category_id == 1


def test_persisted_transaction_properties():
    txn = PersistedTransaction(
        id=None,
        kind=TransactionKind.EXPENSE,
        status=TransactionStatus.PAID,
        source=TransactionSource.MANUAL,
        description="Aluguel",
        value=Decimal("3000"),
        date=date(2026, 3, 4),
    )
    assert txn.is_settled
    assert not txn.is_classified

    pending = PersistedTransaction(
        id=1,
        kind=TransactionKind.EXPENSE,
        status=TransactionStatus.OVERDUE,
        source=TransactionSource.MANUAL,
        description="Aluguel",
        value=Decimal("3000"),
        date=date(2026, 3, 4),
        category_id=2,
    )
    assert not pending.is_settled
    assert pending.is_classified


def test_period_contains_is_inclusive():
    period = Period(
        id=1,
        name="2026-03",
        granularity=PeriodGranularity.MONTHLY,
        start_date=date(2026, 3, 1),
        end_date=date(2026, 3, 31),
    )
    assert period.contains(date(2026, 3, 1))
    assert period.contains(date(2026, 3, 31))
    assert not period.contains(date(2026, 4, 1))
    assert not period.is_closed


def test_source_for_format():
    assert TransactionSource.for_format(ImportFormat.XLSX) == TransactionSource.IMPORT_XLSX
    assert TransactionSource.for_format("ofx") == TransactionSource.IMPORT_OFX


def test_bucket_natural_kind():
    assert DreBucket.RECEITAS_FINANCEIRAS.natural_kind == TransactionKind.INCOME
    assert DreBucket.CSLL.natural_kind == TransactionKind.EXPENSE

"""Tests for statement import service."""

import logging
from datetime import date
from decimal import Decimal

import pytest

from dreflow.database.sqlalchemy_db import SQLAlchemyDatabase
from dreflow.domain.batch import build_batch
from dreflow.domain.entities import (
    Category,
    ClassificationResult,
    DreBucket,
    ImportBatchStatus,
    ImportFormat,
    ParsedTransaction,
    TransactionKind,
    TransactionSource,
    TransactionStatus,
)
from dreflow.domain.errors import (
    EmptyStatement,
    PartialImportFailure,
    UnsupportedFormat,
    ValidationError,
)
from dreflow.domain.statement_import import kind_mismatches, to_persisted


def _result(description, value, kind, category_id=None, confidence=0.0):
    txn = ParsedTransaction(
        date=date(2026, 3, 1), description=description, value=Decimal(value), kind=kind
    )
    return ClassificationResult(transaction=txn, suggested_category_id=category_id, confidence=confidence)


class TestBuildBatch:
    """Tests for build_batch."""

    def test_counts_and_totals(self):
        results = [
            _result("Venda", "1000.00", TransactionKind.INCOME, 1, 0.7),
            _result("Aluguel", "300.00", TransactionKind.EXPENSE, 2, 0.6),
            _result("Saque", "50.00", TransactionKind.EXPENSE),
        ]
        batch = build_batch("extrato.csv", ImportFormat.CSV, results)

        assert batch.total_transactions == 3
        assert batch.classified_count == 2
        assert batch.unclassified_count == 1
        assert batch.total_income == Decimal("1000.00")
        assert batch.total_expense == Decimal("350.00")
        assert batch.status == ImportBatchStatus.COMPLETE
        assert batch.id is None

    def test_empty_batch(self):
        batch = build_batch("vazio.csv", "csv", [])
        assert batch.total_transactions == 0
        assert batch.total_income == Decimal("0")


def test_to_persisted_pending_and_settled():
    result = _result("Venda", "10", TransactionKind.INCOME, 3, 0.9)

    pending = to_persisted(result, ImportFormat.OFX)
    assert pending.status == TransactionStatus.PENDING
    assert pending.source == TransactionSource.IMPORT_OFX
    assert pending.due_date == date(2026, 3, 1)
    assert pending.paid_date is None
    assert pending.category_id == 3

    settled = to_persisted(result, ImportFormat.OFX, settle=True)
    assert settled.status == TransactionStatus.RECEIVED
    assert settled.paid_date == date(2026, 3, 1)


def test_kind_mismatches_flags_rows_against_the_bucket():
    categories = [
        Category(id=1, name="Receita Bruta", bucket=DreBucket.RECEITA_BRUTA),
        Category(id=2, name="Despesas Gerais", bucket=DreBucket.DESPESAS_GERAIS),
    ]
    results = [
        _result("Venda", "10", TransactionKind.INCOME, category_id=1, confidence=0.8),
        _result("Estorno aluguel", "30", TransactionKind.INCOME, category_id=2, confidence=0.6),
        _result("Saque", "50", TransactionKind.EXPENSE),
        _result("Devolucao venda", "5", TransactionKind.EXPENSE, category_id=1, confidence=0.7),
        _result("Categoria removida", "5", TransactionKind.EXPENSE, category_id=9, confidence=0.7),
    ]

    assert kind_mismatches(results, categories) == [2, 4]


class TestPreview:
    """Tests for ImportService.preview."""

    def test_preview_classifies_without_writing(self, import_service, temp_db, sample_categories, fixtures_dir):
        preview = import_service.preview_file(str(fixtures_dir / "extrato_inter.csv"))

        assert preview.file_name == "extrato_inter.csv"
        assert preview.format == ImportFormat.CSV
        assert preview.skipped == 1
        suggested = [r.suggested_category_id for r in preview.results]
        assert suggested == [
            sample_categories[DreBucket.RECEITA_BRUTA],
            sample_categories[DreBucket.CUSTO_PRODUTOS],
            sample_categories[DreBucket.DESPESAS_GERAIS],
            sample_categories[DreBucket.DESPESAS_FINANCEIRAS],
        ]
        assert preview.batch.classified_count == 4
        assert temp_db.list_transactions() == []
        assert temp_db.list_import_batches() == []

    def test_preview_uses_history(self, import_service, transaction_service, sample_categories):
        admin = sample_categories[DreBucket.DESPESAS_ADMINISTRATIVAS]
        transaction_service.create_transaction(
            kind="expense", description="PIX JOAO SILVA", value=Decimal("900"), date=date(2026, 2, 5), category_id=admin
        )

        preview = import_service.preview("extrato.csv", b"05/03/2026;Pix Joao Silva;-900,00\n")
        assert preview.results[0].suggested_category_id == admin
        assert preview.results[0].confidence == pytest.approx(0.6)

    def test_preview_threshold(self, import_service, sample_categories):
        preview = import_service.preview(
            "extrato.csv", b"05/03/2026;Energia Eletrica CPFL;-320,15\n", min_score=0.9
        )
        assert not preview.results[0].is_classified

    def test_preview_errors_propagate(self, import_service):
        with pytest.raises(UnsupportedFormat):
            import_service.preview("extrato.pdf", b"%PDF-1.4")
        with pytest.raises(EmptyStatement):
            import_service.preview("extrato.csv", b"")

    def test_preview_missing_file(self, import_service, tmp_path):
        with pytest.raises(FileNotFoundError):
            import_service.preview_file(str(tmp_path / "missing.csv"))


class TestCommit:
    """Tests for ImportService.commit."""

    def test_commit_stores_batch_and_transactions(self, import_service, temp_db, sample_categories, fixtures_dir):
        preview = import_service.preview_file(str(fixtures_dir / "extrato.ofx"))
        batch = import_service.commit(preview.file_name, preview.format, preview.results)

        assert batch.id is not None
        assert batch.created_at is not None
        assert batch.format == ImportFormat.OFX
        assert batch.total_transactions == 3
        assert batch.total_income == Decimal("2500.00")
        assert batch.total_expense == Decimal("104.90")
        assert temp_db.get_import_batch(batch.id) == batch

        stored = temp_db.list_transactions(import_batch_id=batch.id)
        assert len(stored) == 3
        assert {t.source for t in stored} == {TransactionSource.IMPORT_OFX}
        assert {t.status for t in stored} == {TransactionStatus.PENDING}

    def test_commit_with_overrides_and_settle(self, import_service, temp_db, sample_categories, fixtures_dir):
        preview = import_service.preview_file(str(fixtures_dir / "extrato.xml"))
        rent_category = sample_categories[DreBucket.DESPESAS_ADMINISTRATIVAS]
        results = [preview.results[0].override(None), preview.results[1].override(rent_category)]

        batch = import_service.commit(preview.file_name, preview.format, results, settle=True)

        assert batch.classified_count == 1
        assert batch.unclassified_count == 1
        sale, rent = sorted(temp_db.list_transactions(import_batch_id=batch.id), key=lambda t: t.date)
        assert sale.category_id is None
        assert sale.status == TransactionStatus.RECEIVED
        assert rent.category_id == rent_category
        assert rent.status == TransactionStatus.PAID
        assert rent.paid_date == date(2026, 3, 4)

    def test_commit_nothing(self, import_service):
        with pytest.raises(ValidationError, match="Nothing to import"):
            import_service.commit("vazio.csv", ImportFormat.CSV, [])

    def test_commit_unknown_category(self, import_service, temp_db):
        results = [_result("Venda", "10", TransactionKind.INCOME, 404, 0.9)]
        with pytest.raises(ValidationError, match="Category 404 not found"):
            import_service.commit("x.csv", ImportFormat.CSV, results)
        assert temp_db.list_import_batches() == []

    def test_failed_insert_rolls_back_everything(
        self, import_service, temp_db, sample_categories, monkeypatch, caplog
    ):
        original = SQLAlchemyDatabase._transaction_row

        def failing_row(self, txn, import_batch_id):
            if txn.description == "Terceira":
                raise RuntimeError("disk full")
            return original(self, txn, import_batch_id)

        monkeypatch.setattr(SQLAlchemyDatabase, "_transaction_row", failing_row)
        results = [
            _result("Primeira", "10", TransactionKind.INCOME),
            _result("Segunda", "20", TransactionKind.EXPENSE),
            _result("Terceira", "30", TransactionKind.EXPENSE),
        ]

        with caplog.at_level(logging.ERROR, logger="dreflow"):
            with pytest.raises(PartialImportFailure) as exc_info:
                import_service.commit("falha.csv", ImportFormat.CSV, results)

        assert exc_info.value.row_index == 2
        assert exc_info.value.file_name == "falha.csv"
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert "No transactions were saved" in str(exc_info.value)
        assert temp_db.list_import_batches() == []
        assert temp_db.list_transactions() == []
        assert "rolled back" in caplog.text

    def test_database_usable_after_rollback(self, import_service, temp_db, monkeypatch):
        original = SQLAlchemyDatabase._transaction_row
        calls = {"count": 0}

        def failing_once(self, txn, import_batch_id):
            calls["count"] += 1
            if calls["count"] == 1:
                raise RuntimeError("transient")
            return original(self, txn, import_batch_id)

        monkeypatch.setattr(SQLAlchemyDatabase, "_transaction_row", failing_once)
        results = [_result("Venda", "10", TransactionKind.INCOME)]

        with pytest.raises(PartialImportFailure):
            import_service.commit("a.csv", ImportFormat.CSV, results)
        batch = import_service.commit("a.csv", ImportFormat.CSV, results)

        assert [b.id for b in temp_db.list_import_batches()] == [batch.id]
        assert len(temp_db.list_transactions()) == 1

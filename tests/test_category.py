"""Tests for category management."""

from datetime import date
from decimal import Decimal

import pytest

from dreflow.domain.category import DEFAULT_CATEGORIES, normalize_keywords, parse_bucket
from dreflow.domain.classifier import DEFAULT_BUCKET_KEYWORDS
from dreflow.domain.entities import DreBucket, TransactionKind
from dreflow.domain.errors import ConflictError, NotFoundError, ValidationError


def test_parse_bucket():
    assert parse_bucket(" Despesas_Gerais ") == DreBucket.DESPESAS_GERAIS
    assert parse_bucket(DreBucket.CSLL) == DreBucket.CSLL
    with pytest.raises(ValidationError, match="Invalid bucket 'lucro'"):
        parse_bucket("lucro")


def test_normalize_keywords():
    assert normalize_keywords(["Energia", "energia", " ", "NF-e", "Água"]) == ("energia", "nf e", "agua")
    assert normalize_keywords(None) == ()


def test_natural_kind():
    assert DreBucket.RECEITA_BRUTA.natural_kind == TransactionKind.INCOME
    assert DreBucket.RECEITAS_FINANCEIRAS.natural_kind == TransactionKind.INCOME
    assert DreBucket.DESPESAS_FINANCEIRAS.natural_kind == TransactionKind.EXPENSE


class TestCategoryService:
    """Tests for CategoryService."""

    def test_create_category(self, category_service):
        category_id = category_service.create_category(
            name="Utilities", bucket="despesas_gerais", keywords=["Energia", "Água"]
        )
        category = category_service.get_category(category_id)

        assert category.name == "Utilities"
        assert category.bucket == DreBucket.DESPESAS_GERAIS
        assert category.keywords == ("energia", "agua")
        assert category.position == 0

    def test_positions_append(self, category_service):
        first = category_service.create_category(name="A", bucket=DreBucket.CSLL)
        second = category_service.create_category(name="B", bucket=DreBucket.CSLL)
        explicit = category_service.create_category(name="C", bucket=DreBucket.CSLL, position=-1)

        assert category_service.get_category(first).position == 0
        assert category_service.get_category(second).position == 1
        assert [c.id for c in category_service.list_categories()] == [explicit, first, second]

    def test_duplicate_name(self, category_service):
        category_service.create_category(name="Utilities", bucket=DreBucket.DESPESAS_GERAIS)
        with pytest.raises(ConflictError, match="already exists"):
            category_service.create_category(name="Utilities", bucket=DreBucket.CSLL)

    def test_empty_name(self, category_service):
        with pytest.raises(ValidationError, match="name cannot be empty"):
            category_service.create_category(name=" ", bucket=DreBucket.CSLL)

    def test_invalid_bucket(self, category_service):
        with pytest.raises(ValidationError, match="Invalid bucket"):
            category_service.create_category(name="X", bucket="outros")

    def test_resolve_by_id_or_name(self, category_service):
        category_id = category_service.create_category(name="Utilities", bucket=DreBucket.DESPESAS_GERAIS)

        assert category_service.resolve_category(str(category_id)).name == "Utilities"
        assert category_service.resolve_category(" Utilities ").id == category_id
        with pytest.raises(NotFoundError, match="Category 'Nope' not found"):
            category_service.resolve_category("Nope")

    def test_set_keywords(self, category_service):
        category_id = category_service.create_category(name="Utilities", bucket=DreBucket.DESPESAS_GERAIS)
        category_service.set_keywords(category_id, ["Luz", "luz", "Telefone"])

        assert category_service.get_category(category_id).keywords == ("luz", "telefone")
        with pytest.raises(NotFoundError):
            category_service.set_keywords(999, ["x"])

    def test_delete_unused_category(self, category_service):
        category_id = category_service.create_category(name="Temp", bucket=DreBucket.CSLL)
        category_service.delete_category(category_id)
        assert category_service.get_category(category_id) is None

    def test_delete_category_in_use(
        self, category_service, period_service, transaction_service, march_period
    ):
        category_id = category_service.create_category(name="Aluguel", bucket=DreBucket.DESPESAS_GERAIS)
        period_service.add_entry(march_period.id, category_id, "Aluguel", Decimal("1000"))
        transaction_service.create_transaction(
            kind="expense",
            description="Aluguel março",
            value=Decimal("1000"),
            date=date(2026, 3, 5),
            category_id=category_id,
        )

        with pytest.raises(ConflictError, match="it has 1 entry, 1 transaction"):
            category_service.delete_category(category_id)

    def test_delete_unknown_category(self, category_service):
        with pytest.raises(NotFoundError):
            category_service.delete_category(12345)


class TestSeedDefaults:
    """Tests for the default chart of accounts."""

    def test_one_category_per_bucket(self, category_service):
        created = category_service.seed_defaults()
        categories = category_service.list_categories()

        assert created == len(DEFAULT_CATEGORIES) == len(DreBucket)
        assert [c.bucket for c in categories] == list(DreBucket)
        assert [c.name for c in categories] == [name for name, _ in DEFAULT_CATEGORIES]

    def test_default_keywords_are_normalized(self, category_service, sample_categories):
        receita = category_service.get_category(sample_categories[DreBucket.RECEITA_BRUTA])
        assert "nf e" in receita.keywords
        assert len(receita.keywords) == len(DEFAULT_BUCKET_KEYWORDS[DreBucket.RECEITA_BRUTA])

    def test_seed_is_idempotent(self, category_service):
        category_service.seed_defaults()
        category_service.delete_category(category_service.get_category_by_name("CSLL").id)

        assert category_service.seed_defaults() == 1
        assert category_service.seed_defaults() == 0
        assert len(category_service.list_categories()) == len(DEFAULT_CATEGORIES)

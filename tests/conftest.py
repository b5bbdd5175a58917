"""Shared pytest fixtures for dreflow tests."""

import logging
import tempfile
import os
from datetime import date
from decimal import Decimal
from pathlib import Path
import pytest

from dreflow.database.factories import create_sqlite_database
from dreflow.domain.category import CategoryService
from dreflow.domain.entities import DreBucket
from dreflow.domain.period import PeriodService
from dreflow.domain.statement import StatementService
from dreflow.domain.statement_import import ImportService
from dreflow.domain.transaction import TransactionService
from dreflow.logger import LOGGER_NAME


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers the CLI attached to the dreflow logger."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def period_service(temp_db):
    """Create a PeriodService with a temporary database."""
    return PeriodService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def import_service(temp_db):
    """Create an ImportService with a temporary database."""
    return ImportService(temp_db)


@pytest.fixture
def statement_service(temp_db):
    """Create a StatementService with a temporary database."""
    return StatementService(temp_db)


@pytest.fixture
def sample_categories(category_service):
    """Seed the default categories and return their IDs keyed by bucket."""
    category_service.seed_defaults()
    return {cat.bucket: cat.id for cat in category_service.list_categories()}


@pytest.fixture
def march_period(period_service):
    """Create the open monthly period of March 2026."""
    period_id = period_service.create_period_for("monthly", date(2026, 3, 1))
    return period_service.get_period(period_id)


@pytest.fixture
def scenario_entries():
    """Bucket totals of a small but complete income statement."""
    return {
        DreBucket.RECEITA_BRUTA: Decimal("10000"),
        DreBucket.DEDUCOES_RECEITA: Decimal("1000"),
        DreBucket.CUSTO_PRODUTOS: Decimal("3000"),
        DreBucket.DESPESAS_ADMINISTRATIVAS: Decimal("1000"),
        DreBucket.DESPESAS_COMERCIAIS: Decimal("500"),
        DreBucket.DESPESAS_GERAIS: Decimal("500"),
        DreBucket.DEPRECIACAO_AMORTIZACAO: Decimal("400"),
        DreBucket.RECEITAS_FINANCEIRAS: Decimal("100"),
        DreBucket.DESPESAS_FINANCEIRAS: Decimal("300"),
        DreBucket.IMPOSTO_RENDA: Decimal("300"),
        DreBucket.CSLL: Decimal("200"),
    }


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"

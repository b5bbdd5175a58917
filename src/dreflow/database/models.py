"""SQLAlchemy models for dreflow database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    JSON,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _now() -> datetime:
    return datetime.now(UTC)


class Category(Base):
    """DRE category model."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    bucket = Column(String, nullable=False)
    keywords = Column(JSON, default=list, nullable=False)
    position = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)

    # Relationships
    entries = relationship("ManualEntry", back_populates="category")
    transactions = relationship("Transaction", back_populates="category")
    rules = relationship("ClassificationRule", back_populates="category", cascade="all, delete-orphan")


class Period(Base):
    """Reporting period model."""

    __tablename__ = "periods"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    granularity = Column(String, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    is_closed = Column(Boolean, default=False, nullable=False)
    closed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    # Entries belong to the period; transactions do not
    entries = relationship("ManualEntry", back_populates="period", cascade="all, delete-orphan")


class ManualEntry(Base):
    """Manual statement entry model."""

    __tablename__ = "manual_entries"

    id = Column(Integer, primary_key=True)
    period_id = Column(Integer, ForeignKey("periods.id", ondelete="CASCADE"), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    description = Column(String, nullable=False)
    value = Column(Numeric(14, 2), nullable=False)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    __table_args__ = (
        UniqueConstraint("period_id", "category_id", "description", name="uq_period_category_description"),
    )

    # Relationships
    period = relationship("Period", back_populates="entries")
    category = relationship("Category", back_populates="entries")


class ImportBatch(Base):
    """Import batch summary model."""

    __tablename__ = "import_batches"

    id = Column(Integer, primary_key=True)
    file_name = Column(String, nullable=False)
    format = Column(String, nullable=False)
    total_transactions = Column(Integer, default=0, nullable=False)
    classified_count = Column(Integer, default=0, nullable=False)
    unclassified_count = Column(Integer, default=0, nullable=False)
    total_income = Column(Numeric(14, 2), default=0, nullable=False)
    total_expense = Column(Numeric(14, 2), default=0, nullable=False)
    status = Column(String, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)

    # Relationships
    transactions = relationship("Transaction", back_populates="import_batch")


class Transaction(Base):
    """Financial transaction model."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    kind = Column(String, nullable=False)
    status = Column(String, nullable=False)
    source = Column(String, nullable=False)
    description = Column(String, nullable=False)
    value = Column(Numeric(14, 2), nullable=False)
    date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=True)
    paid_date = Column(Date, nullable=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    is_classified = Column(Boolean, default=False, nullable=False)
    document_number = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    import_batch_id = Column(Integer, ForeignKey("import_batches.id"), nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    # Relationships
    category = relationship("Category", back_populates="transactions")
    import_batch = relationship("ImportBatch", back_populates="transactions")


class ClassificationRule(Base):
    """User classification rule model."""

    __tablename__ = "classification_rules"

    id = Column(Integer, primary_key=True)
    keywords = Column(JSON, default=list, nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="CASCADE"), nullable=False)
    kind = Column(String, nullable=False)
    priority = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)

    # Relationships
    category = relationship("Category", back_populates="rules")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)

"""Domain model entities for dreflow.

These are pure data classes representing business concepts, independent of
database schema. Parsers, the classifier and the statement calculator only
ever see these types, never ORM rows.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Mapping, Optional


class TransactionKind(str, Enum):
    """Direction of a transaction. Values are always stored as magnitudes."""

    INCOME = "income"
    EXPENSE = "expense"


class TransactionStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    RECEIVED = "received"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


SETTLED_STATUSES = frozenset({TransactionStatus.PAID, TransactionStatus.RECEIVED})


class ImportFormat(str, Enum):
    """Supported statement file formats."""

    CSV = "csv"
    OFX = "ofx"
    XML = "xml"
    XLSX = "xlsx"


class TransactionSource(str, Enum):
    MANUAL = "manual"
    IMPORT_CSV = "import_csv"
    IMPORT_OFX = "import_ofx"
    IMPORT_XML = "import_xml"
    IMPORT_XLSX = "import_xlsx"

    @classmethod
    def for_format(cls, fmt: ImportFormat) -> "TransactionSource":
        """Return the source tag for transactions imported from a format."""
        return cls(f"import_{ImportFormat(fmt).value}")


class PeriodGranularity(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUAL = "annual"


class DreBucket(str, Enum):
    """Fixed waterfall lines a category can roll up into, in statement order."""

    RECEITA_BRUTA = "receita_bruta"
    DEDUCOES_RECEITA = "deducoes_receita"
    CUSTO_PRODUTOS = "custo_produtos"
    DESPESAS_ADMINISTRATIVAS = "despesas_administrativas"
    DESPESAS_COMERCIAIS = "despesas_comerciais"
    DESPESAS_GERAIS = "despesas_gerais"
    DEPRECIACAO_AMORTIZACAO = "depreciacao_amortizacao"
    RECEITAS_FINANCEIRAS = "receitas_financeiras"
    DESPESAS_FINANCEIRAS = "despesas_financeiras"
    IMPOSTO_RENDA = "imposto_renda"
    CSLL = "csll"

    @property
    def natural_kind(self) -> TransactionKind:
        """Kind of transaction that usually lands in this bucket."""
        if self in (DreBucket.RECEITA_BRUTA, DreBucket.RECEITAS_FINANCEIRAS):
            return TransactionKind.INCOME
        return TransactionKind.EXPENSE


class ImportBatchStatus(str, Enum):
    COMPLETE = "complete"
    PARTIAL = "partial"


@dataclass(frozen=True)
class ParsedTransaction:
    """Canonical record produced by every statement parser."""

    date: date
    description: str
    value: Decimal
    kind: TransactionKind
    document_number: Optional[str] = None
    raw_line: str = ""

    def __post_init__(self):
        if self.value < 0:
            raise ValueError(f"Transaction value must be a magnitude, got {self.value}")


@dataclass(frozen=True)
class Category:
    """DRE category: a named account that rolls up into one bucket."""

    id: int
    name: str
    bucket: DreBucket
    keywords: tuple[str, ...] = ()
    position: int = 0
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class HistoricalAssignment:
    """A description that was previously saved under a category."""

    description: str
    category_id: int


@dataclass(frozen=True)
class ClassificationRule:
    """User-defined keyword rule, checked before any category keywords."""

    id: int
    keywords: tuple[str, ...]
    category_id: int
    kind: TransactionKind
    priority: int = 0
    is_active: bool = True
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class ClassificationResult:
    """Classifier suggestion for a single parsed transaction."""

    transaction: ParsedTransaction
    suggested_category_id: Optional[int] = None
    confidence: float = 0.0
    matched_rule_id: Optional[int] = None

    def __post_init__(self):
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Confidence must be within [0, 1], got {self.confidence}")
        if (self.confidence == 0) != (self.suggested_category_id is None):
            raise ValueError("Confidence must be 0 exactly when there is no suggestion")

    @property
    def is_classified(self) -> bool:
        return self.suggested_category_id is not None

    def override(self, category_id: Optional[int]) -> "ClassificationResult":
        """Return a copy carrying a reviewer's choice instead of the suggestion."""
        return replace(
            self,
            suggested_category_id=category_id,
            confidence=1.0 if category_id is not None else 0.0,
            matched_rule_id=None,
        )


@dataclass(frozen=True)
class ImportBatch:
    """Summary of one ingestion pass over a single uploaded file."""

    file_name: str
    format: ImportFormat
    total_transactions: int
    classified_count: int
    unclassified_count: int
    total_income: Decimal
    total_expense: Decimal
    status: ImportBatchStatus = ImportBatchStatus.COMPLETE
    id: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class PersistedTransaction:
    """Transaction as stored by the storage collaborator."""

    id: Optional[int]
    kind: TransactionKind
    status: TransactionStatus
    source: TransactionSource
    description: str
    value: Decimal
    date: date
    due_date: Optional[date] = None
    paid_date: Optional[date] = None
    category_id: Optional[int] = None
    document_number: Optional[str] = None
    notes: Optional[str] = None
    import_batch_id: Optional[int] = None
    created_at: Optional[datetime] = None

    @property
    def is_classified(self) -> bool:
        return self.category_id is not None

    @property
    def is_settled(self) -> bool:
        return self.status in SETTLED_STATUSES


@dataclass(frozen=True)
class Period:
    """Date range aggregated into one statement. end_date is inclusive."""

    id: int
    name: str
    granularity: PeriodGranularity
    start_date: date
    end_date: date
    is_closed: bool = False
    created_at: Optional[datetime] = None

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


@dataclass(frozen=True)
class ManualEntry:
    """Hand-entered statement line owned by a single period."""

    id: int
    period_id: int
    category_id: int
    description: str
    value: Decimal
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class DreReport:
    """Computed income statement for one period. Never stored."""

    period: Period
    receita_bruta: Decimal
    deducoes_receita: Decimal
    receita_liquida: Decimal
    custo_produtos: Decimal
    lucro_bruto: Decimal
    despesas_administrativas: Decimal
    despesas_comerciais: Decimal
    despesas_gerais: Decimal
    total_despesas_operacionais: Decimal
    ebitda: Decimal
    depreciacao_amortizacao: Decimal
    ebit: Decimal
    receitas_financeiras: Decimal
    despesas_financeiras: Decimal
    resultado_financeiro: Decimal
    lair: Decimal
    imposto_renda: Decimal
    csll: Decimal
    lucro_liquido: Decimal
    margem_bruta: float
    margem_ebitda: float
    margem_operacional: float
    margem_liquida: float
    category_totals: Mapping[int, Decimal] = field(default_factory=dict)


@dataclass(frozen=True)
class ForecastPeriod:
    month: str
    receita_liquida: Decimal
    ebitda: Decimal
    lucro_liquido: Decimal
    margem_ebitda: float


@dataclass(frozen=True)
class ForecastResult:
    periods: tuple[ForecastPeriod, ...]
    growth_rate: float
    trend: str
    confidence: float


@dataclass(frozen=True)
class CashFlowMonth:
    """Money in and out during one calendar month ("YYYY-MM")."""

    month: str
    total_income: Decimal
    total_expense: Decimal
    net_flow: Decimal
    cumulative_balance: Decimal


@dataclass(frozen=True)
class CashFlowSummary:
    months: tuple[CashFlowMonth, ...]
    total_income: Decimal
    total_expense: Decimal
    net_total: Decimal
    opening_balance: Decimal
    closing_balance: Decimal


@dataclass(frozen=True)
class Valuation:
    """Enterprise and equity value from an EV/EBITDA multiple."""

    annual_ebitda: Decimal
    multiple: float
    enterprise_value: Decimal
    net_debt: Decimal
    equity_value: Decimal

"""Income statement (DRE) calculator.

``calculate`` is a pure function over fully loaded inputs. It performs no
I/O and never mutates its arguments, so reports for several periods can be
computed concurrently.
"""

from collections import defaultdict
from decimal import Decimal
from typing import Iterable, Sequence

from dreflow.domain.entities import (
    Category,
    DreBucket,
    DreReport,
    ManualEntry,
    Period,
    PersistedTransaction,
)

ZERO = Decimal("0")

# (attribute, label, is_subtotal) in statement order
REPORT_LINES = (
    ("receita_bruta", "Receita Bruta", False),
    ("deducoes_receita", "(-) Deduções da Receita", False),
    ("receita_liquida", "= Receita Líquida", True),
    ("custo_produtos", "(-) Custo dos Produtos", False),
    ("lucro_bruto", "= Lucro Bruto", True),
    ("despesas_administrativas", "(-) Despesas Administrativas", False),
    ("despesas_comerciais", "(-) Despesas Comerciais", False),
    ("despesas_gerais", "(-) Despesas Gerais", False),
    ("total_despesas_operacionais", "Total Despesas Operacionais", False),
    ("ebitda", "= EBITDA", True),
    ("depreciacao_amortizacao", "(-) Depreciação e Amortização", False),
    ("ebit", "= EBIT", True),
    ("receitas_financeiras", "(+) Receitas Financeiras", False),
    ("despesas_financeiras", "(-) Despesas Financeiras", False),
    ("resultado_financeiro", "= Resultado Financeiro", True),
    ("lair", "= LAIR", True),
    ("imposto_renda", "(-) Imposto de Renda", False),
    ("csll", "(-) CSLL", False),
    ("lucro_liquido", "= Lucro Líquido", True),
)

MARGIN_LINES = (
    ("margem_bruta", "Margem Bruta"),
    ("margem_ebitda", "Margem EBITDA"),
    ("margem_operacional", "Margem Operacional"),
    ("margem_liquida", "Margem Líquida"),
)


def counts_toward(period: Period, txn: PersistedTransaction) -> bool:
    """Cash regime filter: settled, classified and dated inside the period."""
    return txn.is_settled and txn.is_classified and period.contains(txn.date)


def safe_percent(value: Decimal, base: Decimal) -> float:
    if base == 0:
        return 0.0
    return float(value / base * 100)


def category_totals(
    period: Period,
    manual_entries: Iterable[ManualEntry],
    transactions: Iterable[PersistedTransaction],
) -> dict[int, Decimal]:
    """Sum contributing entries and transactions per category."""
    totals: dict[int, Decimal] = defaultdict(lambda: ZERO)
    for entry in manual_entries:
        if entry.period_id == period.id:
            totals[entry.category_id] += entry.value
    for txn in transactions:
        if counts_toward(period, txn):
            totals[txn.category_id] += txn.value
    return dict(totals)


def calculate(
    period: Period,
    manual_entries: Sequence[ManualEntry],
    categories: Sequence[Category],
    transactions: Sequence[PersistedTransaction],
) -> DreReport:
    """Compute the income statement of a period.

    Args:
        period: Period being reported
        manual_entries: Manual entries; only those owned by the period count
        categories: Categories mapping each category id to its bucket
        transactions: Persisted transactions; filtered by the cash regime

    Returns:
        A freshly computed DreReport
    """
    per_category = category_totals(period, manual_entries, transactions)

    bucket_of = {category.id: category.bucket for category in categories}
    buckets = {bucket: ZERO for bucket in DreBucket}
    for category_id, total in per_category.items():
        bucket = bucket_of.get(category_id)
        if bucket is not None:
            buckets[bucket] += total

    receita_bruta = buckets[DreBucket.RECEITA_BRUTA]
    deducoes_receita = buckets[DreBucket.DEDUCOES_RECEITA]
    receita_liquida = receita_bruta - deducoes_receita

    custo_produtos = buckets[DreBucket.CUSTO_PRODUTOS]
    lucro_bruto = receita_liquida - custo_produtos

    despesas_administrativas = buckets[DreBucket.DESPESAS_ADMINISTRATIVAS]
    despesas_comerciais = buckets[DreBucket.DESPESAS_COMERCIAIS]
    despesas_gerais = buckets[DreBucket.DESPESAS_GERAIS]
    total_despesas_operacionais = (
        despesas_administrativas + despesas_comerciais + despesas_gerais
    )
    ebitda = lucro_bruto - total_despesas_operacionais

    depreciacao_amortizacao = buckets[DreBucket.DEPRECIACAO_AMORTIZACAO]
    ebit = ebitda - depreciacao_amortizacao

    receitas_financeiras = buckets[DreBucket.RECEITAS_FINANCEIRAS]
    despesas_financeiras = buckets[DreBucket.DESPESAS_FINANCEIRAS]
    resultado_financeiro = receitas_financeiras - despesas_financeiras

    lair = ebit + resultado_financeiro

    imposto_renda = buckets[DreBucket.IMPOSTO_RENDA]
    csll = buckets[DreBucket.CSLL]
    lucro_liquido = lair - (imposto_renda + csll)

    return DreReport(
        period=period,
        receita_bruta=receita_bruta,
        deducoes_receita=deducoes_receita,
        receita_liquida=receita_liquida,
        custo_produtos=custo_produtos,
        lucro_bruto=lucro_bruto,
        despesas_administrativas=despesas_administrativas,
        despesas_comerciais=despesas_comerciais,
        despesas_gerais=despesas_gerais,
        total_despesas_operacionais=total_despesas_operacionais,
        ebitda=ebitda,
        depreciacao_amortizacao=depreciacao_amortizacao,
        ebit=ebit,
        receitas_financeiras=receitas_financeiras,
        despesas_financeiras=despesas_financeiras,
        resultado_financeiro=resultado_financeiro,
        lair=lair,
        imposto_renda=imposto_renda,
        csll=csll,
        lucro_liquido=lucro_liquido,
        margem_bruta=safe_percent(lucro_bruto, receita_liquida),
        margem_ebitda=safe_percent(ebitda, receita_liquida),
        margem_operacional=safe_percent(ebit, receita_liquida),
        margem_liquida=safe_percent(lucro_liquido, receita_liquida),
        category_totals=per_category,
    )

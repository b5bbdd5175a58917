"""Keyword and history based transaction classifier.

User rules come first: the active rules whose kind matches the transaction
are tried by descending priority (then ID), and the first one with a keyword
occurring in the description suggests its category with confidence
``RULE_SCORE``. Otherwise each category is scored:

- keyword component: 0 when none of the category keywords occurs in the
  normalized description starting at a word boundary ("venda" matches
  "vendas", "das" does not), otherwise ``0.5 + 0.35 * coverage``, where
  coverage is the length of the longest matching keyword divided by the
  description length. A lone match therefore lands in [0.5, 0.85].
- history component: ``0.6`` when this exact normalized description was
  previously saved under the category.
- score: ``min(1.0, keyword + history)`` rounded to 4 places.

The highest score wins. Ties go to the category with more historical
matches, then to the one listed first. Scores below ``min_score`` produce no
suggestion. Only sequences and dict lookups are used, so results are
identical on every call with the same inputs.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Container, Iterable, Optional, Sequence

from dreflow.domain.entities import (
    Category,
    ClassificationResult,
    ClassificationRule,
    DreBucket,
    HistoricalAssignment,
    ParsedTransaction,
    PersistedTransaction,
    TransactionKind,
)
from dreflow.utils.text import normalize_text

logger = logging.getLogger(__name__)

KEYWORD_BASE = 0.5
KEYWORD_COVERAGE_WEIGHT = 0.35
HISTORY_BOOST = 0.6
RULE_SCORE = 0.95
DEFAULT_MIN_SCORE = 0.5
SCORE_PRECISION = 4


# Default keyword sets per bucket, used when seeding categories
DEFAULT_BUCKET_KEYWORDS: dict[DreBucket, tuple[str, ...]] = {
    DreBucket.RECEITA_BRUTA: (
        "venda", "faturamento", "receita", "nf-e", "nota fiscal",
        "pix recebido", "ted recebida", "transferencia recebida",
        "deposito", "credito", "pagamento recebido",
    ),
    DreBucket.DEDUCOES_RECEITA: (
        "imposto", "icms", "pis", "cofins", "iss", "darf", "das", "simples nacional",
    ),
    DreBucket.CUSTO_PRODUTOS: (
        "materia prima", "fornecedor", "compra mercadoria", "insumo",
        "estoque", "frete compra", "embalagem",
    ),
    DreBucket.DESPESAS_ADMINISTRATIVAS: (
        "salario", "folha", "fgts", "inss", "ferias", "rescisao",
        "contabilidade", "contador", "advocacia", "juridico",
        "software", "licenca", "sistema", "erp",
    ),
    DreBucket.DESPESAS_COMERCIAIS: (
        "marketing", "publicidade", "propaganda", "google ads",
        "facebook ads", "meta ads", "comissao", "representante",
        "feira", "evento", "brinde",
    ),
    DreBucket.DESPESAS_GERAIS: (
        "aluguel", "condominio", "energia", "luz", "agua", "telefone",
        "internet", "celular", "seguro", "limpeza", "manutencao",
        "correio", "material escritorio", "combustivel",
    ),
    DreBucket.DEPRECIACAO_AMORTIZACAO: ("depreciacao", "amortizacao"),
    DreBucket.RECEITAS_FINANCEIRAS: (
        "rendimento", "juros recebidos", "cdb", "lci", "lca",
        "aplicacao", "dividendo", "jcp",
    ),
    DreBucket.DESPESAS_FINANCEIRAS: (
        "juros", "iof", "tarifa bancaria", "taxa bancaria",
        "emprestimo", "financiamento", "multa", "encargos",
        "cartao credito", "anuidade",
    ),
    DreBucket.IMPOSTO_RENDA: ("irpj", "imposto renda pessoa juridica", "ir retido"),
    DreBucket.CSLL: ("csll", "contribuicao social"),
}


@dataclass(frozen=True)
class _Candidate:
    score: float
    history_count: int
    position: int
    category_id: int


class HistoryIndex:
    """Lookup of normalized description -> category id -> times assigned."""

    def __init__(self, assignments: Iterable[HistoricalAssignment] = ()):
        self._counts: dict[str, Counter] = {}
        for assignment in assignments:
            key = normalize_text(assignment.description)
            if not key:
                continue
            self._counts.setdefault(key, Counter())[assignment.category_id] += 1

    def count(self, normalized_description: str, category_id: int) -> int:
        counts = self._counts.get(normalized_description)
        return counts[category_id] if counts else 0

    def __len__(self) -> int:
        return len(self._counts)


def _longest_match(normalized_description: str, keywords: Sequence[str]) -> int:
    """Length of the longest keyword starting at a word boundary, 0 if none."""
    padded = f" {normalized_description}"
    longest = 0
    for keyword in keywords:
        normalized_keyword = normalize_text(keyword)
        if normalized_keyword and f" {normalized_keyword}" in padded:
            longest = max(longest, len(normalized_keyword))
    return longest


def keyword_score(normalized_description: str, keywords: Sequence[str]) -> float:
    """Score keyword overlap between a description and a keyword set."""
    if not normalized_description:
        return 0.0
    longest = _longest_match(normalized_description, keywords)
    if longest == 0:
        return 0.0
    coverage = min(1.0, longest / len(normalized_description))
    return KEYWORD_BASE + KEYWORD_COVERAGE_WEIGHT * coverage


def score_category(
    normalized_description: str, category: Category, history: HistoryIndex
) -> tuple[float, int]:
    """Return (score, historical match count) for one category."""
    history_count = history.count(normalized_description, category.id)
    score = keyword_score(normalized_description, category.keywords)
    if history_count > 0:
        score += HISTORY_BOOST
    return round(min(1.0, score), SCORE_PRECISION), history_count


def rank_rules(rules: Iterable[ClassificationRule]) -> list[ClassificationRule]:
    """Active rules in the order they are tried."""
    return sorted((r for r in rules if r.is_active), key=lambda r: (-r.priority, r.id))


def match_rule(
    normalized_description: str,
    kind: TransactionKind,
    rules: Sequence[ClassificationRule],
    category_ids: Container[int],
) -> Optional[ClassificationRule]:
    """First ranked rule for this kind whose keywords occur in the description.

    Rules pointing at a category outside ``category_ids`` are ignored.
    """
    if not normalized_description:
        return None
    for rule in rules:
        if rule.kind != kind or rule.category_id not in category_ids:
            continue
        if _longest_match(normalized_description, rule.keywords) > 0:
            return rule
    return None


def classify_transaction(
    transaction: ParsedTransaction,
    history: HistoryIndex,
    categories: Sequence[Category],
    min_score: float = DEFAULT_MIN_SCORE,
    rules: Sequence[ClassificationRule] = (),
) -> ClassificationResult:
    """Suggest a category for a single transaction.

    ``rules`` must already be ranked (see ``rank_rules``).
    """
    normalized = normalize_text(transaction.description)

    if rules and RULE_SCORE >= min_score:
        rule = match_rule(normalized, transaction.kind, rules, {c.id for c in categories})
        if rule is not None:
            logger.debug(
                "'%s' -> category %s (rule %s)", transaction.description, rule.category_id, rule.id
            )
            return ClassificationResult(
                transaction=transaction,
                suggested_category_id=rule.category_id,
                confidence=RULE_SCORE,
                matched_rule_id=rule.id,
            )

    best: Optional[_Candidate] = None
    for position, category in enumerate(categories):
        score, history_count = score_category(normalized, category, history)
        if score <= 0:
            continue
        candidate = _Candidate(score, history_count, position, category.id)
        if best is None or _ranks_higher(candidate, best):
            best = candidate

    if best is None or best.score < min_score:
        logger.debug("No category for '%s'", transaction.description)
        return ClassificationResult(transaction=transaction)

    logger.debug(
        "'%s' -> category %s (confidence %.4f)",
        transaction.description,
        best.category_id,
        best.score,
    )
    return ClassificationResult(
        transaction=transaction,
        suggested_category_id=best.category_id,
        confidence=best.score,
    )


def _ranks_higher(candidate: _Candidate, current: _Candidate) -> bool:
    if candidate.score != current.score:
        return candidate.score > current.score
    if candidate.history_count != current.history_count:
        return candidate.history_count > current.history_count
    return candidate.position < current.position


def classify(
    transactions: Sequence[ParsedTransaction],
    historical: Iterable[HistoricalAssignment],
    categories: Sequence[Category],
    min_score: float = DEFAULT_MIN_SCORE,
    rules: Iterable[ClassificationRule] = (),
) -> list[ClassificationResult]:
    """Classify transactions, one result per input in the same order.

    Args:
        transactions: Parsed transactions to classify
        historical: Previously saved description/category pairs
        categories: Candidate categories, in tie-break order
        min_score: Minimum score for a suggestion to be made
        rules: User rules; inactive ones are skipped

    Returns:
        List of ClassificationResult
    """
    history = historical if isinstance(historical, HistoryIndex) else HistoryIndex(historical)
    categories = tuple(categories)
    ranked = rank_rules(rules)

    results = [
        classify_transaction(txn, history, categories, min_score=min_score, rules=ranked)
        for txn in transactions
    ]

    classified = sum(1 for r in results if r.is_classified)
    logger.info(
        "Classified %d/%d transactions against %d categories",
        classified,
        len(results),
        len(categories),
    )
    return results


def build_history(transactions: Iterable[PersistedTransaction]) -> list[HistoricalAssignment]:
    """Turn classified persisted transactions into classification memory."""
    return [
        HistoricalAssignment(description=txn.description, category_id=txn.category_id)
        for txn in transactions
        if txn.is_classified
    ]

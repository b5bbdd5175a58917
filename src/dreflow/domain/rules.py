"""Classification rule domain service."""

import logging
from typing import Iterable, Optional, Union

from dreflow.database.base import Database
from dreflow.domain.category import normalize_keywords
from dreflow.domain.entities import ClassificationRule, TransactionKind
from dreflow.domain.errors import (
    NotFoundError,
    ValidationError,
    category_not_found,
    rule_not_found,
)

logger = logging.getLogger(__name__)


def parse_kind(value: Union[str, TransactionKind]) -> TransactionKind:
    """Parse a transaction kind.

    Raises:
        ValidationError: If the value is neither income nor expense
    """
    try:
        return TransactionKind(value.strip().lower() if isinstance(value, str) else value)
    except ValueError as e:
        raise ValidationError(f"Invalid kind '{value}'. Use income or expense") from e


class RuleService:
    """Service for managing classification rules."""

    def __init__(self, db: Database):
        """Initialize rule service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_rule(
        self,
        keywords: Iterable[str],
        category_id: int,
        kind: Union[str, TransactionKind],
        priority: int = 0,
    ) -> int:
        """Create an active rule.

        When imported, a transaction of ``kind`` whose description contains one
        of the keywords is suggested ``category_id`` ahead of keyword scoring.
        Higher priorities are tried first.

        Args:
            keywords: Keywords, normalized like category keywords
            category_id: Category the rule suggests
            kind: Kind of transaction the rule applies to
            priority: Order among rules, highest first

        Returns:
            Rule ID

        Raises:
            ValidationError: If no usable keyword is given or the kind is invalid
            NotFoundError: If the category doesn't exist
        """
        normalized = normalize_keywords(keywords)
        if not normalized:
            raise ValidationError("A rule needs at least one keyword")
        kind = parse_kind(kind)
        if self.db.get_category(category_id) is None:
            raise NotFoundError(category_not_found(category_id))

        rule_id = self.db.create_rule(normalized, category_id, kind, priority=priority)
        logger.info("Created rule %s -> category %s", rule_id, category_id)
        return rule_id

    def get_rule(self, rule_id: int) -> Optional[ClassificationRule]:
        return self.db.get_rule(rule_id)

    def list_rules(self, active_only: bool = False) -> list[ClassificationRule]:
        """List rules in the order the classifier tries them."""
        return self.db.list_rules(active_only=active_only)

    def set_active(self, rule_id: int, is_active: bool) -> None:
        """Enable or disable a rule.

        Raises:
            NotFoundError: If the rule doesn't exist
        """
        if self.db.get_rule(rule_id) is None:
            raise NotFoundError(rule_not_found(rule_id))
        self.db.set_rule_active(rule_id, is_active)

    def delete_rule(self, rule_id: int) -> None:
        self.db.delete_rule(rule_id)

"""Category domain service."""

from typing import Iterable, Optional, Union

from dreflow.database.base import Database
from dreflow.domain.classifier import DEFAULT_BUCKET_KEYWORDS
from dreflow.domain.entities import Category, DreBucket
from dreflow.domain.errors import NotFoundError, ValidationError, category_not_found
from dreflow.utils.text import normalize_text

# Default chart of accounts, one category per bucket, in statement order
DEFAULT_CATEGORIES = [
    ("Receita Bruta", DreBucket.RECEITA_BRUTA),
    ("Deduções da Receita", DreBucket.DEDUCOES_RECEITA),
    ("CPV / CMV / CSP", DreBucket.CUSTO_PRODUTOS),
    ("Despesas Administrativas", DreBucket.DESPESAS_ADMINISTRATIVAS),
    ("Despesas Comerciais", DreBucket.DESPESAS_COMERCIAIS),
    ("Despesas Gerais", DreBucket.DESPESAS_GERAIS),
    ("Depreciação e Amortização", DreBucket.DEPRECIACAO_AMORTIZACAO),
    ("Receitas Financeiras", DreBucket.RECEITAS_FINANCEIRAS),
    ("Despesas Financeiras", DreBucket.DESPESAS_FINANCEIRAS),
    ("Imposto de Renda", DreBucket.IMPOSTO_RENDA),
    ("CSLL", DreBucket.CSLL),
]


def parse_bucket(value: Union[str, DreBucket]) -> DreBucket:
    """Parse a bucket name.

    Raises:
        ValidationError: If the value is not one of the DreBucket values
    """
    try:
        return DreBucket(value.strip().lower() if isinstance(value, str) else value)
    except ValueError as e:
        valid = ", ".join(b.value for b in DreBucket)
        raise ValidationError(f"Invalid bucket '{value}'. Valid buckets: {valid}") from e


def normalize_keywords(keywords: Optional[Iterable[str]]) -> tuple[str, ...]:
    """Normalize keywords and drop blanks and duplicates, keeping order."""
    result: list[str] = []
    for keyword in keywords or ():
        normalized = normalize_text(keyword)
        if normalized and normalized not in result:
            result.append(normalized)
    return tuple(result)


class CategoryService:
    """Service for managing categories."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_category(
        self,
        name: str,
        bucket: Union[str, DreBucket],
        keywords: Optional[Iterable[str]] = None,
        position: Optional[int] = None,
    ) -> int:
        """Create a category.

        Args:
            name: Category name
            bucket: Statement line the category rolls up into
            keywords: Optional classifier keywords
            position: Optional display and tie-break position; appended when omitted

        Returns:
            Category ID

        Raises:
            ValidationError: If the name is empty or the bucket is invalid
            ConflictError: If a category with this name already exists
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Category name cannot be empty")

        return self.db.create_category(
            name=name,
            bucket=parse_bucket(bucket),
            keywords=normalize_keywords(keywords),
            position=position,
        )

    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID.

        Args:
            category_id: Category ID

        Returns:
            Category entity or None if not found
        """
        return self.db.get_category(category_id)

    def get_category_by_name(self, name: str) -> Optional[Category]:
        return self.db.get_category_by_name(name)

    def resolve_category(self, identifier: str) -> Category:
        """Find a category by ID or by exact name.

        Raises:
            NotFoundError: If no category matches
        """
        identifier = identifier.strip()
        if identifier.isdigit():
            category = self.db.get_category(int(identifier))
            if category is not None:
                return category
        category = self.db.get_category_by_name(identifier)
        if category is None:
            raise NotFoundError(f"Category '{identifier}' not found")
        return category

    def list_categories(self) -> list[Category]:
        """List categories in position order.

        Returns:
            List of Category entities
        """
        return self.db.list_categories()

    def set_keywords(self, category_id: int, keywords: Iterable[str]) -> None:
        """Replace the classifier keywords of a category.

        Raises:
            NotFoundError: If the category doesn't exist
        """
        if self.db.get_category(category_id) is None:
            raise NotFoundError(category_not_found(category_id))
        self.db.update_category_keywords(category_id, normalize_keywords(keywords))

    def delete_category(self, category_id: int) -> None:
        """Delete a category.

        Raises:
            NotFoundError: If the category doesn't exist
            ConflictError: If entries or transactions still reference it
        """
        self.db.delete_category(category_id)

    def seed_defaults(self) -> int:
        """Create the default categories that do not exist yet.

        Returns:
            Number of categories created
        """
        created = 0
        for name, bucket in DEFAULT_CATEGORIES:
            if self.db.get_category_by_name(name) is not None:
                continue
            self.create_category(name=name, bucket=bucket, keywords=DEFAULT_BUCKET_KEYWORDS[bucket])
            created += 1
        return created

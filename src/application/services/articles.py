"""Article service: cached CRUD and partial update for articles."""

from __future__ import annotations

from uuid import UUID

from src.domain.models.catalog import Article, ArticleDTO
from src.domain.repositories.articles import ArticleRepository
from src.domain.services.validation import FieldValidator
from src.infrastructure.cache.namespaces import ARTICLE_CACHES

from .cached import CachedEntityService
from .validators import in_range, is_absolute_path, is_non_blank, is_non_negative


class ArticleService(CachedEntityService[Article, ArticleDTO]):
    entity_type = "Article"
    record_type = Article
    dto_type = ArticleDTO
    namespaces = ARTICLE_CACHES

    def field_validator(self) -> FieldValidator:
        return (
            FieldValidator()
            .for_field("name", is_non_blank, "Article name must not be blank")
            .for_field("path", is_absolute_path, "Article path must start with '/'")
            .for_field("reading_minutes", is_non_negative, "Reading time must not be negative")
            .for_field("rating", in_range(0, 5, optional=True), "Rating must be between 0 and 5")
        )

    async def find_by_category(self, category_id: UUID) -> list[ArticleDTO]:
        """Uncached: every article filed under the category."""
        repository: ArticleRepository = self.repository  # type: ignore[assignment]
        return [self.to_dto(a) for a in await repository.list_by_category(category_id)]

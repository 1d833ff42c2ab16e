"""Article repository interface."""

from __future__ import annotations

from abc import abstractmethod
from uuid import UUID

from src.domain.models.catalog import Article
from src.domain.models.enums import ArticleStatus

from .base import NamedRecordRepository


class ArticleRepository(NamedRecordRepository[Article]):
    """Read/write interface for Article records.

    name and path are unique across all articles, not per category.
    """

    entity_type = "Article"

    @abstractmethod
    async def list(
        self,
        status: ArticleStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Article]:
        """Return a page of articles (newest first), optionally filtered by status."""

    @abstractmethod
    async def list_by_category(self, category_id: UUID) -> list[Article]:
        """Return every article filed under the given category."""

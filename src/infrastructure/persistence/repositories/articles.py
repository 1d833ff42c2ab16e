"""SQLAlchemy implementation of ArticleRepository."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select

from src.domain.models.catalog import Article as DomainArticle
from src.domain.models.enums import ArticleStatus
from src.domain.repositories.articles import ArticleRepository
from src.infrastructure.persistence.models.catalog import Article as OrmArticle

from .versioned import SqlVersionedRepository


class SqlArticleRepository(SqlVersionedRepository[DomainArticle], ArticleRepository):
    orm_model = OrmArticle

    @staticmethod
    def _to_domain(row: OrmArticle) -> DomainArticle:
        return DomainArticle(
            id=row.id,
            version=row.version,
            is_active=row.is_active,
            created_by=row.created_by,
            created_at=row.created_at,
            last_modified_by=row.last_modified_by,
            last_modified_at=row.last_modified_at,
            name=row.name,
            path=row.path,
            summary=row.summary,
            content=row.content,
            category_id=row.category_id,
            status=ArticleStatus(row.status),
            reading_minutes=row.reading_minutes,
            rating=row.rating,
            featured=row.featured,
            published_on=row.published_on,
            published_at=row.published_at,
            expires_at=row.expires_at,
        )

    def _write_columns(self, row: OrmArticle, entity: DomainArticle) -> None:
        row.name = entity.name
        row.path = entity.path
        row.summary = entity.summary
        row.content = entity.content
        row.category_id = entity.category_id
        row.status = entity.status.value
        row.reading_minutes = entity.reading_minutes
        row.rating = entity.rating
        row.featured = entity.featured
        row.published_on = entity.published_on
        row.published_at = entity.published_at
        row.expires_at = entity.expires_at

    async def list(
        self,
        status: ArticleStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[DomainArticle]:
        stmt = (
            select(OrmArticle)
            .order_by(OrmArticle.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        if status is not None:
            stmt = stmt.where(OrmArticle.status == status.value)
        result = await self._session.execute(stmt)
        return [self._to_domain(row) for row in result.scalars()]

    async def list_by_category(self, category_id: UUID) -> list[DomainArticle]:
        return await self._fetch_many(OrmArticle.category_id == category_id)

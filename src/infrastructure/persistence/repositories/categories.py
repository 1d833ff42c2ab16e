"""SQLAlchemy implementation of CategoryRepository."""

from __future__ import annotations

from sqlalchemy import select

from src.domain.models.catalog import Category as DomainCategory
from src.domain.models.enums import CategoryStatus
from src.domain.repositories.categories import CategoryRepository
from src.infrastructure.persistence.models.catalog import Category as OrmCategory

from .versioned import SqlVersionedRepository


class SqlCategoryRepository(SqlVersionedRepository[DomainCategory], CategoryRepository):
    orm_model = OrmCategory

    @staticmethod
    def _to_domain(row: OrmCategory) -> DomainCategory:
        return DomainCategory(
            id=row.id,
            version=row.version,
            is_active=row.is_active,
            created_by=row.created_by,
            created_at=row.created_at,
            last_modified_by=row.last_modified_by,
            last_modified_at=row.last_modified_at,
            name=row.name,
            path=row.path,
            status=CategoryStatus(row.status),
            sort_order=row.sort_order,
        )

    def _write_columns(self, row: OrmCategory, entity: DomainCategory) -> None:
        row.name = entity.name
        row.path = entity.path
        row.status = entity.status.value
        row.sort_order = entity.sort_order

    async def list(
        self,
        status: CategoryStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[DomainCategory]:
        stmt = (
            select(OrmCategory)
            .order_by(OrmCategory.sort_order, OrmCategory.name)
            .limit(limit)
            .offset(offset)
        )
        if status is not None:
            stmt = stmt.where(OrmCategory.status == status.value)
        result = await self._session.execute(stmt)
        return [self._to_domain(row) for row in result.scalars()]

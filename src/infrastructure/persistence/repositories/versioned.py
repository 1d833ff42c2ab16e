"""Shared SQLAlchemy plumbing for versioned, audited catalog tables.

Reads use populate_existing so a retry after a concurrent write observes the
row as it is now, not the copy cached in the session's identity map.  Every
flush runs inside a SAVEPOINT: when the version check fails the savepoint is
rolled back and the session stays usable for the caller's next attempt.
"""

from __future__ import annotations

from abc import abstractmethod
from datetime import datetime, timezone
from typing import Any, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from src.domain.errors import RecordNotFound
from src.domain.models.base import VersionedRecord
from src.domain.repositories.base import NamedRecordRepository, StaleRecordError

R = TypeVar("R", bound=VersionedRecord)


class SqlVersionedRepository(NamedRecordRepository[R]):
    """Base for SQL repositories over tables mapped with version_id_col."""

    orm_model: Any

    def __init__(self, session: AsyncSession, actor: str = "system") -> None:
        self._session = session
        self._actor = actor

    @staticmethod
    @abstractmethod
    def _to_domain(row: Any) -> R:
        """Map an ORM row to its domain record."""

    @abstractmethod
    def _write_columns(self, row: Any, entity: R) -> None:
        """Copy the client-writable columns from entity onto row."""

    # ------------------------------------------------------------------ #
    # Reads                                                                #
    # ------------------------------------------------------------------ #

    async def _fetch_one(self, *criteria: Any) -> Any:
        stmt = (
            select(self.orm_model)
            .where(*criteria)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def _fetch_many(self, *criteria: Any) -> list[R]:
        stmt = (
            select(self.orm_model)
            .where(*criteria)
            .order_by(self.orm_model.created_at)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return [self._to_domain(row) for row in result.scalars()]

    async def get_by_id(self, record_id: UUID) -> R | None:
        row = await self._fetch_one(self.orm_model.id == record_id)
        return self._to_domain(row) if row else None

    async def get_by_name(self, name: str) -> R | None:
        row = await self._fetch_one(self.orm_model.name == name)
        return self._to_domain(row) if row else None

    async def get_by_path(self, path: str) -> R | None:
        row = await self._fetch_one(self.orm_model.path == path)
        return self._to_domain(row) if row else None

    async def list_all(self) -> list[R]:
        return await self._fetch_many()

    async def find_by_created_by(self, created_by: str) -> list[R]:
        return await self._fetch_many(self.orm_model.created_by == created_by)

    async def find_by_created_between(self, start: datetime, end: datetime) -> list[R]:
        return await self._fetch_many(self.orm_model.created_at.between(start, end))

    async def _current_version(self, record_id: UUID | None) -> int | None:
        stmt = select(self.orm_model.version).where(self.orm_model.id == record_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    # ------------------------------------------------------------------ #
    # Writes                                                               #
    # ------------------------------------------------------------------ #

    async def create(self, entity: R) -> R:
        row = self.orm_model()
        self._write_columns(row, entity)
        row.is_active = entity.is_active
        row.created_by = self._actor
        row.last_modified_by = self._actor
        async with self._session.begin_nested():
            self._session.add(row)
            await self._session.flush()
        return self._to_domain(row)

    async def update(self, entity: R) -> R:
        row = await self._fetch_one(self.orm_model.id == entity.id)
        if row is None:
            raise RecordNotFound(self.entity_type, entity.id)
        if entity.version is not None and entity.version != row.version:
            raise StaleRecordError(entity.id, row.version)

        try:
            async with self._session.begin_nested():
                self._write_columns(row, entity)
                row.is_active = entity.is_active
                row.last_modified_by = self._actor
                # Always dirty the row so every accepted write bumps the version.
                row.last_modified_at = datetime.now(timezone.utc)
                await self._session.flush()
        except StaleDataError as exc:
            raise StaleRecordError(entity.id, await self._current_version(entity.id)) from exc
        return self._to_domain(row)

    async def delete(self, id: UUID) -> None:
        row = await self._fetch_one(self.orm_model.id == id)
        if row is None:
            return
        try:
            async with self._session.begin_nested():
                await self._session.delete(row)
                await self._session.flush()
        except StaleDataError as exc:
            raise StaleRecordError(id, await self._current_version(id)) from exc

"""Generic repository base interfaces.

Repository[T] is the root abstraction for all data-access interfaces in this
domain layer.  Concrete implementations live in src/infrastructure/persistence/
and are wired at the application boundary via dependency injection.

Design notes:
  - All methods are async to accommodate async database drivers (asyncpg / SQLAlchemy async).
  - T is the domain model type (never an ORM row or DTO).
  - list() accepts only limit/offset; domain-specific filters are declared
    on each specialised interface (Interface Segregation Principle).
  - VersionedRepository adds the optimistic-concurrency contract: the store
    owns id, version and audit columns, and update() rejects a write whose
    version does not match the persisted one by raising StaleRecordError.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Generic, TypeVar
from uuid import UUID

from src.domain.models.base import VersionedRecord

T = TypeVar("T")
R = TypeVar("R", bound=VersionedRecord)


class StaleRecordError(Exception):
    """The store refused a write because the record's version moved on.

    current_version is the persisted version when the store observed it
    (pre-write check) and None when the conflict surfaced at flush time.
    """

    def __init__(self, entity_id: UUID | None, current_version: int | None = None) -> None:
        super().__init__(
            f"Record {entity_id} was modified concurrently "
            f"(current version: {current_version if current_version is not None else 'unknown'})"
        )
        self.entity_id = entity_id
        self.current_version = current_version


class Repository(ABC, Generic[T]):
    """Abstract CRUD interface for a domain aggregate or entity."""

    @abstractmethod
    async def get(self, id: UUID) -> T | None:
        """Return the entity with the given primary key, or None if not found."""

    @abstractmethod
    async def list(self, limit: int = 50, offset: int = 0) -> list[T]:
        """Return a page of entities ordered by creation time (newest first)."""

    @abstractmethod
    async def create(self, entity: T) -> T:
        """Persist a new entity and return it (with any DB-generated fields populated)."""

    @abstractmethod
    async def update(self, entity: T) -> T:
        """Persist changes to an existing entity and return the updated version."""

    @abstractmethod
    async def delete(self, id: UUID) -> None:
        """Remove the entity with the given primary key."""


class VersionedRepository(Repository[R]):
    """CRUD interface for records guarded by an optimistic-concurrency version.

    create() returns the record with id, version (1) and audit columns
    populated by the store.  update() returns the record at its incremented
    version; it raises StaleRecordError when entity.version is set and differs
    from the stored version, or when the store's own check fails at write time.
    """

    entity_type: str = "Record"

    async def get(self, id: UUID) -> R | None:
        """Delegate to get_by_id for a consistent base-interface contract."""
        return await self.get_by_id(id)

    @abstractmethod
    async def get_by_id(self, record_id: UUID) -> R | None:
        """Return the record with the given ID, or None."""

    @abstractmethod
    async def list_all(self) -> list[R]:
        """Return every record, oldest first."""

    @abstractmethod
    async def find_by_created_by(self, created_by: str) -> list[R]:
        """Return records created by the given user."""

    @abstractmethod
    async def find_by_created_between(self, start: datetime, end: datetime) -> list[R]:
        """Return records whose created_at falls in [start, end]."""


class NamedRecordRepository(VersionedRepository[R]):
    """Versioned records addressable by a unique natural name and path."""

    @abstractmethod
    async def get_by_name(self, name: str) -> R | None:
        """Return the record with the given name (exact match), or None."""

    @abstractmethod
    async def get_by_path(self, path: str) -> R | None:
        """Return the record with the given path (exact match), or None."""

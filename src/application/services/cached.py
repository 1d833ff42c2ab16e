"""Cache-coherent entity service base.

Read paths go through the cache (read-through: on a miss the store is
consulted and the result cached); every write path invalidates all cached
aliases of the record, under both its previous and its new natural keys.

Lookup → namespace / key:

    find_by_id(id)            <type>          dto_<id>
    get_record(id)            <type>          entity_<id>
    get_by_name(name)         <type>_by_name  entity_<name>
    get_dto_by_name(name)     <type>_by_name  dto_<name>
    get_by_path(path)         <type>_by_path  entity_<path>
    get_dto_by_path(path)     <type>_by_path  dto_<path>
    find_all()                all_<types>     dto_all

Not-found results are not cached.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar
from uuid import UUID

from src.domain.errors import FieldValidationFailure, RecordNotFound
from src.domain.models.base import TransferObject, VersionedRecord
from src.domain.models.updates import PartialUpdate
from src.domain.repositories.base import NamedRecordRepository
from src.domain.services.crud import CrudService
from src.infrastructure.cache.invalidation import CacheInvalidationService
from src.infrastructure.cache.namespaces import (
    ALL_RECORDS_KEY,
    CacheNamespaces,
    dto_key,
    entity_key,
)
from src.infrastructure.cache.service import CacheService

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=VersionedRecord)
D = TypeVar("D", bound=TransferObject)
T = TypeVar("T")


class CachedEntityService(CrudService[R, D]):
    """CrudService over a named record type, fronted by the Redis cache."""

    namespaces: CacheNamespaces
    record_type: type[VersionedRecord] = VersionedRecord

    def __init__(
        self,
        repository: NamedRecordRepository[R],
        cache: CacheService,
        invalidation: CacheInvalidationService | None = None,
        **engine_options: Any,
    ) -> None:
        super().__init__(**engine_options)
        self._repository = repository
        self._cache = cache
        self._invalidation = invalidation or CacheInvalidationService(cache)

    @property
    def repository(self) -> NamedRecordRepository[R]:
        return self._repository

    def to_record(self, dto: D) -> R:
        return self.record_type.model_validate(dto.model_dump())  # type: ignore[return-value]

    def to_dto(self, record: R) -> D:
        return self.dto_type.model_validate(record.model_dump())  # type: ignore[return-value]

    async def _read_through(
        self,
        namespace: str,
        key: str,
        type_: Any,
        load: Callable[[], Awaitable[T | None]],
    ) -> T | None:
        cached = await self._cache.get(namespace, key, type_)
        if cached is not None:
            return cached
        value = await load()
        logger.debug("Loaded %s/%s from the store", namespace, key)
        if value is not None:
            await self._cache.put(namespace, key, value)
        return value

    # ------------------------------------------------------------------ #
    # Cached reads                                                         #
    # ------------------------------------------------------------------ #

    async def find_by_id(self, record_id: UUID) -> D:
        key = dto_key(record_id)
        cached = await self._cache.get(self.namespaces.by_id, key, self.dto_type)
        if cached is not None:
            return cached
        dto = await super().find_by_id(record_id)
        await self._cache.put(self.namespaces.by_id, key, dto)
        return dto

    async def get_record(self, record_id: UUID) -> R:
        key = entity_key(record_id)
        cached = await self._cache.get(self.namespaces.by_id, key, self.record_type)
        if cached is not None:
            return cached
        record = await self._load(record_id)
        await self._cache.put(self.namespaces.by_id, key, record)
        return record

    async def get_by_name_or_none(self, name: str) -> R | None:
        return await self._read_through(
            self.namespaces.by_name,
            entity_key(name),
            self.record_type,
            lambda: self.repository.get_by_name(name),
        )

    async def get_by_name(self, name: str) -> R:
        record = await self.get_by_name_or_none(name)
        if record is None:
            raise RecordNotFound(self.entity_type, name, key_name="name")
        return record

    async def get_dto_by_name(self, name: str) -> D:
        dto = await self._read_through(
            self.namespaces.by_name,
            dto_key(name),
            self.dto_type,
            lambda: self._dto_or_none(self.repository.get_by_name(name)),
        )
        if dto is None:
            raise RecordNotFound(self.entity_type, name, key_name="name")
        return dto

    async def get_by_path_or_none(self, path: str) -> R | None:
        return await self._read_through(
            self.namespaces.by_path,
            entity_key(path),
            self.record_type,
            lambda: self.repository.get_by_path(path),
        )

    async def get_by_path(self, path: str) -> R:
        record = await self.get_by_path_or_none(path)
        if record is None:
            raise RecordNotFound(self.entity_type, path, key_name="path")
        return record

    async def get_dto_by_path(self, path: str) -> D:
        dto = await self._read_through(
            self.namespaces.by_path,
            dto_key(path),
            self.dto_type,
            lambda: self._dto_or_none(self.repository.get_by_path(path)),
        )
        if dto is None:
            raise RecordNotFound(self.entity_type, path, key_name="path")
        return dto

    async def find_all(self) -> list[D]:
        cached = await self._cache.get(
            self.namespaces.all_records, ALL_RECORDS_KEY, list[self.dto_type]  # type: ignore[valid-type]
        )
        if cached is not None:
            return cached
        dtos = await super().find_all()
        await self._cache.put(self.namespaces.all_records, ALL_RECORDS_KEY, dtos)
        return dtos

    async def _dto_or_none(self, pending: Awaitable[R | None]) -> D | None:
        record = await pending
        return self.to_dto(record) if record is not None else None

    # ------------------------------------------------------------------ #
    # Whole-object validation                                              #
    # ------------------------------------------------------------------ #

    def validate_before_create(self, dto: D) -> None:
        self._validate_values(dto)

    def validate_before_update(self, dto: D) -> None:
        super().validate_before_update(dto)
        self._validate_values(dto)

    def _validate_values(self, dto: D) -> None:
        errors = self.field_validator().validate_fields(dto.model_dump())
        if errors:
            raise FieldValidationFailure.from_field_errors(errors)

    # ------------------------------------------------------------------ #
    # Invalidation hooks                                                   #
    # ------------------------------------------------------------------ #

    async def after_create(self, record: R, dto: D) -> None:
        await self._invalidation.invalidate_record(self.namespaces, record)

    async def after_update(self, record: R, dto: D, existing: R) -> None:
        await self._invalidation.invalidate_record(self.namespaces, record, existing)

    async def after_partial_update(self, record: R, request: PartialUpdate, existing: R) -> None:
        await self._invalidation.invalidate_record(self.namespaces, record, existing)

    async def after_delete(self, record: R) -> None:
        await self._invalidation.invalidate_record(self.namespaces, record)

    async def after_status_change(self, record: R, existing: R) -> None:
        await self._invalidation.invalidate_record(self.namespaces, record, existing)

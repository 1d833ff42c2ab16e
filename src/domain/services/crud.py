"""Generic create / update / partial-update engine for versioned records.

CrudService[R, D] works against a VersionedRepository of records R and
exposes transfer objects D to its callers.  Concurrency control is purely
optimistic: no locks are held between read and write, and the store's
version check decides which concurrent writer wins.

Full update surfaces a version conflict immediately; the caller is expected
to reload and resubmit.  Partial update re-reads, merges and writes, so a
conflict only needs the version re-resolved:

    Attempt ──version mismatch / stale write──▶ Conflict
       ▲                                          │
       └──── attempts < max: realign version ─────┤
                                                  ▼
    Committed ◀── write accepted        Exhausted (RetryExhausted raised)

RecordNotFound, FieldValidationFailure and ConversionFailure are caller
errors and are never retried.

Subclasses bind the repository and the record ↔ transfer-object mapping and
may override any of the validate_* / prepare_* / after_* hooks.  Cache
invalidation belongs in the after_* hooks of the entity-specific service.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any, Generic, TypeVar
from uuid import UUID

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
    wait_none,
)

from src.domain.errors import (
    FieldValidationFailure,
    OptimisticConflict,
    RecordNotFound,
    RetryExhausted,
)
from src.domain.models.base import TransferObject, VersionedRecord
from src.domain.models.updates import PartialUpdate
from src.domain.repositories.base import StaleRecordError, VersionedRepository

from .field_policy import FieldPolicy
from .validation import FieldValidator

logger = logging.getLogger(__name__)

MAX_RETRY_ATTEMPTS = 3

R = TypeVar("R", bound=VersionedRecord)
D = TypeVar("D", bound=TransferObject)


class CrudService(ABC, Generic[R, D]):
    """Optimistic-concurrency CRUD over one record type."""

    entity_type: str = "Record"
    dto_type: type[TransferObject] = TransferObject

    def __init__(
        self,
        *,
        max_retry_attempts: int = MAX_RETRY_ATTEMPTS,
        retry_backoff_initial: float = 0.0,
        retry_backoff_max: float = 0.0,
        strict_booleans: bool = True,
    ) -> None:
        if max_retry_attempts < 1:
            raise ValueError("max_retry_attempts must be at least 1")
        self.max_retry_attempts = max_retry_attempts
        self.retry_backoff_initial = retry_backoff_initial
        self.retry_backoff_max = retry_backoff_max
        self.strict_booleans = strict_booleans

    # ------------------------------------------------------------------ #
    # Bindings                                                             #
    # ------------------------------------------------------------------ #

    @property
    @abstractmethod
    def repository(self) -> VersionedRepository[R]:
        """The record store for this record type."""

    @abstractmethod
    def to_record(self, dto: D) -> R:
        """Map a transfer object to its record representation."""

    @abstractmethod
    def to_dto(self, record: R) -> D:
        """Map a record to its transfer-object representation."""

    def field_validator(self) -> FieldValidator:
        """Per-field validators applied to sparse updates.  None by default."""
        return FieldValidator()

    @property
    def field_policy(self) -> FieldPolicy:
        return FieldPolicy.for_model(self.dto_type)

    # ------------------------------------------------------------------ #
    # Reads                                                                #
    # ------------------------------------------------------------------ #

    async def find_by_id(self, record_id: UUID) -> D:
        return self.to_dto(await self._load(record_id))

    async def find_all(self) -> list[D]:
        return [self.to_dto(r) for r in await self.repository.list_all()]

    async def find_by_created_by(self, created_by: str) -> list[D]:
        return [self.to_dto(r) for r in await self.repository.find_by_created_by(created_by)]

    async def find_by_date_range(self, start: datetime, end: datetime) -> list[D]:
        records = await self.repository.find_by_created_between(start, end)
        return [self.to_dto(r) for r in records]

    # ------------------------------------------------------------------ #
    # Writes                                                               #
    # ------------------------------------------------------------------ #

    async def create(self, dto: D) -> D:
        self.validate_before_create(dto)
        record = self.prepare_for_create(self.to_record(dto), dto)
        saved = await self.repository.create(record)
        await self.after_create(saved, dto)
        logger.debug("Created %s %s", self.entity_type, saved.id)
        return self.to_dto(saved)

    async def update(self, dto: D) -> D:
        self.validate_before_update(dto)
        existing = await self._load(dto.id)

        record = self.to_record(dto)
        if record.version is None:
            record = record.model_copy(update={"version": existing.version})
        record = self.prepare_for_update(record, existing)

        try:
            saved = await self.repository.update(record)
        except StaleRecordError as exc:
            raise OptimisticConflict(
                record.id, None, record.version, self.entity_type
            ) from exc

        await self.after_update(saved, dto, existing)
        return self.to_dto(saved)

    async def partial_update(self, record_id: UUID, request: PartialUpdate) -> D:
        """Apply a sparse set of field changes, retrying version conflicts.

        The caller's request is not modified; retries work on a copy whose
        explicit version (if any) is realigned to the conflicting record's
        current version before the next attempt.
        """
        pending = request.model_copy()
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retry_attempts),
            wait=self._retry_wait(),
            retry=retry_if_exception_type(OptimisticConflict),
            before_sleep=self._realign_version(pending),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    result = await self._attempt_partial_update(record_id, pending)
        except OptimisticConflict as conflict:
            logger.error(
                "Failed to update %s %s after %d retry attempts",
                self.entity_type,
                record_id,
                self.max_retry_attempts,
            )
            raise RetryExhausted(conflict, self.max_retry_attempts) from conflict
        return result

    async def delete(self, record_id: UUID) -> D:
        """Remove the record and return its last representation."""
        record = await self._load(record_id)
        await self.repository.delete(record_id)
        await self.after_delete(record)
        return self.to_dto(record)

    async def activate(self, record_id: UUID) -> D:
        return await self._set_active(record_id, True)

    async def deactivate(self, record_id: UUID) -> D:
        return await self._set_active(record_id, False)

    # ------------------------------------------------------------------ #
    # Hooks                                                                #
    # ------------------------------------------------------------------ #

    def validate_before_create(self, dto: D) -> None:
        pass

    def validate_before_update(self, dto: D) -> None:
        if dto.id is None:
            raise FieldValidationFailure("ID must not be null for update")

    def validate_fields_before_partial_update(self, fields: Mapping[str, Any]) -> None:
        errors = self.field_validator().validate_fields(fields)
        if errors:
            raise FieldValidationFailure.from_field_errors(errors)

    def validate_before_partial_update(self, dto: D, fields: Mapping[str, Any]) -> None:
        self.validate_before_update(dto)

    def prepare_for_create(self, record: R, dto: D) -> R:
        return record

    def prepare_for_update(self, record: R, existing: R) -> R:
        return record

    async def after_create(self, record: R, dto: D) -> None:
        pass

    async def after_update(self, record: R, dto: D, existing: R) -> None:
        pass

    async def after_partial_update(self, record: R, request: PartialUpdate, existing: R) -> None:
        pass

    async def after_delete(self, record: R) -> None:
        pass

    async def after_status_change(self, record: R, existing: R) -> None:
        pass

    # ------------------------------------------------------------------ #
    # Internals                                                            #
    # ------------------------------------------------------------------ #

    async def _load(self, record_id: UUID | None) -> R:
        record = await self.repository.get_by_id(record_id) if record_id is not None else None
        if record is None:
            raise RecordNotFound(self.entity_type, record_id)
        return record

    async def _attempt_partial_update(self, record_id: UUID, request: PartialUpdate) -> D:
        current = await self._load(record_id)
        if request.version is not None and request.version != current.version:
            raise OptimisticConflict(
                current.id, current.version, request.version, self.entity_type
            )

        self.validate_fields_before_partial_update(request.fields)
        merged = self.field_policy.apply(
            self.to_dto(current), request.fields, self.strict_booleans
        )
        self.validate_before_partial_update(merged, request.fields)

        record = self.to_record(merged)
        try:
            saved = await self.repository.update(record)
        except StaleRecordError as exc:
            raise OptimisticConflict(
                current.id,
                exc.current_version,
                record.version,
                self.entity_type,
                message="Entity has been modified by another user during save",
            ) from exc

        await self.after_partial_update(saved, request, current)
        logger.debug(
            "Partially updated %s %s to version %s", self.entity_type, saved.id, saved.version
        )
        return self.to_dto(saved)

    async def _set_active(self, record_id: UUID, active: bool) -> D:
        existing = await self._load(record_id)
        try:
            saved = await self.repository.update(
                existing.model_copy(update={"is_active": active})
            )
        except StaleRecordError as exc:
            raise OptimisticConflict(
                existing.id, exc.current_version, existing.version, self.entity_type
            ) from exc
        await self.after_status_change(saved, existing)
        return self.to_dto(saved)

    def _retry_wait(self):  # type: ignore[no-untyped-def]
        if self.retry_backoff_initial <= 0:
            return wait_none()
        return wait_exponential_jitter(
            initial=self.retry_backoff_initial,
            max=max(self.retry_backoff_max, self.retry_backoff_initial),
            jitter=self.retry_backoff_initial,
        )

    def _realign_version(self, request: PartialUpdate) -> Callable[[RetryCallState], None]:
        def before_sleep(retry_state: RetryCallState) -> None:
            conflict = retry_state.outcome.exception() if retry_state.outcome else None
            logger.warning(
                "Optimistic lock conflict detected on %s. Retrying update attempt %d/%d",
                self.entity_type,
                retry_state.attempt_number,
                self.max_retry_attempts,
            )
            if (
                isinstance(conflict, OptimisticConflict)
                and request.version is not None
                and conflict.current_version is not None
            ):
                request.version = conflict.current_version

        return before_sleep

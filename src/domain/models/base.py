"""Versioned record and transfer-object base models.

These are pure domain objects with no ORM or persistence concerns.

VersionedRecord is the store's view of an entity: id and version are
assigned by the record store, the audit columns are written by it and never
taken from a client.  TransferObject is the wire-facing twin that partial
updates are merged into; each concrete subclass declares the fields a sparse
update may touch in ``updatable_fields``.
"""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class VersionedRecord(BaseModel):
    """Persisted entity carrying an optimistic-concurrency version counter.

    version is None until the store has persisted the record; the store
    starts it at 1 and increments it on every accepted write.
    """

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: UUID | None = None
    version: int | None = None
    is_active: bool = True
    created_by: str | None = None
    created_at: datetime | None = None
    last_modified_by: str | None = None
    last_modified_at: datetime | None = None


class TransferObject(BaseModel):
    """Wire representation of a versioned record.

    Instances are treated as immutable values: partial updates produce a new
    object through model_validate rather than assigning attributes.
    """

    model_config = ConfigDict(frozen=True, from_attributes=True)

    # Field Update Policy: names a sparse update is allowed to change.
    updatable_fields: ClassVar[frozenset[str]] = frozenset()

    id: UUID | None = None
    version: int | None = None
    is_active: bool = True
    created_by: str | None = None
    created_at: datetime | None = None
    last_modified_by: str | None = None
    last_modified_at: datetime | None = None

"""Sparse update request model.

Wire shape:

    {"id": "<uuid>", "version": 3, "fields": {"name": "New name", ...}}

version is optional.  When present it is the version the client believes is
current; a mismatch is treated as an optimistic-concurrency conflict.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class PartialUpdate(BaseModel):
    """A client-submitted set of named field changes for one record."""

    id: UUID | None = None
    version: int | None = None
    fields: dict[str, Any] = Field(default_factory=dict)

    def has_field(self, name: str) -> bool:
        return name in self.fields

    def get_field(self, name: str) -> Any:
        return self.fields.get(name)

    def set_field(self, name: str, value: Any) -> None:
        self.fields[name] = value

"""Field Update Policy: which transfer-object fields a sparse update may set.

A FieldPolicy is built once per transfer-object class from its pydantic
model_fields and its ``updatable_fields`` allow-list.  It maps each field
name to a FieldSpec (annotation, resolved coercion target, allow-list flag)
so partial updates dispatch by name without any runtime attribute probing.

Names outside the allow-list are rejected, never silently dropped.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from functools import cache
from typing import Any, TypeVar

from pydantic import ValidationError

from src.domain.errors import FieldValidationFailure
from src.domain.models.base import TransferObject

from .coercion import ResolvedTarget, convert, resolve_target

D = TypeVar("D", bound=TransferObject)


@dataclass(frozen=True)
class FieldSpec:
    name: str
    annotation: Any
    target: ResolvedTarget
    updatable: bool

    def coerce(self, value: Any, strict_booleans: bool = True) -> Any:
        return convert(value, self.target, field=self.name, strict_booleans=strict_booleans)


class FieldPolicy:
    """Name-indexed field registry for one transfer-object type."""

    def __init__(self, model: type[TransferObject], specs: dict[str, FieldSpec]) -> None:
        self.model = model
        self._specs = specs

    @classmethod
    def for_model(cls, model: type[TransferObject]) -> FieldPolicy:
        """Return the (cached) policy for a transfer-object class."""
        return _build_policy(model)

    @property
    def updatable(self) -> frozenset[str]:
        return frozenset(name for name, spec in self._specs.items() if spec.updatable)

    def resolve(self, name: str) -> FieldSpec:
        spec = self._specs.get(name)
        if spec is None:
            raise FieldValidationFailure(f"Unknown field: {name}")
        if not spec.updatable:
            raise FieldValidationFailure(f"Field '{name}' does not support partial update")
        return spec

    def coerce_fields(
        self, fields: Mapping[str, Any], strict_booleans: bool = True
    ) -> dict[str, Any]:
        """Resolve and coerce every field; raises on the first bad one."""
        return {
            name: self.resolve(name).coerce(value, strict_booleans)
            for name, value in fields.items()
        }

    def apply(self, target: D, fields: Mapping[str, Any], strict_booleans: bool = True) -> D:
        """Return a new, validated object with the coerced fields applied.

        Every field is resolved and coerced before anything is applied, so a
        failure leaves no partially merged object behind.  A value the model
        rejects (None for a required field, say) raises FieldValidationFailure.
        """
        changes = self.coerce_fields(fields, strict_booleans)
        try:
            return type(target).model_validate({**target.model_dump(), **changes})
        except ValidationError as exc:
            raise FieldValidationFailure.from_field_errors(
                {".".join(map(str, err["loc"])): err["msg"] for err in exc.errors()}
            ) from exc


@cache
def _build_policy(model: type[TransferObject]) -> FieldPolicy:
    allowed = model.updatable_fields
    unknown = allowed - model.model_fields.keys()
    if unknown:
        raise TypeError(f"{model.__name__}.updatable_fields names unknown fields: {sorted(unknown)}")
    specs = {
        name: FieldSpec(
            name=name,
            annotation=info.annotation,
            target=resolve_target(info.annotation),
            updatable=name in allowed,
        )
        for name, info in model.model_fields.items()
    }
    return FieldPolicy(model, specs)

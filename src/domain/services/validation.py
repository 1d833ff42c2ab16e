"""Per-field predicate registry for sparse-update validation."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

Predicate = Callable[[Any], bool]


class FieldValidator:
    """Registers and runs validators for specific fields.

    Fields without a registered validator always pass.  Predicates receive
    the raw wire value, before coercion.

        validator = (
            FieldValidator()
            .for_field("name", lambda v: bool(str(v).strip()), "must not be blank")
            .for_field("path", lambda v: str(v).startswith("/"), "must start with '/'")
        )
    """

    def __init__(self) -> None:
        self._validators: dict[str, Predicate] = {}
        self._messages: dict[str, str] = {}

    def for_field(self, name: str, predicate: Predicate, message: str) -> FieldValidator:
        self._validators[name] = predicate
        self._messages[name] = message
        return self

    def validate_field(self, name: str, value: Any) -> bool:
        predicate = self._validators.get(name)
        return predicate is None or bool(predicate(value))

    def error_message(self, name: str) -> str | None:
        return self._messages.get(name)

    def validate_fields(self, values: Mapping[str, Any]) -> dict[str, str]:
        """Return field name → error message for every failing field."""
        return {
            name: self._messages[name]
            for name, value in values.items()
            if not self.validate_field(name, value)
        }

"""Domain error taxonomy.

Every failure the update engine surfaces is a CatalogError carrying a stable
error_code, a human-readable message and, where several problems were found
at once, a list of individual errors.  to_response() renders the wire shape
the HTTP boundary maps to a status code:

    {"errorCode": "...", "message": "...", "errors": ["..."]}

Record-store and validation errors propagate to the caller.
CacheOperationFailure is the exception: it is built and logged inside the
cache layer and never escapes it.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ErrorResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    error_code: str
    message: str
    errors: list[str] | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_wire(self) -> dict[str, Any]:
        """camelCase dict with errors omitted when absent."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class CatalogError(Exception):
    error_code = "CATALOG_ERROR"

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.errors = errors

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            error_code=self.error_code, message=self.message, errors=self.errors
        )


class RecordNotFound(CatalogError):
    """The target id (or natural key) does not exist in the store.  Never retried."""

    error_code = "RESOURCE_NOT_FOUND"

    def __init__(self, entity_type: str, entity_id: Any, key_name: str = "id") -> None:
        super().__init__(f"{entity_type} not found with {key_name}: {entity_id}")
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.key_name = key_name


class OptimisticConflict(CatalogError):
    """The store's version check failed.

    current_version is the version actually persisted when it is known;
    None means the conflict was detected by the store at write time and the
    winning version was not observed.
    """

    error_code = "OPTIMISTIC_LOCK_ERROR"

    def __init__(
        self,
        entity_id: Any,
        current_version: int | None,
        attempted_version: int | None,
        entity_type: str,
        message: str = "Entity has been modified by another user",
    ) -> None:
        super().__init__(message)
        self.entity_id = entity_id
        self.current_version = current_version
        self.attempted_version = attempted_version
        self.entity_type = entity_type


class RetryExhausted(OptimisticConflict):
    """Raised when partial update gives up after its bounded retries.

    Carries the context of the last conflict so callers can reload at
    current_version and resubmit.
    """

    error_code = "OPTIMISTIC_LOCK_RETRY_EXHAUSTED"

    def __init__(self, conflict: OptimisticConflict, attempts: int) -> None:
        super().__init__(
            conflict.entity_id,
            conflict.current_version,
            conflict.attempted_version,
            conflict.entity_type,
            message=f"Failed to update {conflict.entity_type} after {attempts} attempts: "
            f"{conflict.message}",
        )
        self.attempts = attempts


class FieldValidationFailure(CatalogError):
    """Unknown field, non-updatable field, or business-rule violation.  Caller error."""

    error_code = "BUSINESS_VALIDATION_FAILED"

    @classmethod
    def from_field_errors(cls, field_errors: dict[str, str]) -> FieldValidationFailure:
        errors = [f"{name}: {message}" for name, message in field_errors.items()]
        message = "Field validation failed:" + "".join(f"\n- {e}" for e in errors)
        return cls(message, errors)


class ConversionFailure(CatalogError):
    """A submitted value could not be coerced to the field's type.  Caller error."""

    error_code = "CONVERSION_FAILED"

    def __init__(self, value: Any, target: str, field: str | None = None) -> None:
        where = f" for field '{field}'" if field else ""
        super().__init__(f"Cannot convert {value!r} to {target}{where}")
        self.value = value
        self.target = target
        self.field = field


class CacheOperationFailure(CatalogError):
    """A cache read, write or eviction failed.  Logged, never propagated."""

    error_code = "CACHE_OPERATION_FAILED"

    def __init__(
        self,
        operation: str,
        namespace: str | None,
        key: str | None,
        cause: BaseException,
    ) -> None:
        target = namespace if key is None else f"{namespace}/{key}"
        super().__init__(f"Cache {operation} failed for '{target}': {cause}")
        self.operation = operation
        self.namespace = namespace
        self.key = key
        self.cause = cause

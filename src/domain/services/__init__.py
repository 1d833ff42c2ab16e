"""Domain services package."""

from .coercion import TargetType, coerce, convert, resolve_target
from .crud import MAX_RETRY_ATTEMPTS, CrudService
from .field_policy import FieldPolicy, FieldSpec
from .validation import FieldValidator

__all__ = [
    "MAX_RETRY_ATTEMPTS",
    "CrudService",
    "FieldPolicy",
    "FieldSpec",
    "FieldValidator",
    "TargetType",
    "coerce",
    "convert",
    "resolve_target",
]

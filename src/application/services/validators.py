"""Reusable field predicates for the catalog services.

Predicates see the raw wire value of a sparse update (before coercion) as
well as typed values on whole-object checks, so numeric checks accept both
numbers and numeric strings.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any


def _as_decimal(value: Any) -> Decimal | None:
    if isinstance(value, bool):
        return None
    try:
        return Decimal(str(value).strip())
    except InvalidOperation:
        return None


def is_non_blank(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def is_absolute_path(value: Any) -> bool:
    return isinstance(value, str) and value.startswith("/")


def is_non_negative(value: Any) -> bool:
    number = _as_decimal(value)
    return number is not None and number.is_finite() and number >= 0


def in_range(low: float, high: float, *, optional: bool = False):  # type: ignore[no-untyped-def]
    def predicate(value: Any) -> bool:
        if value is None:
            return optional
        number = _as_decimal(value)
        return number is not None and number.is_finite() and low <= number <= high

    return predicate

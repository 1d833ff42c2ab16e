"""Field coercion: wire values to statically typed field values.

Sparse updates arrive as JSON, so a field value is one of a small closed set
of shapes (WireValue): string, number, boolean or null.  coerce() converts
such a value into the type declared on a transfer-object field.

Supported targets and accepted inputs:

    str        any value (booleans render as "true"/"false", temporals as ISO-8601)
    int        int, float/Decimal (truncated), numeric string
    float      int, float, Decimal, numeric string
    bool       bool, number (zero is False), string token (see below)
    Decimal    int, float (via its repr), Decimal, numeric string
    Enum       member, or string matching a member name or value (case-sensitive)
    date       date, datetime (date part), epoch milliseconds, string
    datetime   datetime, date (midnight), epoch milliseconds, string; always naive,
               offsets are converted to UTC and dropped
    instant    as datetime, normalised to an aware UTC datetime
               (pydantic AwareDatetime fields)

Temporal strings are tried against ISO-8601 first, then each fallback
pattern in DATE_FORMATS / DATETIME_FORMATS order; the value is rejected only
once every pattern has failed.

None coerces to None whatever the target.  A target outside this table
(UUID, lists, nested models) receives the wire value unchanged and is not
an error.

Boolean strings "true", "yes" and "1" (any case) are True; "false", "no",
"0" and "" are False.  Any other string raises ConversionFailure unless
strict_booleans is False, in which case it is False (legacy behaviour).
"""

from __future__ import annotations

import types
from datetime import date, datetime, time, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, NamedTuple, Union, get_args, get_origin

from pydantic import AwareDatetime

from src.domain.errors import ConversionFailure

WireValue = Union[str, int, float, bool, None]

TRUE_TOKENS = frozenset({"true", "yes", "1"})
FALSE_TOKENS = frozenset({"false", "no", "0", ""})

# Fallback patterns, tried in order after ISO-8601.
DATETIME_FORMATS = (
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d",
    "%d/%m/%Y",
    "%m/%d/%Y",
)
DATE_FORMATS = (
    "%d/%m/%Y",
    "%m/%d/%Y",
)


class TargetType(str, Enum):
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    DECIMAL = "decimal"
    ENUM = "enum"
    DATE = "date"
    DATETIME = "datetime"
    INSTANT = "instant"
    PASSTHROUGH = "passthrough"


class ResolvedTarget(NamedTuple):
    kind: TargetType
    type_: Any


def _unwrap_optional(annotation: Any) -> Any:
    if get_origin(annotation) in (Union, types.UnionType):
        members = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            return members[0]
    return annotation


def resolve_target(annotation: Any) -> ResolvedTarget:
    """Map a field annotation (optionally X | None) to its coercion target."""
    tp = _unwrap_optional(annotation)
    if tp is AwareDatetime:
        return ResolvedTarget(TargetType.INSTANT, datetime)
    if get_origin(tp) is not None or not isinstance(tp, type):
        return ResolvedTarget(TargetType.PASSTHROUGH, tp)
    # Order matters: bool is an int, datetime is a date.
    if issubclass(tp, bool):
        return ResolvedTarget(TargetType.BOOLEAN, bool)
    if issubclass(tp, Enum):
        return ResolvedTarget(TargetType.ENUM, tp)
    if issubclass(tp, str):
        return ResolvedTarget(TargetType.STRING, str)
    if issubclass(tp, int):
        return ResolvedTarget(TargetType.INTEGER, int)
    if issubclass(tp, float):
        return ResolvedTarget(TargetType.FLOAT, float)
    if issubclass(tp, Decimal):
        return ResolvedTarget(TargetType.DECIMAL, Decimal)
    if issubclass(tp, datetime):
        return ResolvedTarget(TargetType.DATETIME, datetime)
    if issubclass(tp, date):
        return ResolvedTarget(TargetType.DATE, date)
    return ResolvedTarget(TargetType.PASSTHROUGH, tp)


# ---------------------------------------------------------------------- #
# Per-target converters.  Each raises ValueError / TypeError on bad input; #
# convert() turns those into ConversionFailure.                            #
# ---------------------------------------------------------------------- #


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def _to_string(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def _to_int(value: Any) -> int:
    if _is_number(value):
        return int(value)
    if isinstance(value, str):
        return int(value.strip())
    raise TypeError("not a number")


def _to_float(value: Any) -> float:
    if _is_number(value):
        return float(value)
    if isinstance(value, str):
        return float(value.strip())
    raise TypeError("not a number")


def _to_bool(value: Any, strict: bool) -> bool:
    if isinstance(value, bool):
        return value
    if _is_number(value):
        return value != 0
    if isinstance(value, str):
        token = value.strip().lower()
        if token in TRUE_TOKENS:
            return True
        if strict and token not in FALSE_TOKENS:
            raise ValueError("unrecognised boolean token")
        return False
    raise TypeError("not a boolean")


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if _is_number(value):
        return Decimal(str(value))
    if isinstance(value, str):
        return Decimal(value.strip())
    raise TypeError("not a number")


def _to_enum(value: Any, enum_cls: type[Enum]) -> Enum:
    if isinstance(value, enum_cls):
        return value
    if not isinstance(value, str):
        raise TypeError("enum values must be strings")
    if value in enum_cls.__members__:
        return enum_cls[value]
    return enum_cls(value)


def _from_epoch_millis(value: Any) -> datetime:
    try:
        return datetime.fromtimestamp(float(value) / 1000, tz=timezone.utc)
    except (OSError, OverflowError) as exc:
        raise ValueError("epoch milliseconds out of range") from exc


def _parse_iso_datetime(text: str) -> datetime:
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())
    if _is_number(value):
        return _from_epoch_millis(value)
    if not isinstance(value, str):
        raise TypeError("not a date-time")
    text = value.strip()
    try:
        return _parse_iso_datetime(text)
    except ValueError:
        pass
    for pattern in DATETIME_FORMATS:
        try:
            return datetime.strptime(text, pattern)
        except ValueError:
            continue
    raise ValueError("no accepted date-time format matched")


def _to_datetime(value: Any) -> datetime:
    parsed = _parse_datetime(value)
    if parsed.tzinfo is None:
        return parsed
    return parsed.astimezone(timezone.utc).replace(tzinfo=None)


def _to_instant(value: Any) -> datetime:
    parsed = _parse_datetime(value)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _to_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if _is_number(value):
        return _from_epoch_millis(value).date()
    if not isinstance(value, str):
        raise TypeError("not a date")
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    for pattern in DATE_FORMATS:
        try:
            return datetime.strptime(text, pattern).date()
        except ValueError:
            continue
    raise ValueError("no accepted date format matched")


def convert(
    value: Any,
    target: ResolvedTarget,
    *,
    field: str | None = None,
    strict_booleans: bool = True,
) -> Any:
    """Coerce value to an already-resolved target.  See module docstring."""
    if value is None:
        return None

    kind = target.kind
    try:
        if kind is TargetType.STRING:
            return _to_string(value)
        if kind is TargetType.INTEGER:
            return _to_int(value)
        if kind is TargetType.FLOAT:
            return _to_float(value)
        if kind is TargetType.BOOLEAN:
            return _to_bool(value, strict_booleans)
        if kind is TargetType.DECIMAL:
            return _to_decimal(value)
        if kind is TargetType.ENUM:
            return _to_enum(value, target.type_)
        if kind is TargetType.DATE:
            return _to_date(value)
        if kind is TargetType.DATETIME:
            return _to_datetime(value)
        if kind is TargetType.INSTANT:
            return _to_instant(value)
    except (ValueError, TypeError, ArithmeticError) as exc:
        target_name = getattr(target.type_, "__name__", kind.value)
        if kind is TargetType.INSTANT:
            target_name = "instant"
        raise ConversionFailure(value, target_name, field) from exc

    return value


def coerce(
    value: Any,
    annotation: Any,
    *,
    field: str | None = None,
    strict_booleans: bool = True,
) -> Any:
    """Coerce a wire value to the type named by a field annotation."""
    return convert(
        value,
        resolve_target(annotation),
        field=field,
        strict_booleans=strict_booleans,
    )

"""Validators for the built-in primitive types.

Every validator takes a single value and either returns it (possibly coerced
to the canonical Python type) or raises :class:`ValidationFailure`. ``None``
never reaches a validator; the registry passes it through untouched.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any

from typed_models.exceptions import ValidationFailure


def _is_number(value: Any) -> bool:
    """Return whether value is an int or float (bool excluded)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_integer(value: Any) -> int | float:
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            raise ValidationFailure(type_name="integer", value=value) from None

    if not _is_number(value):
        raise ValidationFailure(type_name="integer", value=value)
    # Ints of any size are already integral
    if isinstance(value, int):
        return value
    if math.isnan(value):
        raise ValidationFailure(type_name="integer", value=value)

    # Infinity is accepted unchanged
    if math.isinf(value):
        return value

    int_value = int(round(value))
    if int_value != value:
        raise ValidationFailure(type_name="integer", value=value)

    return int_value


def validate_number(value: Any) -> int | float:
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            raise ValidationFailure(type_name="number", value=value) from None

    if not _is_number(value) or (isinstance(value, float) and math.isnan(value)):
        raise ValidationFailure(type_name="number", value=value)

    return value


def _format_number(value: int | float) -> str:
    """Stringify a number; integral floats drop the trailing ``.0``."""
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
    return str(value)


def validate_string(value: Any) -> str:
    if _is_number(value):
        return _format_number(value)
    if not isinstance(value, str):
        raise ValidationFailure(type_name="string", value=value)
    return value


def validate_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if _is_number(value):
        return bool(value)
    if isinstance(value, str):
        lowered = value.lower()
        if lowered in ("true", "1"):
            return True
        if lowered in ("false", "0"):
            return False
    raise ValidationFailure(type_name="boolean", value=value)


def _from_epoch_millis(millis: float) -> datetime:
    return datetime.fromtimestamp(millis / 1000, tz=timezone.utc)


def validate_date(value: Any) -> datetime:
    """Validate a date.

    Numbers and numeric strings are read as epoch milliseconds (UTC); any
    other string must be an ISO-8601 literal.
    """
    if isinstance(value, datetime):
        return value

    try:
        if _is_number(value):
            return _from_epoch_millis(value)
        if isinstance(value, str):
            try:
                millis = float(value)
            except ValueError:
                return datetime.fromisoformat(value.strip())
            return _from_epoch_millis(millis)
    except (ValueError, OverflowError, OSError):
        raise ValidationFailure(type_name="date", value=value) from None

    raise ValidationFailure(type_name="date", value=value)


def validate_array(value: Any) -> list[Any]:
    if not isinstance(value, list):
        raise ValidationFailure(type_name="array", value=value)
    return value


def validate_object(value: Any) -> dict[str, Any]:
    # Plain dicts only: subclasses, lists and class instances are rejected
    if type(value) is not dict:
        raise ValidationFailure(type_name="object", value=value)
    return value

"""Field coercion helpers shared by the model ``from_dict`` constructors."""

from __future__ import annotations

import math
from enum import Enum
from typing import Any, Optional, Type, TypeVar

E = TypeVar("E", bound=Enum)


def optional_number(d: dict, key: str) -> Optional[float]:
    """Return ``d[key]`` as a float, ``None`` when absent or null.

    Values that cannot be read as a number become NaN rather than raising;
    the G-code formatter renders NaN as ``0``.
    """
    value = d.get(key)
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError, OverflowError):
        return math.nan


def required_number(d: dict, key: str) -> float:
    if key not in d or d[key] is None:
        raise ValueError(f"Missing required field '{key}'")
    return optional_number(d, key)


def required_enum(d: dict, key: str, enum_cls: Type[E]) -> E:
    if key not in d or d[key] is None:
        raise ValueError(f"Missing required field '{key}'")
    try:
        return enum_cls(d[key])
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValueError(
            f"Unknown {key} '{d[key]}' (expected one of: {allowed})"
        ) from None


def is_missing(value: Any) -> bool:
    """True for ``None`` and NaN."""
    return value is None or (isinstance(value, float) and math.isnan(value))

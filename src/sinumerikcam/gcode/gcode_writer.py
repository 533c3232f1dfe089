"""Low-level Sinumerik line formatting helpers.

Every number that reaches the program text goes through :func:`fmt`, so
identical values always render identically.
"""

from __future__ import annotations

import math
from typing import Optional, Union

from ..config.defaults import FORMAT_DECIMALS

Number = Union[int, float, None]

# Marks a positional cycle parameter the controller should default
SKIP = ""

# Suffix ShopMill puts on every contour-editor generated line
GP_MARK = ";*GP*"


def fmt(value: Number, decimals: int = FORMAT_DECIMALS) -> str:
    """Format a number for the program text, stripping trailing zeros.

    ``None``, NaN and infinities render as ``0``; so does negative zero.
    """
    if value is None:
        return "0"
    try:
        value = float(value)
    except (TypeError, ValueError, OverflowError):
        return "0"
    if not math.isfinite(value):
        return "0"
    text = f"{value:.{decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text == "-0":
        return "0"
    return text


def negate(value: Number) -> Number:
    """``-value``, passing missing values through for :func:`fmt`."""
    if value is None:
        return None
    return -value


def quote(text: str) -> str:
    return f'"{text}"'


def cycle(name: str, *params: Union[Number, str]) -> str:
    """Positional cycle call, e.g. ``CYCLE81(100, 0, 2, -5, 0)``.

    Strings are inserted verbatim (use :data:`SKIP` for an empty slot);
    everything else is formatted with :func:`fmt`.
    """
    rendered = [p if isinstance(p, str) else fmt(p) for p in params]
    return f"{name}({', '.join(rendered)})"


def rapid(
    x: Optional[float] = None,
    y: Optional[float] = None,
    z: Optional[float] = None,
) -> str:
    """G0 rapid traverse."""
    return " ".join(["G0", *_axes(x=x, y=y, z=z)])


def linear(
    x: Optional[float] = None,
    y: Optional[float] = None,
    z: Optional[float] = None,
) -> str:
    """G1 linear interpolation."""
    return " ".join(["G1", *_axes(x=x, y=y, z=z)])


def circular(
    word: str,
    x: Number,
    y: Number,
    cx: Number,
    cy: Number,
) -> str:
    """G2/G3 move with the centre given in absolute coordinates (``=AC``)."""
    return f"{word} X{fmt(x)} Y{fmt(y)} I=AC({fmt(cx)}) J=AC({fmt(cy)})"


def comment(text: str) -> str:
    """Sinumerik end-of-line comment."""
    return f"; {text}"


def _axes(**coords: Optional[float]) -> list[str]:
    return [f"{axis.upper()}{fmt(v)}" for axis, v in coords.items() if v is not None]

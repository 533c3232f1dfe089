"""Boundary to the external model that proposes operations.

The oracle turns a user request (text, drawing, image) into one JSON
object::

    {
      "stock": {"shape", "width", "length", "height", "diameter", "material"},
      "operation": {"type", "tool_type", "x", "y", "z_depth", ...,
                    "path_segments": [{"type", "x", "y", "cx", "cy"}]},
      "explanation": "...",
      "optimized_gcode": "..."          # OPTIMIZE mode only
    }

No concrete client lives here; anything with an ``analyze`` method
returning the raw reply text satisfies :class:`Oracle`.  Failures are
reported as a single :class:`OracleError` and never retried.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Optional, Protocol

from .job import AppMode
from .operation import Operation
from .stock import StockDescription

_FENCE_RE = re.compile(r"```(?:json)?")


class OracleError(Exception):
    """The oracle failed or returned something that is not an operation model."""


class Oracle(Protocol):
    def analyze(self, prompt: str, mode: AppMode) -> str: ...


@dataclass(frozen=True)
class OracleResponse:
    """A validated oracle reply."""

    stock: StockDescription
    operation: Operation
    explanation: str
    optimized_gcode: Optional[str] = None


def parse_oracle_response(text: Optional[str]) -> OracleResponse:
    """Decode and validate the oracle's reply text.

    Markdown code fences around the JSON are tolerated.

    Raises
    ------
    OracleError:
        On empty text, undecodable JSON or a structurally invalid model.
    """
    if not text or not text.strip():
        raise OracleError("No response from AI")

    cleaned = _FENCE_RE.sub("", text).strip()
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise OracleError("AI JSON Error") from exc

    if not isinstance(data, dict):
        raise OracleError("AI response is not a JSON object")
    for key in ("stock", "operation", "explanation"):
        if key not in data:
            raise OracleError(f"AI response is missing '{key}'")
    if not isinstance(data["stock"], dict) or not isinstance(data["operation"], dict):
        raise OracleError("AI response 'stock' and 'operation' must be objects")

    try:
        stock = StockDescription.from_dict(data["stock"])
        operation = Operation.from_dict(data["operation"])
    except (ValueError, TypeError, AttributeError) as exc:
        raise OracleError(f"Invalid operation model: {exc}") from exc

    return OracleResponse(
        stock=stock,
        operation=operation,
        explanation=str(data.get("explanation") or ""),
        optimized_gcode=data.get("optimized_gcode") or None,
    )


def request_operation(
    oracle: Oracle,
    prompt: str,
    mode: AppMode = AppMode.GENERATE,
) -> OracleResponse:
    """Ask *oracle* for an operation model and validate the reply."""
    try:
        text = oracle.analyze(prompt, mode)
    except OracleError:
        raise
    except Exception as exc:
        raise OracleError(f"Oracle request failed: {exc}") from exc
    return parse_oracle_response(text)

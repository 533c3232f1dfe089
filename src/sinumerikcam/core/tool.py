"""Cutting tool descriptors and the controller tool-table naming rule."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..gcode.gcode_writer import fmt


class ToolType(Enum):
    END_MILL = "END_MILL"
    BALL_MILL = "BALL_MILL"
    DRILL = "DRILL"
    FACE_MILL = "FACE_MILL"


# Tool-table name prefix per tool type; END_MILL doubles as the fallback
_NAME_PREFIX = {
    ToolType.DRILL: "DRILL",
    ToolType.FACE_MILL: "FACEMILL",
    ToolType.BALL_MILL: "BALL",
    ToolType.END_MILL: "CUTTER",
}


@dataclass(frozen=True)
class ToolDescriptor:
    """A cutting tool as referenced by one operation.

    The controller identifies tools by name, so two descriptors with the
    same type and diameter are the same physical tool.
    """

    tool_type: Optional[ToolType] = ToolType.END_MILL
    diameter: Optional[float] = None

    @property
    def name(self) -> str:
        """Tool-table name, e.g. ``CUTTER 10`` or ``DRILL 6.8``."""
        prefix = _NAME_PREFIX.get(self.tool_type, "CUTTER")
        return f"{prefix} {fmt(self.diameter)}"

    @property
    def radius(self) -> Optional[float]:
        if self.diameter is None:
            return None
        return self.diameter / 2.0

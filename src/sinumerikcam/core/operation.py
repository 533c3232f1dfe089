"""Machining operation model.

An Operation is one discrete machining step (pocket, drill, face-mill or
contour-follow) with its own tool and depth.  Operations are produced by
the oracle, validated once by :meth:`Operation.from_dict` and then treated
as immutable; the program emitter and the curve builder both read them.

Operation and segment kinds are closed tag sets (:class:`OperationType`,
:class:`SegmentType`).  Every consumer dispatches on the tag with a table
covering all members, so adding a kind means extending the enum and each
table.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional

from .fields import optional_number, required_enum, required_number
from .tool import ToolDescriptor, ToolType


class OperationType(Enum):
    FACE_MILL = "FACE_MILL"
    CIRCULAR_POCKET = "CIRCULAR_POCKET"
    RECTANGULAR_POCKET = "RECTANGULAR_POCKET"
    DRILL = "DRILL"
    CONTOUR = "CONTOUR"

    @property
    def short_label(self) -> str:
        """First word of the tag (``CIRCULAR``, ``FACE``, ...)."""
        return self.value.split("_")[0]


class SegmentType(Enum):
    LINE = "LINE"
    ARC_CW = "ARC_CW"
    ARC_CCW = "ARC_CCW"

    @property
    def is_arc(self) -> bool:
        return self is not SegmentType.LINE


@dataclass(frozen=True)
class PathSegment:
    """One element of a contour chain.

    The start point is implicit: the previous segment's end point, or the
    operation's (x, y) for the first segment.  Arcs carry an **absolute**
    centre (cx, cy), never an offset from the start point.
    """

    type: SegmentType
    x: float
    y: float
    cx: Optional[float] = None
    cy: Optional[float] = None

    @property
    def end(self) -> tuple[float, float]:
        return (self.x, self.y)

    @property
    def center(self) -> Optional[tuple[float, float]]:
        if self.cx is None or self.cy is None:
            return None
        return (self.cx, self.cy)

    def to_dict(self) -> dict:
        d = {"type": self.type.value, "x": self.x, "y": self.y}
        if self.type.is_arc:
            d["cx"] = self.cx
            d["cy"] = self.cy
        return d

    @classmethod
    def from_dict(cls, d: dict) -> PathSegment:
        return cls(
            type=required_enum(d, "type", SegmentType),
            x=required_number(d, "x"),
            y=required_number(d, "y"),
            cx=optional_number(d, "cx"),
            cy=optional_number(d, "cy"),
        )


@dataclass(frozen=True)
class Operation:
    """Parameters for a single machining operation.

    *z_depth* is a positive magnitude below the stock top (Z=0).  Fields
    that only some operation types use stay ``None`` for the others:

    - width / length: rectangular pocket, face mill
    - diameter: circular pocket, drill
    - path_segments: contour
    """

    type: OperationType
    x: float
    y: float
    z_depth: float
    tool: ToolDescriptor = field(default_factory=ToolDescriptor)

    # Feeds & speeds
    feed_rate: Optional[float] = None
    spindle_speed: Optional[float] = None
    step_down: Optional[float] = None

    z_start: Optional[float] = None   # carried for round-tripping only

    # Type-specific geometry
    diameter: Optional[float] = None
    width: Optional[float] = None
    length: Optional[float] = None
    path_segments: tuple[PathSegment, ...] = ()

    @property
    def start(self) -> tuple[float, float]:
        return (self.x, self.y)

    def iter_segments(self) -> Iterator[tuple[tuple[float, float], PathSegment]]:
        """Yield ``(start_xy, segment)`` pairs along the contour chain."""
        current = self.start
        for seg in self.path_segments:
            yield current, seg
            current = seg.end

    @property
    def is_closed(self) -> bool:
        """True when the contour chain ends where it started."""
        if not self.path_segments:
            return False
        ex, ey = self.path_segments[-1].end
        return math.isclose(ex, self.x, abs_tol=1e-6) and math.isclose(
            ey, self.y, abs_tol=1e-6
        )

    def to_dict(self) -> dict:
        d = {
            "type": self.type.value,
            "tool_type": self.tool.tool_type.value if self.tool.tool_type else None,
            "tool_diameter": self.tool.diameter,
            "x": self.x,
            "y": self.y,
            "z_start": self.z_start,
            "z_depth": self.z_depth,
            "diameter": self.diameter,
            "width": self.width,
            "length": self.length,
            "feed_rate": self.feed_rate,
            "spindle_speed": self.spindle_speed,
            "step_down": self.step_down,
        }
        if self.type is OperationType.CONTOUR:
            d["path_segments"] = [s.to_dict() for s in self.path_segments]
        return d

    @classmethod
    def from_dict(cls, d: dict) -> Operation:
        op_type = required_enum(d, "type", OperationType)
        tool_type = ToolType.END_MILL
        if d.get("tool_type") is not None:
            tool_type = required_enum(d, "tool_type", ToolType)

        segments: tuple[PathSegment, ...] = ()
        if op_type is OperationType.CONTOUR:
            segments = tuple(
                PathSegment.from_dict(s) for s in d.get("path_segments") or ()
            )

        return cls(
            type=op_type,
            x=required_number(d, "x"),
            y=required_number(d, "y"),
            z_depth=required_number(d, "z_depth"),
            tool=ToolDescriptor(
                tool_type=tool_type,
                diameter=optional_number(d, "tool_diameter"),
            ),
            feed_rate=optional_number(d, "feed_rate"),
            spindle_speed=optional_number(d, "spindle_speed"),
            step_down=optional_number(d, "step_down"),
            z_start=optional_number(d, "z_start"),
            diameter=optional_number(d, "diameter"),
            width=optional_number(d, "width"),
            length=optional_number(d, "length"),
            path_segments=segments,
        )

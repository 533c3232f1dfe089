"""Toolpath curve builder for the simulation viewport.

Each operation becomes one continuous 3D curve:

1. Plunge: straight line from ``(x, y, +safe_z)`` down to ``(x, y, -z_depth)``.
2. Contour segments at constant ``Z = -z_depth``: lines stay straight,
   arcs are resolved with :func:`~sinumerikcam.core.arc.resolve_arc` and
   sampled into a smooth spline.
3. Retract: straight line from the last point back up to ``+safe_z``.

Pockets, drills and face-mill operations only get the plunge/retract pair;
the curve drives a tool-position indicator, not a material-removal
simulation.

The per-operation curves are concatenated in list order into one
whole-program curve for playback.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

import numpy as np
from shapely.geometry import GeometryCollection, LineString

from ...config.defaults import (
    ARC_SAMPLES,
    DEFAULT_TOOL_DIAMETER,
    OPERATION_COLORS,
    SAFE_Z,
)
from ..arc import ArcSense, resolve_arc
from ..fields import is_missing
from ..operation import Operation, OperationType, PathSegment, SegmentType
from ..stock import StockDescription
from .base import CurvePath, LineCurve3, MoveType, SplineCurve3

logger = logging.getLogger(__name__)


@dataclass
class CurveBuilderParams:
    """Parameters for turning operations into simulation curves."""

    safe_z: float = SAFE_Z
    arc_samples: int = ARC_SAMPLES
    default_tool_diameter: float = DEFAULT_TOOL_DIAMETER


@dataclass
class OperationCurve:
    """The simulation curve of one operation plus its render attributes."""

    index: int
    operation: Operation
    path: CurvePath
    tool_radius: float
    color: int
    key: str

    def point_at(self, t: float) -> np.ndarray:
        return self.path.point_at(t)

    def trace(self, divisions: int = 200) -> LineString:
        """XY projection of the curve as a Shapely LineString."""
        pts = self.path.sample(divisions)
        return LineString(pts[:, :2])


@dataclass
class ProgramCurve:
    """All operation curves plus their concatenation for playback."""

    operations: list[OperationCurve] = field(default_factory=list)
    path: CurvePath = field(default_factory=CurvePath)
    stock: Optional[StockDescription] = None

    @property
    def is_empty(self) -> bool:
        return self.path.is_empty

    def point_at(self, t: float) -> np.ndarray:
        """Tool pose at playback progress *t* in [0, 1]."""
        return self.path.point_at(t)

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        """(xmin, ymin, xmax, ymax) covering the stock and every path."""
        geoms = [oc.trace() for oc in self.operations]
        if self.stock is not None:
            geoms.append(self.stock.footprint())
        geoms = [g for g in geoms if not g.is_empty]
        if not geoms:
            return (0.0, 0.0, 0.0, 0.0)
        return tuple(GeometryCollection(geoms).bounds)


# ---------------------------------------------------------------------------
# Segment handlers
# ---------------------------------------------------------------------------


def _line_curves(
    start: np.ndarray, seg: PathSegment, z: float, params: CurveBuilderParams
) -> list:
    end = np.array([seg.x, seg.y, z])
    return [LineCurve3(start, end, MoveType.FEED)]


def _arc_curves(
    start: np.ndarray, seg: PathSegment, z: float, params: CurveBuilderParams
) -> list:
    end = np.array([seg.x, seg.y, z])
    if seg.center is None or any(is_missing(c) for c in seg.center):
        warnings.warn(
            f"{seg.type.value} to ({seg.x}, {seg.y}) has no centre; "
            "skipped in the simulation curve",
            UserWarning,
            stacklevel=4,
        )
        return []

    span = resolve_arc(
        (float(start[0]), float(start[1])),
        seg.end,
        seg.center,
        ArcSense.from_segment_type(seg.type),
    )
    if span.is_full_circle:
        warnings.warn(
            f"Full-circle {seg.type.value} at centre {seg.center} is not "
            "supported; drawn as a point",
            UserWarning,
            stacklevel=4,
        )
        return [LineCurve3(start, end, MoveType.FEED)]
    if span.is_degenerate:
        warnings.warn(
            f"Degenerate {seg.type.value} (radius={span.radius:.4g}, "
            f"sweep={span.sweep:.4g}); drawn as a straight line",
            UserWarning,
            stacklevel=4,
        )
        return [LineCurve3(start, end, MoveType.FEED)]

    xy = span.sample(params.arc_samples)
    pts = np.column_stack((xy, np.full(len(xy), z)))
    try:
        return [SplineCurve3(pts, MoveType.FEED)]
    except ValueError as exc:
        # Fallback: chain the samples as straight pieces
        warnings.warn(f"Arc spline fit failed: {exc}", UserWarning, stacklevel=4)
        return [
            LineCurve3(a, b, MoveType.FEED) for a, b in zip(pts[:-1], pts[1:])
        ]


_SEGMENT_HANDLERS: dict[SegmentType, Callable[..., list]] = {
    SegmentType.LINE: _line_curves,
    SegmentType.ARC_CW: _arc_curves,
    SegmentType.ARC_CCW: _arc_curves,
}


# ---------------------------------------------------------------------------
# Operation interiors
# ---------------------------------------------------------------------------


def _contour_interior(
    op: Operation, params: CurveBuilderParams
) -> tuple[list, np.ndarray]:
    z = -op.z_depth
    current = np.array([op.x, op.y, z])
    curves: list = []
    for seg in op.path_segments:
        curves.extend(_SEGMENT_HANDLERS[seg.type](current, seg, z, params))
        current = np.array([seg.x, seg.y, z])
    return curves, current


def _no_interior(
    op: Operation, params: CurveBuilderParams
) -> tuple[list, np.ndarray]:
    return [], np.array([op.x, op.y, -op.z_depth])


_INTERIOR_BUILDERS: dict[OperationType, Callable[..., tuple[list, np.ndarray]]] = {
    OperationType.FACE_MILL: _no_interior,
    OperationType.CIRCULAR_POCKET: _no_interior,
    OperationType.RECTANGULAR_POCKET: _no_interior,
    OperationType.DRILL: _no_interior,
    OperationType.CONTOUR: _contour_interior,
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build_operation_curve(
    op: Operation,
    index: int = 0,
    params: Optional[CurveBuilderParams] = None,
) -> OperationCurve:
    """Build the plunge / path / retract curve of one operation.

    Parameters
    ----------
    op:
        The operation to trace.
    index:
        Position of *op* in the program; selects the colour and key.
    params:
        Safe height and sampling options (defaults when omitted).
    """
    params = params or CurveBuilderParams()
    path = CurvePath()

    top = np.array([op.x, op.y, params.safe_z])
    bottom = np.array([op.x, op.y, -op.z_depth])
    path.add(LineCurve3(top, bottom, MoveType.PLUNGE))

    interior, current = _INTERIOR_BUILDERS[op.type](op, params)
    path.extend(interior)

    retract_end = np.array([current[0], current[1], params.safe_z])
    path.add(LineCurve3(current, retract_end, MoveType.RETRACT))

    tool_radius = op.tool.radius
    if is_missing(tool_radius) or not tool_radius:
        tool_radius = params.default_tool_diameter / 2.0

    logger.debug(
        "OP %d (%s): %d curves", index + 1, op.type.value, len(path.curves)
    )
    return OperationCurve(
        index=index,
        operation=op,
        path=path,
        tool_radius=tool_radius,
        color=OPERATION_COLORS[index % len(OPERATION_COLORS)],
        key=f"op-{index + 1}",
    )


def build_program_curve(
    operations: Sequence[Operation],
    stock: Optional[StockDescription] = None,
    params: Optional[CurveBuilderParams] = None,
) -> ProgramCurve:
    """Build every operation curve and their whole-program concatenation.

    The concatenated path holds the individual sub-curves of every
    operation in order, so each sub-curve gets an equal share of the
    playback parameter.
    """
    params = params or CurveBuilderParams()
    program = ProgramCurve(stock=stock)
    for i, op in enumerate(operations):
        oc = build_operation_curve(op, i, params)
        program.operations.append(oc)
        program.path.extend(oc.path.curves)
    return program

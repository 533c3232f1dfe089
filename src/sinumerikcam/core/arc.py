"""Arc resolution from absolute centre coordinates.

A contour arc is stored as start point, end point, absolute centre and a
rotation sense.  :func:`resolve_arc` turns that into an explicit angular
span so every consumer walks the same side of the circle.

Convention
----------
Angles follow the mathematical sense: measured from +X, counter-clockwise
positive, as seen from +Z.  ``atan2`` only defines them modulo 2*pi, so the
end angle is shifted by one full turn when needed to make the sweep
monotonic in the requested sense:

- CW:  end_angle <= start_angle, sweep in (-2*pi, 0]
- CCW: end_angle >= start_angle, sweep in [0, 2*pi)

The radius is the start-to-centre distance.  The end-to-centre distance is
assumed equal; any mismatch is an input-quality issue and the span simply
ends on the start radius.

A start point equal to the end point (a full circle) resolves to a zero
sweep.  Such spans are reported through :attr:`ArcSpan.is_full_circle`
instead of being guessed into a 360 degree sweep.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

import numpy as np

from .operation import SegmentType

TWO_PI = 2.0 * math.pi

# Below this radius or sweep an arc is treated as a point
DEGENERATE_EPS = 1e-9


class ArcSense(Enum):
    """Rotational direction as seen from +Z."""

    CW = "CW"
    CCW = "CCW"

    @property
    def gcode(self) -> str:
        return "G2" if self is ArcSense.CW else "G3"

    @classmethod
    def from_segment_type(cls, seg_type: SegmentType) -> ArcSense:
        if seg_type is SegmentType.ARC_CW:
            return cls.CW
        if seg_type is SegmentType.ARC_CCW:
            return cls.CCW
        raise ValueError(f"{seg_type.value} segments have no arc sense")


@dataclass(frozen=True)
class ArcSpan:
    """A resolved arc: walk from start_angle to end_angle at *radius*."""

    center: tuple[float, float]
    radius: float
    start_angle: float
    end_angle: float
    sense: ArcSense
    full_circle: bool = False

    @property
    def sweep(self) -> float:
        """Signed swept angle: negative for CW, positive for CCW."""
        return self.end_angle - self.start_angle

    @property
    def is_full_circle(self) -> bool:
        return self.full_circle

    @property
    def is_degenerate(self) -> bool:
        # written negated so NaN inputs count as degenerate
        return not (
            self.radius > DEGENERATE_EPS and abs(self.sweep) > DEGENERATE_EPS
        )

    @property
    def length(self) -> float:
        return abs(self.sweep) * self.radius

    def sample(self, divisions: int) -> np.ndarray:
        """Return ``divisions + 1`` XY points from start to end, shape (n, 2)."""
        if divisions < 1:
            raise ValueError("divisions must be at least 1")
        angles = np.linspace(self.start_angle, self.end_angle, divisions + 1)
        cx, cy = self.center
        return np.column_stack((
            cx + self.radius * np.cos(angles),
            cy + self.radius * np.sin(angles),
        ))


def resolve_arc(
    start: tuple[float, float],
    end: tuple[float, float],
    center: tuple[float, float],
    sense: ArcSense,
) -> ArcSpan:
    """Resolve the swept angle of an arc given by an absolute centre.

    Parameters
    ----------
    start, end:
        XY points on the circle, visited in that order.
    center:
        Absolute XY centre of the circle.
    sense:
        Rotation direction from *start* to *end*.

    Returns
    -------
    An :class:`ArcSpan` whose sweep has the sign of *sense* and a magnitude
    below one full turn.
    """
    sx, sy = start
    ex, ey = end
    cx, cy = center

    radius = math.hypot(sx - cx, sy - cy)
    start_angle = math.atan2(sy - cy, sx - cx)
    end_angle = math.atan2(ey - cy, ex - cx)

    if sense is ArcSense.CW and end_angle > start_angle:
        end_angle -= TWO_PI
    elif sense is ArcSense.CCW and end_angle < start_angle:
        end_angle += TWO_PI

    full_circle = math.isclose(sx, ex, abs_tol=DEGENERATE_EPS) and math.isclose(
        sy, ey, abs_tol=DEGENERATE_EPS
    )

    return ArcSpan(
        center=(cx, cy),
        radius=radius,
        start_angle=start_angle,
        end_angle=end_angle,
        sense=sense,
        full_circle=full_circle,
    )

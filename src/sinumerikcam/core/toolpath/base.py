"""Core toolpath curve structures.

Every curve maps a progress parameter ``t`` in [0, 1] to a 3D point.
Values outside the range are clamped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol, Sequence

import numpy as np
from scipy.interpolate import splev, splprep


class MoveType(Enum):
    """Role of a curve within an operation."""
    PLUNGE = "plunge"        # straight down from safe Z into material
    FEED = "feed"            # cutting move at depth
    RETRACT = "retract"      # straight up back to safe Z


class Curve3D(Protocol):
    move_type: MoveType

    def point_at(self, t: float) -> np.ndarray: ...


def _clamp(t: float) -> float:
    return min(1.0, max(0.0, float(t)))


@dataclass
class LineCurve3:
    """Straight segment from *start* to *end*."""
    start: np.ndarray
    end: np.ndarray
    move_type: MoveType = MoveType.FEED

    def __post_init__(self) -> None:
        self.start = np.asarray(self.start, dtype=np.float64)
        self.end = np.asarray(self.end, dtype=np.float64)

    def point_at(self, t: float) -> np.ndarray:
        return self.start + (self.end - self.start) * _clamp(t)

    @property
    def length(self) -> float:
        return float(np.linalg.norm(self.end - self.start))


@dataclass
class SplineCurve3:
    """Interpolating cubic spline through an ordered point sequence.

    The spline passes through every input point; its parameter is the
    normalised cumulative chord length, so ``t=0`` and ``t=1`` land on the
    first and last points.  Consecutive points must be distinct.
    """
    points: np.ndarray
    move_type: MoveType = MoveType.FEED
    _tck: list = field(default=None, init=False, repr=False)
    _u: np.ndarray = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self.points = np.asarray(self.points, dtype=np.float64)
        if len(self.points) < 4:
            raise ValueError("SplineCurve3 needs at least 4 points")
        # contour arcs lie at constant depth: fit XY, carry Z along u
        self._tck, self._u = splprep(
            [self.points[:, 0], self.points[:, 1]], s=0, k=3
        )

    def point_at(self, t: float) -> np.ndarray:
        t = _clamp(t)
        x, y = splev(t, self._tck)
        z = float(np.interp(t, self._u, self.points[:, 2]))
        return np.array([float(x), float(y), z])

    @property
    def length(self) -> float:
        return float(np.sum(np.linalg.norm(np.diff(self.points, axis=0), axis=1)))


@dataclass
class CurvePath:
    """An ordered concatenation of curves.

    The progress parameter is split evenly by curve **count**, not by
    length: with n curves, curve i covers ``[i/n, (i+1)/n]`` regardless of
    how long it is physically.
    """
    curves: list = field(default_factory=list)

    def add(self, curve: Curve3D) -> None:
        self.curves.append(curve)

    def extend(self, curves: Sequence[Curve3D]) -> None:
        self.curves.extend(curves)

    @property
    def is_empty(self) -> bool:
        return len(self.curves) == 0

    def point_at(self, t: float) -> np.ndarray:
        if self.is_empty:
            raise ValueError("CurvePath has no curves")
        n = len(self.curves)
        scaled = _clamp(t) * n
        idx = min(int(scaled), n - 1)
        return self.curves[idx].point_at(scaled - idx)

    def sample(self, divisions: int) -> np.ndarray:
        """Return ``divisions + 1`` evenly spaced poses, shape (n, 3)."""
        if divisions < 1:
            raise ValueError("divisions must be at least 1")
        ts = np.linspace(0.0, 1.0, divisions + 1)
        return np.array([self.point_at(t) for t in ts])

    @property
    def length(self) -> float:
        return sum(c.length for c in self.curves)

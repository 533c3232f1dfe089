"""Stock (workpiece blank) definition."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .fields import is_missing, optional_number, required_enum, required_number


class StockShape(Enum):
    RECTANGULAR = "RECTANGULAR"
    CYLINDRICAL = "CYLINDRICAL"


@dataclass(frozen=True)
class StockDescription:
    """Workpiece blank as declared to the controller.

    All dimensions are in millimetres.  Z=0 is the **top** face of the
    stock and *height* is the thickness measured downward, so the bottom
    face sits at ``Z = -height``.

    Both dimension sets are kept for round-tripping; only the one matching
    *shape* is emitted (width/length for a block, diameter for a cylinder).
    The block is centred on the XY origin.
    """

    shape: StockShape
    height: float
    width: Optional[float] = None
    length: Optional[float] = None
    diameter: Optional[float] = None
    material: str = ""

    @property
    def z_top(self) -> float:
        return 0.0

    @property
    def z_bottom(self) -> float:
        return -self.height

    def footprint(self):
        """Return a Shapely geometry of the stock XY footprint."""
        from shapely.geometry import Point, box

        if self.shape is StockShape.CYLINDRICAL:
            return Point(0.0, 0.0).buffer(_or_zero(self.diameter) / 2.0)
        half_w = _or_zero(self.width) / 2.0
        half_l = _or_zero(self.length) / 2.0
        return box(-half_w, -half_l, half_w, half_l)

    def to_dict(self) -> dict:
        return {
            "shape": self.shape.value,
            "width": self.width,
            "length": self.length,
            "height": self.height,
            "diameter": self.diameter,
            "material": self.material,
        }

    @classmethod
    def from_dict(cls, d: dict) -> StockDescription:
        return cls(
            shape=required_enum(d, "shape", StockShape),
            height=required_number(d, "height"),
            width=optional_number(d, "width"),
            length=optional_number(d, "length"),
            diameter=optional_number(d, "diameter"),
            material=str(d.get("material") or ""),
        )


def _or_zero(value: Optional[float]) -> float:
    return 0.0 if is_missing(value) else value

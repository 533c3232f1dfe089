"""Siemens Sinumerik 840D ShopMill program emitter.

Output structure::

    ; <title>                       header
    G17 G90 G54
    G64 P0.01

    WORKPIECE(...)                  stock declaration (Z down to -height)

    ; ------------------------------------
    ; OP n: <TYPE>                  one block per operation
    [tool change]                   only when the tool differs from the loaded one
    <cycle call(s)>

    M05 / M09 / M30                 program end

    E_LAB_A_CONT_n: ...             contour definitions, in operation order
    E_LAB_E_CONT_n:

Contour geometry is never inlined in the main body; CYCLE62 refers to the
contour by name and the definition follows the program end.  Arcs use the
controller's absolute-centre addressing (``I=AC(..) J=AC(..)``), straight
from the segment's stored centre.

The only state carried from one operation to the next is the name of the
loaded tool (:class:`ToolState`).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Sequence

from ..config.defaults import FACE_MILL_FALLBACK_EXTENT
from ..core.arc import ArcSense
from ..core.fields import is_missing
from ..core.job import ProgramArtifact
from ..core.operation import Operation, OperationType, PathSegment, SegmentType
from ..core.stock import StockDescription, StockShape
from .gcode_writer import (
    GP_MARK,
    SKIP,
    circular,
    comment,
    cycle,
    fmt,
    linear,
    negate,
    quote,
    rapid,
)

logger = logging.getLogger(__name__)

BANNER = "------------------------------------"


@dataclass
class PostProcessorConfig:
    """Settings for the ShopMill program emitter."""

    program_title: str = "Siemens ShopMill Generator"
    work_offset: str = "G54"
    path_tolerance: float = 0.01          # G64 blending tolerance
    retraction_plane: float = 100.0       # RP of every machining cycle
    face_mill_fallback: float = FACE_MILL_FALLBACK_EXTENT


@dataclass(frozen=True)
class ToolState:
    """Name of the tool in the spindle; empty before the first load."""

    current_tool: str = ""


@dataclass
class OperationBlock:
    """Lines one operation contributes to the main body and the contour section."""

    main: list[str] = field(default_factory=list)
    contour: list[str] = field(default_factory=list)


def contour_name(index: int) -> str:
    """Contour name for the operation at list position *index*."""
    return f"CONT_{index + 1}"


def contour_labels(name: str) -> tuple[str, str]:
    """Start and end jump labels delimiting the contour *name*."""
    return f"E_LAB_A_{name}", f"E_LAB_E_{name}"


class ShopMillPostProcessor:
    """Turns a stock description and operation list into ShopMill text."""

    def __init__(self, config: Optional[PostProcessorConfig] = None):
        self.config = config or PostProcessorConfig()
        self._cycles: dict[OperationType, Callable[[int, Operation], OperationBlock]] = {
            OperationType.FACE_MILL: self._face_mill,
            OperationType.CIRCULAR_POCKET: self._circular_pocket,
            OperationType.RECTANGULAR_POCKET: self._rectangular_pocket,
            OperationType.DRILL: self._drill,
            OperationType.CONTOUR: self._contour,
        }

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get_lines(
        self,
        stock: StockDescription,
        operations: Sequence[Operation],
    ) -> list[str]:
        """Return the complete program as a list of lines."""
        main: list[str] = [self._workpiece(stock), ""]
        contours: list[str] = []

        state = ToolState()
        for index, op in enumerate(operations):
            block, state = self._operation_block(index, op, state)
            main.extend(block.main)
            contours.extend(block.contour)

        return self._preamble() + main + self._postamble() + contours

    def emit(
        self,
        stock: StockDescription,
        operations: Sequence[Operation],
        explanation: str = "",
    ) -> ProgramArtifact:
        """Emit the program and pair it with the inputs that produced it."""
        operations = tuple(operations)
        return ProgramArtifact(
            gcode="\n".join(self.get_lines(stock, operations)),
            explanation=explanation,
            operations=operations,
            stock=stock,
        )

    def generate(
        self,
        stock: StockDescription,
        operations: Sequence[Operation],
        output: Path,
        explanation: str = "",
    ) -> ProgramArtifact:
        """Emit the program and write it to *output*."""
        artifact = self.emit(stock, operations, explanation)
        artifact.save(output)
        return artifact

    # ------------------------------------------------------------------
    # Program frame
    # ------------------------------------------------------------------

    def _preamble(self) -> list[str]:
        cfg = self.config
        return [
            comment(cfg.program_title),
            f"G17 G90 {cfg.work_offset}",
            f"G64 P{fmt(cfg.path_tolerance)}",
            "",
        ]

    def _workpiece(self, stock: StockDescription) -> str:
        z_bottom = stock.z_bottom
        if stock.shape is StockShape.CYLINDRICAL:
            extents = [fmt(stock.diameter)]
            kind = "CYLINDER"
        else:
            extents = [fmt(stock.length), fmt(stock.width)]
            kind = "RECTANGLE"
        return (
            f'WORKPIECE(,"",,"{kind}",0,0,{fmt(z_bottom)},0,'
            + ",".join(extents)
            + ")"
        )

    def _postamble(self) -> list[str]:
        return ["M05", "M09", "M30"]

    # ------------------------------------------------------------------
    # Per-operation block
    # ------------------------------------------------------------------

    def _operation_block(
        self, index: int, op: Operation, state: ToolState
    ) -> tuple[OperationBlock, ToolState]:
        header = [comment(BANNER), comment(f"OP {index + 1}: {op.type.value}")]
        tool_lines, state = self._tool_change(op, state)
        block = self._cycles[op.type](index, op)
        block.main = header + tool_lines + block.main + [""]
        return block, state

    def _tool_change(
        self, op: Operation, state: ToolState
    ) -> tuple[list[str], ToolState]:
        """Tool-change lines for *op*, empty when its tool is already loaded."""
        name = op.tool.name
        if name == state.current_tool:
            return [], state

        lines: list[str] = []
        if state.current_tool:
            # Stop spindle and coolant, optional stop before the swap
            lines += ["M05", "M09", "M01"]
        lines += [
            f'T={quote(name)}',
            "M06",
            f"M03 S{fmt(op.spindle_speed)} M08",
            "D1",
        ]
        logger.debug("Tool change: %r -> %r", state.current_tool, name)
        return lines, ToolState(current_tool=name)

    # ------------------------------------------------------------------
    # Cycle templates
    # ------------------------------------------------------------------

    def _face_mill(self, index: int, op: Operation) -> OperationBlock:
        fallback = self.config.face_mill_fallback
        width = op.width if not is_missing(op.width) and op.width else fallback
        length = op.length if not is_missing(op.length) and op.length else fallback
        x0 = op.x - width / 2
        y0 = op.y - length / 2
        return OperationBlock(main=[cycle(
            "CYCLE61",
            self.config.retraction_plane, 1, 1, negate(op.z_depth),
            x0, y0, width, length,
            1, 1, op.step_down, op.feed_rate, 11, 0, 1, 1,
        )])

    def _circular_pocket(self, index: int, op: Operation) -> OperationBlock:
        return OperationBlock(main=[cycle(
            "CYCLE77",
            self.config.retraction_plane, 0, 2, negate(op.z_depth), SKIP,
            op.diameter, op.x, op.y,
            op.step_down, op.feed_rate, op.feed_rate,
            0, 0, 0, 1, SKIP,
        )])

    def _rectangular_pocket(self, index: int, op: Operation) -> OperationBlock:
        return OperationBlock(main=[cycle(
            "POCKET3",
            self.config.retraction_plane, 0, 2, negate(op.z_depth), SKIP,
            op.width, op.length, 0, op.x, op.y, 0,
            op.feed_rate, op.feed_rate, op.step_down,
            2, 0, 0, SKIP, SKIP, SKIP,
        )])

    def _drill(self, index: int, op: Operation) -> OperationBlock:
        return OperationBlock(main=[
            "MCALL " + cycle(
                "CYCLE81",
                self.config.retraction_plane, 0, 2, negate(op.z_depth), 0,
            ),
            cycle("HOLES1", op.x, op.y, 0, 0, 0, 1),
            "MCALL",
        ])

    def _contour(self, index: int, op: Operation) -> OperationBlock:
        name = contour_name(index)
        main = [
            cycle("CYCLE62", quote(name), 1, SKIP, SKIP),
            cycle(
                "CYCLE63",
                quote(name), 1, self.config.retraction_plane, 0, 1,
                op.z_depth, 0.1, SKIP, op.step_down, 9, 0.1, 0.1, 0,
                SKIP, SKIP, SKIP, SKIP, SKIP,
                1, 2, SKIP, SKIP, SKIP, 0, 100201, 101,
            ),
        ]
        return OperationBlock(main=main, contour=self._contour_definition(name, op))

    # ------------------------------------------------------------------
    # Contour definitions
    # ------------------------------------------------------------------

    def _contour_definition(self, name: str, op: Operation) -> list[str]:
        start_label, end_label = contour_labels(name)
        lines = [
            "",
            f"{start_label}: ;#SM Z:2",
            ";#7__DlgK contour definition begin - Don't change!;*GP*;*RO*;*HD*",
            f"G17 G90 DIAMOF{GP_MARK}",
            f"{rapid(op.x, op.y)} {GP_MARK}",
        ]
        for seg in op.path_segments:
            lines.append(f"{_SEGMENT_MOVES[seg.type](seg)} {GP_MARK}")
        lines += [
            ";#End contour definition end - Don't change!;*GP*;*RO*;*HD*",
            f"{end_label}:",
        ]
        return lines


def _line_move(seg: PathSegment) -> str:
    return linear(seg.x, seg.y)


def _arc_move(seg: PathSegment) -> str:
    sense = ArcSense.from_segment_type(seg.type)
    return circular(sense.gcode, seg.x, seg.y, seg.cx, seg.cy)


_SEGMENT_MOVES: dict[SegmentType, Callable[[PathSegment], str]] = {
    SegmentType.LINE: _line_move,
    SegmentType.ARC_CW: _arc_move,
    SegmentType.ARC_CCW: _arc_move,
}


def emit_program(
    stock: StockDescription,
    operations: Sequence[Operation],
    explanation: str = "",
    config: Optional[PostProcessorConfig] = None,
) -> ProgramArtifact:
    """Emit the complete ShopMill program for *operations* on *stock*."""
    return ShopMillPostProcessor(config).emit(stock, operations, explanation)

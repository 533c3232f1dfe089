"""Session orchestrator: accumulates operations and re-emits the program.

In GENERATE mode every oracle round-trip adds one operation to the running
list, and the whole list is emitted again from scratch, so the program is
always complete rather than a diff.  OPTIMIZE mode replaces the session
with the single operation the oracle returned, together with its rewritten
program text.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from ..config.defaults import build_default_stock
from ..gcode.gcode_writer import fmt
from .operation import Operation
from .stock import StockDescription

if TYPE_CHECKING:
    from ..gcode.shopmill import PostProcessorConfig
    from .oracle import OracleResponse

logger = logging.getLogger(__name__)


class AppMode(Enum):
    GENERATE = "GENERATE"
    OPTIMIZE = "OPTIMIZE"


@dataclass(frozen=True)
class ProgramArtifact:
    """Program text paired with the operations and stock that produced it."""

    gcode: str
    explanation: str
    operations: tuple[Operation, ...]
    stock: StockDescription

    def operation_summary(self) -> list[str]:
        """One line per operation: index, tool, diameter and kind."""
        return [
            f"OP {i + 1} | {op.tool.name} | D{fmt(op.tool.diameter)}"
            f" | {op.type.short_label}"
            for i, op in enumerate(self.operations)
        ]

    def save(self, path: Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.gcode + "\n")


@dataclass
class Session:
    """Running operation list and stock of one programming session."""

    stock: Optional[StockDescription] = None
    operations: tuple[Operation, ...] = ()
    last_result: Optional[ProgramArtifact] = None
    config: Optional["PostProcessorConfig"] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.stock is None:
            self.stock = build_default_stock()

    def apply(self, response: "OracleResponse", mode: AppMode) -> ProgramArtifact:
        if mode is AppMode.OPTIMIZE:
            return self.optimize(response)
        return self.generate(response)

    def generate(self, response: "OracleResponse") -> ProgramArtifact:
        """Append the returned operation and re-emit the whole program."""
        from ..gcode.shopmill import emit_program

        self.operations = self.operations + (response.operation,)
        self.stock = response.stock
        logger.debug("Session now holds %d operation(s)", len(self.operations))
        self.last_result = emit_program(
            self.stock, self.operations, response.explanation, self.config
        )
        return self.last_result

    def optimize(self, response: "OracleResponse") -> ProgramArtifact:
        """Replace the session with the oracle's optimised program.

        Falls back to :meth:`generate` when the response carries no
        rewritten program text.
        """
        if not response.optimized_gcode:
            return self.generate(response)

        self.operations = (response.operation,)
        self.stock = response.stock
        self.last_result = ProgramArtifact(
            gcode=response.optimized_gcode,
            explanation=response.explanation,
            operations=self.operations,
            stock=self.stock,
        )
        return self.last_result

    def reset(self) -> None:
        """Forget all operations; the current stock is kept."""
        self.operations = ()
        self.last_result = None

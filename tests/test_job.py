"""Tests for the session orchestrator and program artifacts."""

import pytest

from sinumerikcam.config.defaults import build_default_stock
from sinumerikcam.core.job import AppMode, ProgramArtifact, Session
from sinumerikcam.core.operation import Operation, OperationType
from sinumerikcam.core.oracle import OracleResponse
from sinumerikcam.core.stock import StockDescription, StockShape
from sinumerikcam.core.tool import ToolDescriptor, ToolType


@pytest.fixture
def block() -> StockDescription:
    return StockDescription(
        shape=StockShape.RECTANGULAR, width=120.0, length=80.0, height=15.0,
    )


@pytest.fixture
def pocket() -> Operation:
    return Operation(
        type=OperationType.CIRCULAR_POCKET, x=0.0, y=0.0, z_depth=5.0,
        tool=ToolDescriptor(ToolType.END_MILL, 10.0),
        diameter=30.0, step_down=2.0, feed_rate=500.0, spindle_speed=3000.0,
    )


@pytest.fixture
def drill() -> Operation:
    return Operation(
        type=OperationType.DRILL, x=25.0, y=-10.0, z_depth=12.0,
        tool=ToolDescriptor(ToolType.DRILL, 6.8), spindle_speed=1800.0,
    )


def _response(stock, op, explanation="ok", optimized=None) -> OracleResponse:
    return OracleResponse(
        stock=stock, operation=op, explanation=explanation,
        optimized_gcode=optimized,
    )


class TestSession:
    def test_starts_with_default_stock(self):
        session = Session()
        assert session.stock == build_default_stock()
        assert session.operations == ()
        assert session.last_result is None

    def test_generate_accumulates(self, block, pocket, drill):
        session = Session()
        session.apply(_response(block, pocket), AppMode.GENERATE)
        artifact = session.apply(_response(block, drill, "then drill"), AppMode.GENERATE)

        assert session.operations == (pocket, drill)
        assert artifact.operations == (pocket, drill)
        assert artifact.explanation == "then drill"
        assert "; OP 1: CIRCULAR_POCKET" in artifact.gcode
        assert "; OP 2: DRILL" in artifact.gcode
        assert artifact.gcode.count("M30") == 1

    def test_generate_replaces_stock(self, block, pocket):
        session = Session()
        artifact = session.generate(_response(block, pocket))
        assert session.stock == block
        assert artifact.stock == block
        assert 'WORKPIECE(,"",,"RECTANGLE",0,0,-15,0,80,120)' in artifact.gcode

    def test_whole_program_is_re_emitted(self, block, pocket, drill):
        session = Session()
        first = session.generate(_response(block, pocket)).gcode
        second = session.generate(_response(block, drill)).gcode
        # the earlier operation's block is still present verbatim
        pocket_block = first[first.index("; OP 1"):first.index("M05\nM09\nM30")]
        assert pocket_block in second

    def test_optimize_replaces_operations(self, block, pocket, drill):
        session = Session()
        session.generate(_response(block, pocket))
        artifact = session.apply(
            _response(block, drill, "faster", optimized="G0 X0\nM30"),
            AppMode.OPTIMIZE,
        )
        assert session.operations == (drill,)
        assert artifact.gcode == "G0 X0\nM30"
        assert artifact.explanation == "faster"

    def test_optimize_without_gcode_falls_back_to_generate(self, block, pocket, drill):
        session = Session()
        session.generate(_response(block, pocket))
        artifact = session.optimize(_response(block, drill))
        assert session.operations == (pocket, drill)
        assert "; OP 2: DRILL" in artifact.gcode

    def test_reset_keeps_stock(self, block, pocket):
        session = Session()
        session.generate(_response(block, pocket))
        session.reset()
        assert session.operations == ()
        assert session.last_result is None
        assert session.stock == block


class TestArtifact:
    def test_operation_summary(self, block, pocket, drill):
        session = Session()
        session.generate(_response(block, pocket))
        artifact = session.generate(_response(block, drill))
        assert artifact.operation_summary() == [
            "OP 1 | CUTTER 10 | D10 | CIRCULAR",
            "OP 2 | DRILL 6.8 | D6.8 | DRILL",
        ]

    def test_save_writes_trailing_newline(self, tmp_path, block):
        artifact = ProgramArtifact(
            gcode="; hi\nM30", explanation="", operations=(), stock=block,
        )
        out = tmp_path / "nested" / "program.mpf"
        artifact.save(out)
        assert out.read_text() == "; hi\nM30\n"

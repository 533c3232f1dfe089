"""Tests for the stock, tool and operation models."""

import math

import pytest

from sinumerikcam.config.defaults import build_default_stock
from sinumerikcam.core.operation import (
    Operation,
    OperationType,
    PathSegment,
    SegmentType,
)
from sinumerikcam.core.stock import StockDescription, StockShape
from sinumerikcam.core.tool import ToolDescriptor, ToolType


class TestStock:
    def test_from_dict(self):
        stock = StockDescription.from_dict({
            "shape": "RECTANGULAR", "width": 80, "length": 60,
            "height": 25, "diameter": 0, "material": "Steel",
        })
        assert stock.shape is StockShape.RECTANGULAR
        assert stock.width == 80.0
        assert stock.material == "Steel"
        assert stock.z_top == 0.0
        assert stock.z_bottom == -25.0

    def test_missing_height(self):
        with pytest.raises(ValueError, match="height"):
            StockDescription.from_dict({"shape": "RECTANGULAR", "width": 10})

    def test_unknown_shape(self):
        with pytest.raises(ValueError, match="shape"):
            StockDescription.from_dict({"shape": "HEXAGON", "height": 10})

    def test_block_footprint_is_centred(self):
        fp = build_default_stock().footprint()
        assert fp.bounds == pytest.approx((-50, -50, 50, 50))

    def test_cylinder_footprint(self):
        stock = StockDescription(StockShape.CYLINDRICAL, height=30.0, diameter=40.0)
        fp = stock.footprint()
        # buffered polygon approximates the circle from inside
        assert fp.area == pytest.approx(math.pi * 20 ** 2, rel=1e-2)
        assert fp.bounds == pytest.approx((-20, -20, 20, 20))

    def test_dict_round_trip(self):
        stock = build_default_stock()
        assert StockDescription.from_dict(stock.to_dict()) == stock


class TestTool:
    @pytest.mark.parametrize("tool_type, diameter, expected", [
        (ToolType.END_MILL, 10.0, "CUTTER 10"),
        (ToolType.BALL_MILL, 6.0, "BALL 6"),
        (ToolType.DRILL, 6.8, "DRILL 6.8"),
        (ToolType.FACE_MILL, 50.0, "FACEMILL 50"),
        (ToolType.END_MILL, 3.175, "CUTTER 3.175"),
        (ToolType.END_MILL, None, "CUTTER 0"),
        (None, 8.0, "CUTTER 8"),
    ])
    def test_names(self, tool_type, diameter, expected):
        assert ToolDescriptor(tool_type, diameter).name == expected

    def test_same_type_and_diameter_is_same_tool(self):
        assert ToolDescriptor(ToolType.DRILL, 5.0) == ToolDescriptor(ToolType.DRILL, 5.0)

    def test_radius(self):
        assert ToolDescriptor(ToolType.END_MILL, 12.0).radius == 6.0
        assert ToolDescriptor(ToolType.END_MILL).radius is None


class TestOperationFromDict:
    def test_pocket(self):
        op = Operation.from_dict({
            "type": "CIRCULAR_POCKET", "tool_type": "END_MILL", "tool_diameter": 10,
            "x": 0, "y": 0, "z_start": 0, "z_depth": 5, "diameter": 30,
            "feed_rate": 500, "spindle_speed": 3000, "step_down": 2,
        })
        assert op.type is OperationType.CIRCULAR_POCKET
        assert op.tool == ToolDescriptor(ToolType.END_MILL, 10.0)
        assert op.diameter == 30.0
        assert op.width is None
        assert op.path_segments == ()

    def test_tool_type_defaults_to_end_mill(self):
        op = Operation.from_dict({"type": "DRILL", "x": 1, "y": 2, "z_depth": 3})
        assert op.tool.tool_type is ToolType.END_MILL
        assert op.tool.diameter is None

    def test_contour_segments(self):
        op = Operation.from_dict({
            "type": "CONTOUR", "x": 0, "y": 0, "z_depth": 2,
            "path_segments": [
                {"type": "LINE", "x": 10, "y": 0},
                {"type": "ARC_CCW", "x": 10, "y": 10, "cx": 0, "cy": 10},
                {"type": "LINE", "x": 0, "y": 0},
            ],
        })
        assert [s.type for s in op.path_segments] == [
            SegmentType.LINE, SegmentType.ARC_CCW, SegmentType.LINE,
        ]
        assert op.path_segments[1].center == (0.0, 10.0)
        assert op.path_segments[0].center is None
        assert op.is_closed

    def test_segments_ignored_for_other_types(self):
        op = Operation.from_dict({
            "type": "DRILL", "x": 0, "y": 0, "z_depth": 2,
            "path_segments": [{"type": "LINE", "x": 1, "y": 1}],
        })
        assert op.path_segments == ()

    def test_contour_without_segments(self):
        op = Operation.from_dict({"type": "CONTOUR", "x": 0, "y": 0, "z_depth": 2})
        assert op.path_segments == ()
        assert not op.is_closed

    @pytest.mark.parametrize("missing", ["type", "x", "y", "z_depth"])
    def test_required_fields(self, missing):
        d = {"type": "DRILL", "x": 0, "y": 0, "z_depth": 2}
        del d[missing]
        with pytest.raises(ValueError, match=missing):
            Operation.from_dict(d)

    def test_unknown_operation_type(self):
        with pytest.raises(ValueError, match="Unknown type"):
            Operation.from_dict({"type": "ENGRAVE", "x": 0, "y": 0, "z_depth": 1})

    def test_unknown_segment_type(self):
        with pytest.raises(ValueError):
            Operation.from_dict({
                "type": "CONTOUR", "x": 0, "y": 0, "z_depth": 1,
                "path_segments": [{"type": "SPLINE", "x": 1, "y": 1}],
            })

    def test_non_numeric_value_becomes_nan(self):
        op = Operation.from_dict({
            "type": "DRILL", "x": 0, "y": 0, "z_depth": 1, "feed_rate": "fast",
        })
        assert math.isnan(op.feed_rate)

    def test_number_too_large_for_float_becomes_nan(self):
        op = Operation.from_dict({
            "type": "DRILL", "x": 0, "y": 0, "z_depth": 1, "feed_rate": 10 ** 400,
        })
        assert math.isnan(op.feed_rate)

    def test_dict_round_trip(self):
        op = Operation(
            type=OperationType.CONTOUR, x=0.0, y=0.0, z_depth=2.0,
            tool=ToolDescriptor(ToolType.BALL_MILL, 6.0),
            path_segments=(
                PathSegment(SegmentType.LINE, 10.0, 0.0),
                PathSegment(SegmentType.ARC_CW, 0.0, 0.0, cx=5.0, cy=0.0),
            ),
        )
        assert Operation.from_dict(op.to_dict()) == op


class TestOperationGeometry:
    def test_iter_segments_chains_start_points(self):
        op = Operation(
            type=OperationType.CONTOUR, x=1.0, y=2.0, z_depth=1.0,
            path_segments=(
                PathSegment(SegmentType.LINE, 5.0, 2.0),
                PathSegment(SegmentType.LINE, 5.0, 6.0),
            ),
        )
        starts = [start for start, _ in op.iter_segments()]
        assert starts == [(1.0, 2.0), (5.0, 2.0)]

    def test_open_contour(self):
        op = Operation(
            type=OperationType.CONTOUR, x=0.0, y=0.0, z_depth=1.0,
            path_segments=(PathSegment(SegmentType.LINE, 5.0, 0.0),),
        )
        assert not op.is_closed

    def test_short_labels(self):
        assert OperationType.CIRCULAR_POCKET.short_label == "CIRCULAR"
        assert OperationType.FACE_MILL.short_label == "FACE"
        assert OperationType.DRILL.short_label == "DRILL"

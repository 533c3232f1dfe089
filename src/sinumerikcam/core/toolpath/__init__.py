"""Toolpath curve package."""

from .base import CurvePath, LineCurve3, MoveType, SplineCurve3
from .builder import (
    CurveBuilderParams,
    OperationCurve,
    ProgramCurve,
    build_operation_curve,
    build_program_curve,
)

__all__ = [
    "CurvePath",
    "LineCurve3",
    "MoveType",
    "SplineCurve3",
    "CurveBuilderParams",
    "OperationCurve",
    "ProgramCurve",
    "build_operation_curve",
    "build_program_curve",
]

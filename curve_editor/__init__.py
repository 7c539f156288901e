"""Interactive editor for numeric arrays with interpolated fitting curves."""

from .chart import CurveChart
from .codec import join, parse
from .config import EditorConfig, ValueConstraints
from .interpolation import (
    DuplicateAbscissaError,
    EmptyInputError,
    InsufficientPointsError,
    InterpolationError,
    InterpolationMethod,
    evaluate,
)
from .rendering import DisplayList, Renderer

__all__ = [
    "CurveChart",
    "DisplayList",
    "DuplicateAbscissaError",
    "EditorConfig",
    "EmptyInputError",
    "InsufficientPointsError",
    "InterpolationError",
    "InterpolationMethod",
    "Renderer",
    "ValueConstraints",
    "evaluate",
    "join",
    "parse",
]

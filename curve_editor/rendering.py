from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Union

# Average glyph advance used when no font metrics are available.
DEFAULT_CHAR_WIDTH: float = 7.0


class Style(str, Enum):
    GRID = "grid"
    GRID_LABEL = "grid_label"
    MIN_LINE = "min_line"
    MAX_LINE = "max_line"
    INDEX_LINE = "index_line"
    DATA_CURVE = "data_curve"
    VALUE_POINT = "value_point"
    VALUE_LABEL = "value_label"
    FITTING_CURVE = "fitting_curve"
    FITTING_POINT = "fitting_point"
    CURVE_MARKER = "curve_marker"
    INDICATOR = "indicator"


class Align(str, Enum):
    LEFT = "left"
    RIGHT = "right"


# ===========================================================================
# Primitives
# ===========================================================================

@dataclass(frozen=True, slots=True)
class Line:
    x0: float
    y0: float
    x1: float
    y1: float
    style: Style
    dimmed: bool = False


@dataclass(frozen=True, slots=True)
class Polyline:
    xs: tuple[float, ...]
    ys: tuple[float, ...]
    style: Style
    dimmed: bool = False


@dataclass(frozen=True, slots=True)
class Circle:
    x: float
    y: float
    radius: float
    style: Style
    filled: bool = True


@dataclass(frozen=True, slots=True)
class Text:
    x: float
    y: float
    text: str
    style: Style
    align: Align = Align.LEFT


@dataclass(frozen=True, slots=True)
class Clip:
    """Restrict subsequent primitives to a rectangle; ``None`` lifts the clip."""
    rect: Optional[tuple[float, float, float, float]]


Primitive = Union[Line, Polyline, Circle, Text, Clip]


# ===========================================================================
# Renderer
# ===========================================================================

class Renderer(ABC):

    @abstractmethod
    def begin_frame(self, width: float, height: float) -> None:
        raise NotImplementedError

    @abstractmethod
    def draw(self, primitive: Primitive) -> None:
        raise NotImplementedError

    @abstractmethod
    def text_width(self, text: str) -> float:
        raise NotImplementedError

    def end_frame(self) -> None:
        return None

    # convenience wrappers

    def line(self, x0: float, y0: float, x1: float, y1: float,
             style: Style, dimmed: bool = False) -> None:
        self.draw(Line(x0, y0, x1, y1, style, dimmed))

    def polyline(self, xs: Sequence[float], ys: Sequence[float],
                 style: Style, dimmed: bool = False) -> None:
        self.draw(Polyline(tuple(float(v) for v in xs), tuple(float(v) for v in ys),
                           style, dimmed))

    def circle(self, x: float, y: float, radius: float,
               style: Style, filled: bool = True) -> None:
        self.draw(Circle(x, y, radius, style, filled))

    def text(self, x: float, y: float, text: str, style: Style,
             align: Align = Align.LEFT) -> None:
        self.draw(Text(x, y, text, style, align))

    def clip(self, rect: Optional[tuple[float, float, float, float]]) -> None:
        self.draw(Clip(rect))


class DisplayList(Renderer):
    """Renderer that keeps the last frame as a list of primitives."""

    def __init__(self, char_width: float = DEFAULT_CHAR_WIDTH) -> None:
        self._char_width = char_width
        self.items: list[Primitive] = []
        self.size: tuple[float, float] = (0.0, 0.0)

    def begin_frame(self, width: float, height: float) -> None:
        self.items = []
        self.size = (width, height)

    def draw(self, primitive: Primitive) -> None:
        self.items.append(primitive)

    def text_width(self, text: str) -> float:
        return len(text) * self._char_width

    def of_style(self, style: Style) -> list[Primitive]:
        return [p for p in self.items if getattr(p, "style", None) is style]

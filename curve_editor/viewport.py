from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from .config import PAN_TOLERANCE_SPACINGS


def nice_step(raw: float) -> float:
    """Smallest of 1, 2, 5, 10 x 10^k that is not below ``raw``."""
    if raw <= 0 or not math.isfinite(raw):
        raise ValueError(f"step must be positive and finite, got {raw}")
    magnitude = 10.0 ** math.floor(math.log10(raw))
    for factor in (1.0, 2.0, 5.0):
        if raw <= factor * magnitude:
            return factor * magnitude
    return 10.0 * magnitude


@dataclass(slots=True)
class Viewport:
    """Affine mapping between (index, value) data space and widget pixels.

    The plot area starts at ``origin_x + tag_width``; ``tag_width`` is the
    width of the value labels and is refreshed by the chart every frame.
    """
    origin_x: float = 0.0
    origin_y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    index_spacing: float = 20.0
    value_scale: float = 5.0
    index_offset: float = -5.0
    value_offset: float = -125.0
    tag_width: float = 0.0

    def __post_init__(self) -> None:
        if self.value_scale <= 0:
            raise ValueError(f"value_scale must be positive, got {self.value_scale}")
        if self.index_spacing <= 0:
            raise ValueError(f"index_spacing must be positive, got {self.index_spacing}")

    # -- transforms ---------------------------------------------------------

    def index_to_x(self, index: float) -> float:
        return self.origin_x + self.tag_width + index * self.index_spacing - self.index_offset

    def x_to_index(self, x: float) -> float:
        return (x - self.origin_x - self.tag_width + self.index_offset) / self.index_spacing

    def value_to_y(self, value: float) -> float:
        return self.origin_y + self.height - (value - self.value_offset) * self.value_scale

    def y_to_value(self, y: float) -> float:
        return (self.origin_y + self.height - y) / self.value_scale + self.value_offset

    # -- geometry -----------------------------------------------------------

    @property
    def plot_left(self) -> float:
        return self.origin_x + self.tag_width

    @property
    def plot_right(self) -> float:
        return self.origin_x + self.width

    @property
    def bottom(self) -> float:
        return self.origin_y + self.height

    def resize(self, origin_x: float, origin_y: float, width: float, height: float) -> None:
        self.origin_x = origin_x
        self.origin_y = origin_y
        self.width = max(0.0, width)
        self.height = max(0.0, height)

    def plot_contains(self, x: float, y: float) -> bool:
        return (self.plot_left <= x <= self.plot_right
                and self.origin_y <= y <= self.bottom)

    def middle_value(self) -> float:
        return self.y_to_value(self.origin_y + self.height / 2.0)

    # -- pan / zoom ---------------------------------------------------------

    def index_pan_bounds(self, array_length: int) -> tuple[float, float]:
        tolerance = self.index_spacing * PAN_TOLERANCE_SPACINGS
        return -tolerance, array_length * self.index_spacing + tolerance - self.width

    def pan_by(self, dx: float, dy: float, array_length: int) -> None:
        """Shift the view by a pointer movement of (dx, dy) pixels."""
        lo, hi = self.index_pan_bounds(array_length)
        if hi >= lo:
            self.index_offset = min(hi, max(lo, self.index_offset - dx))
        self.value_offset += dy / self.value_scale

    def move_to_middle(self, value: float) -> None:
        if not math.isfinite(value):
            return
        self.value_offset = value - self.height / 2.0 / self.value_scale

    def zoom_to(self, scale: float, keep_value: Optional[float] = None) -> None:
        """Set pixels per value unit, keeping ``keep_value`` at mid-height."""
        if scale <= 0:
            raise ValueError(f"value_scale must be positive, got {scale}")
        if keep_value is None:
            keep_value = self.middle_value()
        self.value_scale = scale
        self.move_to_middle(keep_value)

    # -- axis ---------------------------------------------------------------

    def value_ticks(self, min_spacing: float) -> list[float]:
        """Gridline values from the bottom of the plot to its top."""
        step = nice_step(min_spacing / self.value_scale)
        first = step * math.floor(self.value_offset / step)
        top = self.y_to_value(self.origin_y)
        count = int(math.floor((top - first) / step)) + 1
        return [first + k * step for k in range(max(0, count))]

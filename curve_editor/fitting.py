from __future__ import annotations

import logging
import math
from typing import Any, Iterator, MutableSequence, Optional, Sequence

import numpy as np
from numpy.typing import NDArray

from .config import CURVE_SAMPLES_PER_POINT, POINT_RADIUS, STROKE_TOLERANCE, ValueConstraints
from .handles import Handle, Interactive, PointerState
from .interpolation import InterpolationError, InterpolationMethod, evaluate, interpolator, sample
from .rendering import Renderer, Style
from .viewport import Viewport

logger = logging.getLogger(__name__)

FloatArray = NDArray[np.floating[Any]]

# pixels between curve samples used for drawing and stroke hit-testing
CURVE_SAMPLE_PITCH: float = 4.0


# ===========================================================================
# Fitting point
# ===========================================================================

class FittingPoint(Handle):
    """Control point of the fitting curve.

    Indices may be fractional.  Fixed points sit on the first and last array
    index; dragging them only changes their value.
    """

    def __init__(self, index: float, value: float, viewport: Viewport, fixed: bool = False) -> None:
        super().__init__()
        self.index = float(index)
        self.value = float(value)
        self.fixed = fixed
        self._viewport = viewport

    def __repr__(self) -> str:
        kind = "fixed" if self.fixed else "free"
        return f"FittingPoint({self.index:g}, {self.value:g}, {kind})"

    def position(self) -> tuple[float, float]:
        return self._viewport.index_to_x(self.index), self._viewport.value_to_y(self.value)

    def move(self, index: float, value: float) -> None:
        if not self.fixed:
            self.index = float(index)
        self.value = float(value)

    def drag(self, pointer: PointerState) -> None:
        if not self.pressed:
            return
        x, y = self.target(pointer)
        self.move(self._viewport.x_to_index(x), self._viewport.y_to_value(y))

    def render(self, renderer: Renderer) -> None:
        x, y = self.position()
        renderer.circle(x, y, self.radius, Style.FITTING_POINT, filled=not self.fixed)


# ===========================================================================
# Fitting point set
# ===========================================================================

class FittingPointSet:

    def __init__(self, viewport: Viewport) -> None:
        self._viewport = viewport
        self.points: list[FittingPoint] = []

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[FittingPoint]:
        return iter(self.points)

    def __contains__(self, point: object) -> bool:
        return any(p is point for p in self.points)

    def clear(self) -> None:
        self.points = []

    def insert(self, index: float, value: float) -> FittingPoint:
        point = FittingPoint(index, value, self._viewport)
        self.points.append(point)
        return point

    def control_points(self) -> list[tuple[float, float]]:
        """(index, value) pairs in ascending index order."""
        return sorted(((p.index, p.value) for p in self.points), key=lambda c: c[0])

    def sanitize(self, values: Sequence[float]) -> None:
        """Restore the set's invariants against an array of ``len(values)``.

        Afterwards the first and last points are the fixed endpoints pinned
        to index 0 and ``len(values) - 1``, free points lie strictly between
        them in ascending index order, and no two free points share an index
        (the later one wins).
        """
        n = len(values)
        if n == 0:
            return
        last = n - 1

        fixed = [p for p in self.points if p.fixed]
        if len(fixed) < 2:
            fixed = [
                FittingPoint(0, values[0], self._viewport, fixed=True),
                FittingPoint(last, values[last], self._viewport, fixed=True),
            ]
        low, high = fixed[0], fixed[-1]
        low.index = 0.0
        high.index = float(last)

        free = sorted(
            (p for p in self.points if not p.fixed and 0.0 < p.index < last),
            key=lambda p: p.index,
        )
        kept: list[FittingPoint] = []
        for point in free:
            if kept and kept[-1].index == point.index:
                kept[-1] = point
            else:
                kept.append(point)

        dropped = len(self.points) - len(kept) - 2
        if dropped > 0:
            logger.debug("Dropped %d fitting point(s) outside range or duplicated", dropped)
        self.points = [low, *kept, high]


# ===========================================================================
# Fitting curve overlay
# ===========================================================================

def polyline_distance(xs: FloatArray, ys: FloatArray, x: float, y: float) -> float:
    """Shortest pixel distance from (x, y) to the polyline through (xs, ys)."""
    if len(xs) == 0:
        return math.inf
    if len(xs) == 1:
        return float(math.hypot(xs[0] - x, ys[0] - y))
    x0, y0 = xs[:-1], ys[:-1]
    dx, dy = np.diff(xs), np.diff(ys)
    len2 = dx * dx + dy * dy
    safe = np.where(len2 > 0, len2, 1.0)
    t = np.clip(((x - x0) * dx + (y - y0) * dy) / safe, 0.0, 1.0)
    t = np.where(len2 > 0, t, 0.0)
    return float(np.min(np.hypot(x0 + t * dx - x, y0 + t * dy - y)))


class FittingCurve(Interactive):
    """The interpolated path through the fitting points.

    Pressing on the stroke inserts a new free point there and hands the
    gesture to it.
    """

    def __init__(self, points: FittingPointSet, viewport: Viewport) -> None:
        self._points = points
        self._viewport = viewport
        self.method = InterpolationMethod.CUBIC_SPLINE
        self.path: Optional[tuple[FloatArray, FloatArray]] = None

    def update_path(self, method: InterpolationMethod) -> None:
        """Resample the curve in pixel space; leaves ``path`` empty on error."""
        self.method = method
        self.path = None
        controls = self._points.control_points()
        if len(controls) < 2:
            return
        vp = self._viewport
        span = abs(controls[-1][0] - controls[0][0]) * vp.index_spacing
        count = max(len(controls) * CURVE_SAMPLES_PER_POINT, int(span / CURVE_SAMPLE_PITCH))
        try:
            idx, vals = sample(method, controls, count)
        except (InterpolationError, ZeroDivisionError, OverflowError) as exc:
            logger.warning("Fitting curve not drawn: %s", exc)
            return
        self.path = (vp.index_to_x(idx), vp.value_to_y(vals))

    def value_at(self, index: float) -> float:
        return evaluate(self.method, self._points.control_points(), index)

    def hit(self, x: float, y: float) -> bool:
        if self.path is None:
            return False
        return polyline_distance(self.path[0], self.path[1], x, y) <= STROKE_TOLERANCE

    def press(self, pointer: PointerState) -> Interactive:
        index = self._viewport.x_to_index(pointer.x)
        point = self._points.insert(index, self.value_at(index))
        logger.debug("Created fitting point at index %.3f", index)
        return point.press(pointer)

    def render(self, renderer: Renderer, marker_x: Optional[float] = None) -> None:
        if self.path is None:
            return
        renderer.polyline(self.path[0], self.path[1], Style.FITTING_CURVE)
        if marker_x is not None:
            vp = self._viewport
            try:
                value = self.value_at(vp.x_to_index(marker_x))
            except (InterpolationError, ZeroDivisionError):
                return
            renderer.circle(marker_x, vp.value_to_y(value), POINT_RADIUS, Style.CURVE_MARKER, filled=False)


# ===========================================================================
# Commit
# ===========================================================================

def apply_fitting(
    values: MutableSequence[float],
    points: FittingPointSet,
    method: InterpolationMethod,
    constraints: ValueConstraints,
) -> None:
    """Resample every array element from the fitting curve, in place."""
    curve = interpolator(method, points.control_points())
    for i in range(len(values)):
        values[i] = constraints.limit(curve(float(i)))

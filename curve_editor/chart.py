from __future__ import annotations

import logging
import math
from typing import Any, Mapping, MutableSequence, Optional, Sequence, Union

import numpy as np

from .config import (
    CURVE_SAMPLES_PER_POINT,
    GRID_MIN_SPACING,
    PADDING,
    EditorConfig,
)
from .fitting import FittingCurve, FittingPoint, FittingPointSet, apply_fitting
from .handles import Interactive, PointerButton, PointerState, ValuePoint
from .interpolation import InterpolationError, sample
from .rendering import Align, Renderer, Style
from .viewport import Viewport, nice_step

logger = logging.getLogger(__name__)

Values = MutableSequence[float]


def _tick_label(value: float, step: float) -> str:
    decimals = max(0, -int(math.floor(math.log10(step))))
    text = f"{value:.{decimals}f}"
    return "0" if float(text) == 0 else text


# ===========================================================================
# Pan handler
# ===========================================================================

class PanHandler(Interactive):
    """Middle-button drag inside the plot area moves the view."""

    def __init__(self, chart: CurveChart) -> None:
        self._chart = chart
        self._last: Optional[tuple[float, float]] = None

    def hit(self, x: float, y: float) -> bool:
        return self._chart.viewport.plot_contains(x, y)

    def press(self, pointer: PointerState) -> Interactive:
        self._last = (pointer.x, pointer.y)
        return self

    def drag(self, pointer: PointerState) -> None:
        if self._last is None:
            return
        dx = pointer.x - self._last[0]
        dy = pointer.y - self._last[1]
        self._chart.viewport.pan_by(dx, dy, len(self._chart.values))
        self._last = (pointer.x, pointer.y)

    def release(self, pointer: PointerState) -> None:
        self.drag(pointer)
        self._last = None

    def cancel(self) -> None:
        self._last = None


# ===========================================================================
# Chart
# ===========================================================================

class CurveChart:
    """Editable chart of one sample array with an optional fitting curve.

    Every pointer event becomes one ``redraw`` call.  A frame reconciles the
    handles with the array, sanitizes the fitting points, hit-tests against
    the committed state, lets at most one element claim a press and follow
    it until release, and finally renders into the render target.
    """

    def __init__(
        self,
        render_target: Optional[Renderer] = None,
        config: Union[EditorConfig, Mapping[str, Any], None] = None,
    ) -> None:
        self.config = EditorConfig()
        self.viewport = Viewport(index_spacing=self.config.index_spacing,
                                 value_scale=self.config.ratio)
        self.values: Values = []
        self.fitting_mode = False
        self.fitting_points = FittingPointSet(self.viewport)
        self.fitting_curve = FittingCurve(self.fitting_points, self.viewport)
        self.width = 0.0
        self.height = 0.0

        self._renderer: Optional[Renderer] = None
        self._points: list[ValuePoint] = []
        self._pan = PanHandler(self)
        self._grab: Optional[Interactive] = None
        self._pointer = PointerState()
        self._was_down = False

        if render_target is not None or config is not None:
            self.initialize(render_target, config)

    # -- host API -----------------------------------------------------------

    def initialize(
        self,
        render_target: Optional[Renderer],
        config: Union[EditorConfig, Mapping[str, Any], None] = None,
    ) -> None:
        self._renderer = render_target
        if isinstance(config, EditorConfig):
            self._set_config(config)
        elif config is not None:
            self._set_config(self.config.updated(config))

    def load_array(self, values: Sequence[float]) -> None:
        """Edit ``values`` in place when it is a list, otherwise a copy of it."""
        self.values = values if isinstance(values, list) else [float(v) for v in values]
        self._drop_grab()
        self.fitting_points.clear()
        logger.info("Loaded array of %d value(s)", len(self.values))
        self.redraw()

    def apply_params(self, **params: Any) -> None:
        self._set_config(self.config.updated(params))
        self.redraw()

    def set_ratio(self, ratio: float) -> None:
        self.apply_params(ratio=ratio)

    def move_to_middle(self, value: float) -> None:
        self.viewport.move_to_middle(value)
        self.redraw()

    def resize(self, width: float, height: float) -> None:
        self.width = float(width)
        self.height = float(height)
        self.viewport.resize(PADDING, PADDING, width - 2 * PADDING, height - 2 * PADDING)
        self.redraw()

    def get_array_min(self) -> float:
        return float(np.min(self.values)) if len(self.values) else math.nan

    def get_array_max(self) -> float:
        return float(np.max(self.values)) if len(self.values) else math.nan

    def get_array_mean(self) -> float:
        return float(np.mean(self.values)) if len(self.values) else math.nan

    def get_suitable_ratio(self, fill: float) -> float:
        """Pixels per unit that make the data span ``fill`` of the plot height."""
        if not len(self.values):
            return 1.0
        lo, hi = self.get_array_min(), self.get_array_max()
        if hi == lo:
            return 1.0
        return self.viewport.height / (hi - lo) * fill

    def adjust_display(self, fill: float = 0.5) -> None:
        self.set_ratio(self.get_suitable_ratio(fill))
        if self.values:
            self.move_to_middle(self.get_array_mean())

    def set_fitting_mode(self, enabled: bool) -> None:
        if enabled == self.fitting_mode:
            return
        self.fitting_mode = enabled
        if not enabled:
            self._drop_grab()
            self.fitting_points.clear()
        logger.info("Fitting mode %s", "on" if enabled else "off")
        self.redraw()

    def apply_fitting(self) -> None:
        """Resample the array through the fitting curve (fitting mode only)."""
        if not self.fitting_mode or not self.values:
            return
        self.fitting_points.sanitize(self.values)
        apply_fitting(self.values, self.fitting_points,
                      self.config.interpolation_method, self.config.constraints)
        logger.info("Applied %s fitting through %d point(s)",
                    self.config.interpolation_method.value, len(self.fitting_points))
        self.redraw()

    def clear_fitting_curve(self) -> None:
        if isinstance(self._grab, FittingPoint):
            self._drop_grab()
        self.fitting_points.clear()
        self.redraw()

    def round_values(self) -> None:
        constraints = self.config.constraints
        for i, value in enumerate(self.values):
            self.values[i] = constraints.limit(value)
        self.redraw()

    def offset_values(self, delta: float) -> None:
        for i, value in enumerate(self.values):
            self.values[i] = value + delta
        self.redraw()

    def scale_values(self, factor: float) -> None:
        for i, value in enumerate(self.values):
            self.values[i] = value * factor
        self.redraw()

    # -- owner interface for value points ------------------------------------

    def value_at(self, index: int) -> float:
        return self.values[index]

    def commit_value(self, index: int, value: float) -> float:
        value = self.config.constraints.limit(value)
        self.values[index] = value
        self.config.on_value_changed(index, value)
        return value

    def format_value(self, value: float) -> str:
        return f"{value:.{self.config.decimal_places}f}"

    @property
    def grabbed(self) -> Optional[Interactive]:
        return self._grab

    # -- frame --------------------------------------------------------------

    def redraw(
        self,
        pointer_down: Optional[bool] = None,
        x: Optional[float] = None,
        y: Optional[float] = None,
        button: Optional[PointerButton] = None,
    ) -> None:
        """Run one frame for the given pointer state.

        Arguments left out repeat the previous pointer state, so parameter
        changes can redraw without touching an in-flight gesture.
        """
        last = self._pointer
        pointer = PointerState(
            last.down if pointer_down is None else pointer_down,
            last.x if x is None else x,
            last.y if y is None else y,
            button if button is not None else last.button,
        )

        self._reconcile()
        if self.fitting_mode and self.values:
            self.fitting_points.sanitize(self.values)
            if isinstance(self._grab, FittingPoint) and self._grab not in self.fitting_points:
                self._drop_grab()

        ticks = self._layout_axis()
        if self.fitting_mode:
            self.fitting_curve.update_path(self.config.interpolation_method)

        active = self._grab
        hovered = self._route(pointer)

        if self.fitting_mode and (active is not None or self._grab is not None):
            self.fitting_curve.update_path(self.config.interpolation_method)
        self._render(pointer, ticks, hovered)
        self._pointer = pointer

    def _set_config(self, config: EditorConfig) -> None:
        self.config = config
        self.viewport.index_spacing = config.index_spacing
        if config.ratio != self.viewport.value_scale:
            self.viewport.zoom_to(config.ratio)

    def _reconcile(self) -> None:
        n = len(self.values)
        if len(self._points) > n:
            if isinstance(self._grab, ValuePoint) and self._grab.index >= n:
                self._drop_grab()
            del self._points[n:]
        while len(self._points) < n:
            self._points.append(ValuePoint(len(self._points), self))

    def _drop_grab(self) -> None:
        if self._grab is not None:
            logger.debug("Gesture cancelled for %r", self._grab)
            self._grab.cancel()
        self._grab = None

    def _layout_axis(self) -> list[tuple[float, str]]:
        vp = self.viewport
        vp.tag_width = 0.0
        if vp.height <= 0:
            return []
        step = nice_step(GRID_MIN_SPACING / vp.value_scale)
        ticks = [(v, _tick_label(v, step)) for v in vp.value_ticks(GRID_MIN_SPACING)]
        if self._renderer is not None and ticks:
            vp.tag_width = max(self._renderer.text_width(label) for _, label in ticks)
        return ticks

    def _visible_range(self) -> range:
        vp = self.viewport
        n = len(self.values)
        if n == 0 or vp.width <= 0:
            return range(0)
        lo = math.ceil(vp.x_to_index(vp.origin_x - vp.index_spacing))
        hi = math.floor(vp.x_to_index(vp.origin_x + vp.width + vp.index_spacing))
        return range(max(0, lo), min(n - 1, hi) + 1)

    # -- hit test and gesture routing ----------------------------------------

    def _candidates(self, button: Optional[PointerButton]) -> list[Interactive]:
        if button is PointerButton.MIDDLE:
            return [self._pan]
        if button not in (None, PointerButton.LEFT):
            return []
        if self.fitting_mode:
            return [*reversed(self.fitting_points.points), self.fitting_curve]
        return [self._points[i] for i in reversed(self._visible_range())]

    def _hover(self, pointer: PointerState) -> Optional[Interactive]:
        """The element a left press here would claim, or a value point under it."""
        if self._grab is not None or not self.viewport.plot_contains(pointer.x, pointer.y):
            return None
        if self.fitting_mode:
            for point in reversed(self.fitting_points.points):
                if point.hit(pointer.x, pointer.y):
                    return point
            if self.fitting_curve.hit(pointer.x, pointer.y):
                return self.fitting_curve
        for i in reversed(self._visible_range()):
            if self._points[i].hit(pointer.x, pointer.y):
                return self._points[i]
        return None

    def _route(self, pointer: PointerState) -> Optional[Interactive]:
        hovered = self._hover(pointer)
        pressed = pointer.down and not self._was_down
        self._was_down = pointer.down

        if pressed:
            self._drop_grab()
            if not self.viewport.plot_contains(pointer.x, pointer.y):
                return hovered
            for element in self._candidates(pointer.button):
                if element.hit(pointer.x, pointer.y):
                    self._grab = element.press(pointer)
                    logger.debug("Gesture claimed by %r", self._grab)
                    break
            return hovered

        if self._grab is None:
            return hovered
        if pointer.down:
            self._grab.drag(pointer)
        else:
            self._grab.release(pointer)
            logger.debug("Gesture released by %r", self._grab)
            self._grab = None
        return hovered

    # -- rendering ----------------------------------------------------------

    def _render(
        self,
        pointer: PointerState,
        ticks: list[tuple[float, str]],
        hovered: Optional[Interactive],
    ) -> None:
        r = self._renderer
        if r is None:
            return
        vp = self.viewport
        r.begin_frame(self.width, self.height)
        r.line(pointer.x, 0.0, pointer.x, self.height, Style.INDICATOR)

        r.clip((vp.origin_x, vp.origin_y, vp.width, vp.height))
        for value, label in ticks:
            y = vp.value_to_y(value)
            r.line(vp.plot_left, y, vp.plot_right, y, Style.GRID)
            r.text(vp.plot_left, y, label, Style.GRID_LABEL, Align.RIGHT)
        if self.config.min_val is not None:
            y = vp.value_to_y(self.config.min_val)
            r.line(vp.plot_left, y, vp.plot_right, y, Style.MIN_LINE)
        if self.config.max_val is not None:
            y = vp.value_to_y(self.config.max_val)
            r.line(vp.plot_left, y, vp.plot_right, y, Style.MAX_LINE)

        r.clip((vp.plot_left, vp.origin_y, vp.width - vp.tag_width, vp.height))
        visible = self._visible_range()
        for i in visible:
            x = vp.index_to_x(i)
            r.line(x, vp.origin_y, x, vp.bottom, Style.INDEX_LINE)
        self._render_data_curve(r, visible)
        for i in reversed(visible):
            point = self._points[i]
            point.render(r, hovered is point)

        if self.fitting_mode:
            marker_x = pointer.x if hovered is self.fitting_curve else None
            self.fitting_curve.render(r, marker_x)
            for fitting_point in self.fitting_points:
                fitting_point.render(r)

        r.clip(None)
        r.end_frame()

    def _render_data_curve(self, r: Renderer, visible: range) -> None:
        if len(visible) < 2:
            return
        controls = [(float(i), self.values[i]) for i in visible]
        try:
            idx, vals = sample(self.config.interpolation_method, controls,
                               len(controls) * CURVE_SAMPLES_PER_POINT)
        except (InterpolationError, ZeroDivisionError, OverflowError) as exc:
            logger.warning("Data curve not drawn: %s", exc)
            return
        vp = self.viewport
        r.polyline(vp.index_to_x(idx), vp.value_to_y(vals), Style.DATA_CURVE,
                   dimmed=self.fitting_mode)

from __future__ import annotations

import math

import pytest
from hypothesis import given
from hypothesis import strategies as st

from curve_editor.viewport import Viewport, nice_step

VALUES = st.floats(-1e6, 1e6)


@pytest.fixture
def viewport() -> Viewport:
    return Viewport(origin_x=20.0, origin_y=20.0, width=360.0, height=260.0, tag_width=30.0)


@given(value=VALUES, scale=st.floats(1e-3, 1e3), offset=VALUES)
def test_value_round_trip(value: float, scale: float, offset: float) -> None:
    vp = Viewport(origin_y=20.0, height=260.0, value_scale=scale, value_offset=offset)
    y = vp.value_to_y(value)
    assert vp.value_to_y(vp.y_to_value(y)) == pytest.approx(y, rel=1e-9, abs=1e-6)


@given(index=st.integers(0, 100_000), spacing=st.floats(1.0, 200.0), offset=VALUES)
def test_index_round_trip(index: int, spacing: float, offset: float) -> None:
    vp = Viewport(origin_x=20.0, tag_width=42.0, index_spacing=spacing, index_offset=offset)
    assert vp.x_to_index(vp.index_to_x(index)) == pytest.approx(index, abs=1e-6)


def test_larger_values_are_drawn_higher(viewport: Viewport) -> None:
    assert viewport.value_to_y(10.0) < viewport.value_to_y(0.0)


def test_plot_area_starts_after_labels(viewport: Viewport) -> None:
    assert viewport.plot_left == 50.0
    assert viewport.plot_contains(60.0, 100.0)
    assert not viewport.plot_contains(40.0, 100.0)
    assert not viewport.plot_contains(60.0, 300.0)


def test_invalid_scale_is_rejected() -> None:
    with pytest.raises(ValueError):
        Viewport(value_scale=0.0)
    with pytest.raises(ValueError):
        Viewport(index_spacing=-1.0)


# ===========================================================================
# Pan and zoom
# ===========================================================================

def test_pan_clamps_index_offset(viewport: Viewport) -> None:
    viewport.width = 100.0
    lo, hi = viewport.index_pan_bounds(10)
    assert (lo, hi) == (-80.0, 180.0)

    viewport.pan_by(-1000.0, 0.0, 10)
    assert viewport.index_offset == hi
    viewport.pan_by(1000.0, 0.0, 10)
    assert viewport.index_offset == lo


def test_pan_moves_values_with_the_pointer(viewport: Viewport) -> None:
    before = viewport.y_to_value(100.0)
    viewport.pan_by(0.0, 25.0, 10)
    assert viewport.y_to_value(125.0) == pytest.approx(before)


def test_short_array_keeps_index_offset(viewport: Viewport) -> None:
    # two samples fit in the view many times over: no valid range to clamp into
    viewport.pan_by(-50.0, 0.0, 2)
    assert viewport.index_offset == -5.0


def test_zoom_keeps_middle_value(viewport: Viewport) -> None:
    middle = viewport.middle_value()
    viewport.zoom_to(13.0)
    assert viewport.value_scale == 13.0
    assert viewport.middle_value() == pytest.approx(middle)


def test_zoom_to_explicit_value(viewport: Viewport) -> None:
    viewport.zoom_to(2.0, keep_value=42.0)
    assert viewport.middle_value() == pytest.approx(42.0)


def test_move_to_middle(viewport: Viewport) -> None:
    viewport.move_to_middle(-7.5)
    assert viewport.value_to_y(-7.5) == pytest.approx(20.0 + 130.0)


@pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
def test_move_to_middle_ignores_non_finite_values(viewport: Viewport, value: float) -> None:
    viewport.move_to_middle(3.0)
    viewport.move_to_middle(value)
    assert viewport.middle_value() == pytest.approx(3.0)
    assert viewport.value_ticks(20.0)


# ===========================================================================
# Axis ticks
# ===========================================================================

@pytest.mark.parametrize(
    ("raw", "step"),
    [(0.3, 0.5), (1.0, 1.0), (1.5, 2.0), (4.0, 5.0), (7.0, 10.0), (20.0, 20.0), (0.012, 0.02)],
)
def test_nice_step(raw: float, step: float) -> None:
    assert nice_step(raw) == pytest.approx(step)


def test_nice_step_rejects_non_positive() -> None:
    with pytest.raises(ValueError):
        nice_step(0.0)
    with pytest.raises(ValueError):
        nice_step(math.inf)


@pytest.mark.parametrize("scale", [0.01, 0.7, 5.0, 13.0, 250.0])
def test_ticks_cover_plot_with_readable_spacing(viewport: Viewport, scale: float) -> None:
    viewport.zoom_to(scale, keep_value=3.0)
    ticks = viewport.value_ticks(20.0)
    step = nice_step(20.0 / scale)
    assert ticks
    assert step * scale >= 20.0
    assert ticks[0] <= viewport.y_to_value(viewport.bottom)
    assert ticks[-1] <= viewport.y_to_value(viewport.origin_y) + 1e-9
    for a, b in zip(ticks, ticks[1:]):
        assert b - a == pytest.approx(step)

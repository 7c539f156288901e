from __future__ import annotations

import logging

import numpy as np
import pytest
from hypothesis import given
from hypothesis import strategies as st

from curve_editor.config import ValueConstraints
from curve_editor.fitting import (
    FittingCurve,
    FittingPoint,
    FittingPointSet,
    apply_fitting,
    polyline_distance,
)
from curve_editor.handles import PointerState
from curve_editor.interpolation import InterpolationMethod
from curve_editor.viewport import Viewport


@pytest.fixture
def viewport() -> Viewport:
    vp = Viewport(origin_x=20.0, origin_y=20.0, width=360.0, height=260.0)
    vp.move_to_middle(0.0)
    return vp


@pytest.fixture
def point_set(viewport: Viewport) -> FittingPointSet:
    return FittingPointSet(viewport)


def _assert_sanitized(points: FittingPointSet, length: int) -> None:
    items = points.points
    assert items[0].fixed and items[0].index == 0.0
    assert items[-1].fixed and items[-1].index == float(length - 1)
    assert sum(p.fixed for p in items) == 2
    interior = [p.index for p in items[1:-1]]
    assert all(0.0 < i < length - 1 for i in interior)
    assert all(a < b for a, b in zip(interior, interior[1:]))


# ===========================================================================
# Sanitizing
# ===========================================================================

def test_empty_set_gets_fixed_endpoints_from_array(point_set: FittingPointSet) -> None:
    point_set.sanitize([3.0, 10.0, -4.0])
    assert [(p.index, p.value, p.fixed) for p in point_set] == [
        (0.0, 3.0, True),
        (2.0, -4.0, True),
    ]


def test_fixed_endpoints_follow_array_length(point_set: FittingPointSet) -> None:
    point_set.sanitize([0.0] * 5)
    low, high = point_set.points
    high.value = 7.0
    point_set.sanitize([0.0] * 9)
    assert point_set.points == [low, high]
    assert high.index == 8.0
    assert high.value == 7.0


def test_free_points_outside_or_on_ends_are_dropped(point_set: FittingPointSet, caplog: pytest.LogCaptureFixture) -> None:
    point_set.sanitize([0.0] * 5)
    point_set.insert(-1.0, 1.0)
    point_set.insert(0.0, 1.0)
    point_set.insert(2.0, 1.0)
    point_set.insert(4.0, 1.0)
    point_set.insert(6.5, 1.0)
    with caplog.at_level(logging.DEBUG, logger="curve_editor.fitting"):
        point_set.sanitize([0.0] * 5)
    assert [p.index for p in point_set] == [0.0, 2.0, 4.0]
    assert "Dropped 4 fitting point(s)" in caplog.text


def test_later_point_wins_on_shared_index(point_set: FittingPointSet) -> None:
    point_set.sanitize([0.0] * 5)
    point_set.insert(2.0, 1.0)
    later = point_set.insert(2.0, 9.0)
    point_set.sanitize([0.0] * 5)
    assert len(point_set) == 3
    assert point_set.points[1] is later


def test_points_are_sorted_by_index(point_set: FittingPointSet) -> None:
    point_set.sanitize([0.0] * 10)
    for index in (7.5, 1.25, 4.0):
        point_set.insert(index, 0.0)
    point_set.sanitize([0.0] * 10)
    assert [p.index for p in point_set] == [0.0, 1.25, 4.0, 7.5, 9.0]


@given(
    indices=st.lists(st.floats(-3.0, 15.0, allow_nan=False), max_size=12),
    length=st.integers(2, 12),
)
def test_sanitize_invariants_hold(indices: list[float], length: int) -> None:
    points = FittingPointSet(Viewport())
    points.sanitize([1.0] * 12)
    for index in indices:
        points.insert(index, 0.0)
    points.sanitize([1.0] * length)
    _assert_sanitized(points, length)


def test_fixed_point_drag_keeps_its_index(viewport: Viewport) -> None:
    point = FittingPoint(4.0, 0.0, viewport, fixed=True)
    point.move(1.5, 3.0)
    assert (point.index, point.value) == (4.0, 3.0)
    free = FittingPoint(4.0, 0.0, viewport)
    free.move(1.5, 3.0)
    assert (free.index, free.value) == (1.5, 3.0)


def test_control_points_are_ordered(point_set: FittingPointSet) -> None:
    point_set.insert(3.0, 1.0)
    point_set.insert(1.0, 2.0)
    assert point_set.control_points() == [(1.0, 2.0), (3.0, 1.0)]


# ===========================================================================
# Curve overlay
# ===========================================================================

def test_polyline_distance() -> None:
    xs = np.array([0.0, 10.0, 10.0])
    ys = np.array([0.0, 0.0, 10.0])
    assert polyline_distance(xs, ys, 5.0, 3.0) == pytest.approx(3.0)
    assert polyline_distance(xs, ys, 13.0, 5.0) == pytest.approx(3.0)
    assert polyline_distance(xs, ys, -3.0, -4.0) == pytest.approx(5.0)
    assert polyline_distance(xs[:0], ys[:0], 0.0, 0.0) == float("inf")


def test_pressing_the_curve_inserts_a_grabbed_point(viewport: Viewport, point_set: FittingPointSet) -> None:
    point_set.sanitize([0.0, 0.0, 0.0, 0.0, 0.0])
    curve = FittingCurve(point_set, viewport)
    curve.update_path(InterpolationMethod.LINEAR)
    x, y = viewport.index_to_x(2.0), viewport.value_to_y(0.0)
    assert curve.hit(x, y + 2.0)
    assert not curve.hit(x, y + 20.0)

    grabbed = curve.press(PointerState(True, x, y))
    assert isinstance(grabbed, FittingPoint)
    assert grabbed.pressed and not grabbed.fixed
    assert grabbed.index == pytest.approx(2.0)
    assert grabbed in point_set


def test_point_inserted_beside_the_stroke_starts_on_the_curve(
    viewport: Viewport, point_set: FittingPointSet
) -> None:
    point_set.sanitize([0.0, 0.0, 0.0, 0.0, 0.0])
    curve = FittingCurve(point_set, viewport)
    curve.update_path(InterpolationMethod.LINEAR)
    x, y = viewport.index_to_x(2.0), viewport.value_to_y(0.0)

    grabbed = curve.press(PointerState(True, x, y + 3.0))
    assert isinstance(grabbed, FittingPoint)
    assert grabbed.value == pytest.approx(0.0)
    grabbed.drag(PointerState(True, x, y + 3.0 - viewport.value_scale))
    assert grabbed.value == pytest.approx(1.0)


def test_curve_error_leaves_no_path(viewport: Viewport, point_set: FittingPointSet, caplog: pytest.LogCaptureFixture) -> None:
    point_set.sanitize([5.0])
    curve = FittingCurve(point_set, viewport)
    with caplog.at_level(logging.WARNING, logger="curve_editor.fitting"):
        curve.update_path(InterpolationMethod.POLYNOMIAL)
    assert curve.path is None
    assert not curve.hit(0.0, 0.0)
    assert "Fitting curve not drawn" in caplog.text


# ===========================================================================
# Commit
# ===========================================================================

def test_apply_fitting_resamples_every_element(point_set: FittingPointSet) -> None:
    values = [0.0] * 5
    point_set.sanitize(values)
    point_set.points[-1].value = 8.0
    apply_fitting(values, point_set, InterpolationMethod.LINEAR, ValueConstraints())
    assert values == [0.0, 2.0, 4.0, 6.0, 8.0]


def test_apply_fitting_respects_constraints(point_set: FittingPointSet) -> None:
    values = [0.0] * 5
    point_set.sanitize(values)
    point_set.insert(2.0, 50.0)
    point_set.sanitize(values)
    apply_fitting(values, point_set, InterpolationMethod.CUBIC_SPLINE,
                  ValueConstraints(min_val=0.0, max_val=30.0, decimal_places=1))
    assert values[2] == 30.0
    assert values[0] == 0.0 and values[4] == 0.0
    assert all(0.0 <= v <= 30.0 for v in values)


def test_apply_fitting_keeps_list_identity(point_set: FittingPointSet) -> None:
    values = [1.0, 2.0, 3.0]
    alias = values
    point_set.sanitize(values)
    apply_fitting(values, point_set, InterpolationMethod.PCHIP, ValueConstraints())
    assert alias is values
    assert values == [1.0, 2.0, 3.0]

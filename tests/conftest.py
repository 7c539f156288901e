from __future__ import annotations

import pytest
from hypothesis import settings

from curve_editor.chart import CurveChart
from curve_editor.config import EditorConfig
from curve_editor.rendering import DisplayList

# First-call imports (e.g. scipy) make example timings unreliable.
settings.register_profile("default", deadline=None)
settings.load_profile("default")


@pytest.fixture
def display() -> DisplayList:
    return DisplayList()


@pytest.fixture
def changes() -> list[tuple[int, float]]:
    """Records every (index, value) reported through on_value_changed."""
    return []


@pytest.fixture
def chart(display: DisplayList, changes: list[tuple[int, float]]) -> CurveChart:
    chart = CurveChart(display, EditorConfig(on_value_changed=lambda i, v: changes.append((i, v))))
    chart.resize(400, 300)
    return chart

"""Smoke tests for the Qt host on an offscreen platform."""

from __future__ import annotations

import os
from typing import Iterator

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
QtWidgets = pytest.importorskip("PySide6.QtWidgets")
pytest.importorskip("pyqtgraph")

from curve_editor.main import EditorWindow  # noqa: E402
from curve_editor.rendering import Style  # noqa: E402


@pytest.fixture(scope="module")
def app() -> "QtWidgets.QApplication":
    return QtWidgets.QApplication.instance() or QtWidgets.QApplication([])


@pytest.fixture
def window(app: "QtWidgets.QApplication") -> Iterator[EditorWindow]:
    window = EditorWindow("data = [1, 2, 3];")
    window.resize(900, 600)
    window.show()
    app.processEvents()
    yield window
    window.close()


def test_text_is_loaded_into_chart(window: EditorWindow) -> None:
    assert window._chart.values == [1.0, 2.0, 3.0]
    assert window._chart.viewport.height > 0


def test_chart_edits_are_written_back(window: EditorWindow) -> None:
    window._chart.commit_value(1, 20.0)
    assert window._text_edit.toPlainText() == "data = [1, 20, 3];"


def test_round_uses_decimal_places(window: EditorWindow) -> None:
    window._text_edit.setPlainText("1.26 2.5")
    window.load_text()
    window._decimals_sb.setValue(1)
    window.round_values()
    assert window._text_edit.toPlainText() == "1.3 2.5"


def test_fitting_toggle_and_apply(window: EditorWindow) -> None:
    window._fitting_btn.setChecked(True)
    assert window._chart.fitting_mode
    assert window._apply_btn.isEnabled()
    window.apply_fitting()
    assert not window._chart.fitting_mode
    assert window._text_edit.toPlainText() == "data = [1, 2, 3];"


def test_frame_is_painted(window: EditorWindow, app: "QtWidgets.QApplication") -> None:
    widget = window._chart_widget
    widget.repaint()
    app.processEvents()
    assert widget.renderer.of_style(Style.VALUE_POINT)
    assert not widget.grab().isNull()

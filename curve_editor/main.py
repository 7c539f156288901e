"""
Curve editor desktop host.

The text box holds free text with numbers in it; the chart below shows those
numbers as draggable points.  Edits in the chart are written back into the
text, keeping everything that is not a number untouched.

Mouse
-----
left drag on a point        change its value
middle drag                 pan
fitting mode, left on curve add a fitting point and drag it
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Optional

import pyqtgraph as pg
from PySide6.QtCore import QPointF, QRectF, Qt, Signal
from PySide6.QtGui import QFontMetricsF, QMouseEvent, QPainter, QPaintEvent, QPolygonF, QResizeEvent
from PySide6.QtWidgets import (
    QApplication,
    QCheckBox,
    QComboBox,
    QDoubleSpinBox,
    QGridLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPlainTextEdit,
    QPushButton,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from . import codec
from .chart import CurveChart
from .config import DEFAULT_RATIO, MAX_DECIMAL_PLACES, MIN_RATIO, EditorConfig
from .handles import PointerButton
from .interpolation import InterpolationError, InterpolationMethod
from .rendering import Align, Circle, Clip, DisplayList, Line, Polyline, Style, Text

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Drawing styles: colour, pen width, dashed
# ---------------------------------------------------------------------------

_STYLES: dict[Style, tuple[tuple[int, int, int], float, bool]] = {
    Style.GRID: ((200, 200, 200), 1.0, False),
    Style.GRID_LABEL: ((130, 130, 130), 1.0, False),
    Style.MIN_LINE: ((60, 160, 240), 1.0, True),
    Style.MAX_LINE: ((220, 80, 80), 1.0, True),
    Style.INDEX_LINE: ((235, 235, 235), 1.0, False),
    Style.DATA_CURVE: ((80, 80, 80), 2.0, False),
    Style.VALUE_POINT: ((80, 80, 80), 1.0, False),
    Style.VALUE_LABEL: ((40, 40, 40), 1.0, False),
    Style.FITTING_CURVE: ((255, 140, 0), 2.0, False),
    Style.FITTING_POINT: ((255, 140, 0), 1.5, False),
    Style.CURVE_MARKER: ((255, 140, 0), 1.0, False),
    Style.INDICATOR: ((180, 180, 180), 1.0, True),
}

DIMMED_ALPHA: int = 70

_BUTTONS: dict[Qt.MouseButton, PointerButton] = {
    Qt.MouseButton.LeftButton: PointerButton.LEFT,
    Qt.MouseButton.MiddleButton: PointerButton.MIDDLE,
    Qt.MouseButton.RightButton: PointerButton.RIGHT,
}

_METHOD_LABELS: tuple[tuple[str, InterpolationMethod], ...] = (
    ("Cubic spline", InterpolationMethod.CUBIC_SPLINE),
    ("Linear", InterpolationMethod.LINEAR),
    ("Catmull-Rom", InterpolationMethod.CATMULL_ROM),
    ("PCHIP", InterpolationMethod.PCHIP),
    ("Polynomial", InterpolationMethod.POLYNOMIAL),
)


def _pen(style: Style, dimmed: bool = False) -> Any:
    rgb, width, dashed = _STYLES[style]
    color = pg.mkColor(*rgb, DIMMED_ALPHA if dimmed else 255)
    pen = pg.mkPen(color=color, width=width)
    if dashed:
        pen.setStyle(Qt.PenStyle.DashLine)
    return pen


# ===========================================================================
# Qt renderer
# ===========================================================================

class QtDisplayList(DisplayList):
    """Display list that measures text with the widget's font."""

    def __init__(self, widget: QWidget) -> None:
        super().__init__()
        self._widget = widget

    def text_width(self, text: str) -> float:
        return QFontMetricsF(self._widget.font()).horizontalAdvance(text)

    def end_frame(self) -> None:
        self._widget.update()

    def replay(self, painter: QPainter) -> None:
        metrics = QFontMetricsF(painter.font())
        half_ascent = metrics.ascent() / 2.0
        for item in self.items:
            match item:
                case Clip(rect=None):
                    painter.setClipping(False)
                case Clip(rect=(x, y, w, h)):
                    painter.setClipRect(QRectF(x, y, w, h))
                case Line():
                    painter.setPen(_pen(item.style, item.dimmed))
                    painter.drawLine(QPointF(item.x0, item.y0), QPointF(item.x1, item.y1))
                case Polyline():
                    painter.setPen(_pen(item.style, item.dimmed))
                    painter.drawPolyline(QPolygonF(
                        [QPointF(x, y) for x, y in zip(item.xs, item.ys)]
                    ))
                case Circle():
                    painter.setPen(_pen(item.style))
                    if item.filled:
                        painter.setBrush(pg.mkBrush(_STYLES[item.style][0]))
                    else:
                        painter.setBrush(Qt.BrushStyle.NoBrush)
                    painter.drawEllipse(QPointF(item.x, item.y), item.radius, item.radius)
                case Text():
                    painter.setPen(_pen(item.style))
                    x = item.x
                    if item.align is Align.RIGHT:
                        x -= metrics.horizontalAdvance(item.text) + 4.0
                    painter.drawText(QPointF(x, item.y + half_ascent), item.text)


# ===========================================================================
# Chart widget
# ===========================================================================

class CurveEditorWidget(QWidget):

    resized = Signal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setMouseTracking(True)
        self.setMinimumSize(320, 200)
        self._display = QtDisplayList(self)
        self.chart = CurveChart(self._display)
        self._button: Optional[PointerButton] = None

    @property
    def renderer(self) -> QtDisplayList:
        return self._display

    def _pointer(self, event: QMouseEvent) -> tuple[float, float]:
        pos = event.position()
        return float(pos.x()), float(pos.y())

    def mousePressEvent(self, event: QMouseEvent) -> None:  # noqa: N802
        button = _BUTTONS.get(event.button())
        if button is None or self._button is not None:
            return
        self._button = button
        x, y = self._pointer(event)
        self.chart.redraw(True, x, y, button)
        if button is PointerButton.MIDDLE:
            self.setCursor(Qt.CursorShape.ClosedHandCursor)

    def mouseMoveEvent(self, event: QMouseEvent) -> None:  # noqa: N802
        x, y = self._pointer(event)
        self.chart.redraw(self._button is not None, x, y)

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:  # noqa: N802
        if _BUTTONS.get(event.button()) is not self._button:
            return
        self._button = None
        x, y = self._pointer(event)
        self.chart.redraw(False, x, y)
        self.unsetCursor()

    def resizeEvent(self, event: QResizeEvent) -> None:  # noqa: N802
        super().resizeEvent(event)
        self.chart.resize(self.width(), self.height())
        self.resized.emit()

    def paintEvent(self, event: QPaintEvent) -> None:  # noqa: N802
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.fillRect(self.rect(), pg.mkColor("w"))
        self._display.replay(painter)
        painter.end()


# ===========================================================================
# Main window
# ===========================================================================

class EditorWindow(QMainWindow):

    def __init__(self, text: str = "") -> None:
        super().__init__()
        self.setWindowTitle("Curve Editor")
        self.setGeometry(100, 100, 1100, 700)

        self._numbers: list[float] = []
        self._separators: list[str] = [""]
        self._adjust_pending = False

        self._build_ui()
        self._chart.initialize(self._chart_widget.renderer, EditorConfig(
            decimal_places=self._decimals_sb.value(),
            ratio=self._ratio_sb.value(),
            interpolation_method=self._method_combo.currentData(),
            on_value_changed=self._on_value_changed,
        ))
        self._text_edit.setPlainText(text)
        self.load_text()

    @property
    def _chart(self) -> CurveChart:
        return self._chart_widget.chart

    def _build_ui(self) -> None:
        central = QWidget()
        self.setCentralWidget(central)
        root = QVBoxLayout(central)

        text_row = QHBoxLayout()
        self._text_edit = QPlainTextEdit()
        self._text_edit.setFixedHeight(90)
        self._text_edit.setPlaceholderText("Paste text containing numbers, e.g. [1, 2.5, -3]")
        self._load_btn = QPushButton("Load")
        self._load_btn.clicked.connect(self.load_text)
        text_row.addWidget(self._text_edit)
        text_row.addWidget(self._load_btn)
        root.addLayout(text_row)

        body = QHBoxLayout()
        self._chart_widget = CurveEditorWidget()
        self._chart_widget.resized.connect(self._on_chart_resized)
        body.addWidget(self._chart_widget, 3)
        body.addLayout(self._build_controls(), 1)
        root.addLayout(body)

        self._status_lbl = QLabel("Ready")
        self._status_lbl.setStyleSheet("color: gray; font-style: italic;")
        root.addWidget(self._status_lbl)

    def _build_controls(self) -> QVBoxLayout:
        right = QVBoxLayout()

        # ── fitting ────────────────────────────────────────────────────
        fit_group = QGroupBox("Fitting")
        fit_layout = QVBoxLayout(fit_group)
        self._fitting_btn = QPushButton("Fitting mode")
        self._fitting_btn.setCheckable(True)
        self._fitting_btn.toggled.connect(self.toggle_fitting)
        self._apply_btn = QPushButton("Apply fitting")
        self._apply_btn.setEnabled(False)
        self._apply_btn.clicked.connect(self.apply_fitting)
        self._method_combo = QComboBox()
        for label, method in _METHOD_LABELS:
            self._method_combo.addItem(label, method)
        self._method_combo.currentIndexChanged.connect(self._on_method_changed)
        for widget in (self._fitting_btn, self._apply_btn, self._method_combo):
            fit_layout.addWidget(widget)
        right.addWidget(fit_group)

        # ── display ────────────────────────────────────────────────────
        view_group = QGroupBox("Display")
        view_layout = QGridLayout(view_group)
        self._ratio_sb = QDoubleSpinBox()
        self._ratio_sb.setRange(MIN_RATIO, 1e9)
        self._ratio_sb.setDecimals(6)
        self._ratio_sb.setValue(DEFAULT_RATIO)
        self._ratio_sb.setToolTip("Pixels per value unit")
        self._ratio_sb.editingFinished.connect(
            lambda: self._chart.set_ratio(self._ratio_sb.value())
        )
        self._adjust_btn = QPushButton("Adjust display")
        self._adjust_btn.clicked.connect(self.adjust_display)
        view_layout.addWidget(QLabel("Ratio:"), 0, 0)
        view_layout.addWidget(self._ratio_sb, 0, 1)
        view_layout.addWidget(self._adjust_btn, 1, 0, 1, 2)
        right.addWidget(view_group)

        # ── value limits ───────────────────────────────────────────────
        limit_group = QGroupBox("Values")
        limit_layout = QGridLayout(limit_group)
        self._decimals_sb = QSpinBox()
        self._decimals_sb.setRange(0, MAX_DECIMAL_PLACES)
        self._decimals_sb.valueChanged.connect(self._on_decimals_changed)
        self._min_cb = QCheckBox("Min:")
        self._min_sb = QDoubleSpinBox()
        self._max_cb = QCheckBox("Max:")
        self._max_sb = QDoubleSpinBox()
        for sb in (self._min_sb, self._max_sb):
            sb.setRange(-1e9, 1e9)
            sb.setDecimals(MAX_DECIMAL_PLACES)
            sb.setEnabled(False)
            sb.editingFinished.connect(self._on_limits_changed)
        self._min_cb.toggled.connect(self._min_sb.setEnabled)
        self._max_cb.toggled.connect(self._max_sb.setEnabled)
        self._min_cb.toggled.connect(self._on_limits_changed)
        self._max_cb.toggled.connect(self._on_limits_changed)
        self._round_btn = QPushButton("Round")
        self._round_btn.clicked.connect(self.round_values)

        rows: list[tuple[QWidget, QWidget]] = [
            (QLabel("Decimal places:"), self._decimals_sb),
            (self._min_cb, self._min_sb),
            (self._max_cb, self._max_sb),
        ]
        for row, (label, widget) in enumerate(rows):
            limit_layout.addWidget(label, row, 0)
            limit_layout.addWidget(widget, row, 1)
        limit_layout.addWidget(self._round_btn, len(rows), 0, 1, 2)
        right.addWidget(limit_group)

        # ── arithmetic ─────────────────────────────────────────────────
        math_group = QGroupBox("Arithmetic")
        math_layout = QGridLayout(math_group)
        self._plus_sb = QDoubleSpinBox()
        self._plus_sb.setRange(-1e9, 1e9)
        self._plus_sb.setDecimals(MAX_DECIMAL_PLACES)
        self._plus_btn = QPushButton("Add")
        self._plus_btn.clicked.connect(self.offset_values)
        self._multi_sb = QDoubleSpinBox()
        self._multi_sb.setRange(-1e9, 1e9)
        self._multi_sb.setDecimals(MAX_DECIMAL_PLACES)
        self._multi_sb.setValue(1.0)
        self._multi_btn = QPushButton("Multiply")
        self._multi_btn.clicked.connect(self.scale_values)
        math_layout.addWidget(self._plus_sb, 0, 0)
        math_layout.addWidget(self._plus_btn, 0, 1)
        math_layout.addWidget(self._multi_sb, 1, 0)
        math_layout.addWidget(self._multi_btn, 1, 1)
        right.addWidget(math_group)

        right.addStretch(1)
        return right

    # -- text <-> array -----------------------------------------------------

    def load_text(self) -> None:
        self._numbers, self._separators = codec.parse(self._text_edit.toPlainText())
        self._chart.load_array(self._numbers)
        self.adjust_display()
        # the plot has no height before the first layout pass
        self._adjust_pending = self._chart.viewport.height <= 0
        self._status_lbl.setText(f"{len(self._numbers)} value(s)")

    def _write_back(self) -> None:
        text = codec.join(self._numbers, self._separators)
        self._text_edit.setPlainText(text)

    def _on_chart_resized(self) -> None:
        if self._adjust_pending and self._chart.viewport.height > 0:
            self._adjust_pending = False
            self.adjust_display()

    def _on_value_changed(self, index: int, value: float) -> None:
        self._write_back()

    # -- actions ------------------------------------------------------------

    def adjust_display(self) -> None:
        self._chart.adjust_display(0.5)
        self._ratio_sb.setValue(self._chart.config.ratio)

    def toggle_fitting(self, checked: bool) -> None:
        self._apply_btn.setEnabled(checked)
        self._chart.set_fitting_mode(checked)

    def apply_fitting(self) -> None:
        try:
            self._chart.apply_fitting()
        except InterpolationError as exc:
            logger.warning("Fitting not applied: %s", exc)
            QMessageBox.critical(self, "Fitting Failed", str(exc))
            return
        self._fitting_btn.setChecked(False)
        self._write_back()

    def round_values(self) -> None:
        self._chart.round_values()
        self._write_back()

    def offset_values(self) -> None:
        self._chart.offset_values(self._plus_sb.value())
        self._write_back()

    def scale_values(self) -> None:
        self._chart.scale_values(self._multi_sb.value())
        self._write_back()

    def _on_method_changed(self, _index: int) -> None:
        self._chart.apply_params(interpolation_method=self._method_combo.currentData())

    def _on_decimals_changed(self, places: int) -> None:
        self._chart.apply_params(decimal_places=places)

    def _on_limits_changed(self) -> None:
        # keep the spin boxes ordered like the values the chart will use
        if self._min_cb.isChecked() and self._max_cb.isChecked():
            if self._min_sb.value() > self._max_sb.value():
                self._max_sb.setValue(self._min_sb.value())
        self._chart.apply_params(
            min_val=self._min_sb.value() if self._min_cb.isChecked() else None,
            max_val=self._max_sb.value() if self._max_cb.isChecked() else None,
        )


# ===========================================================================
# Entry point
# ===========================================================================

def main(argv: Optional[list[str]] = None) -> None:
    argv = sys.argv if argv is None else argv
    app = QApplication(argv)
    window = EditorWindow(" ".join(argv[1:]))
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    main()

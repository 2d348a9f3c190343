"""Waveform display widget: paints the primitives of a WaveformView."""

from __future__ import annotations

from PySide6.QtCore import QLineF, Qt, Signal
from PySide6.QtGui import QColor, QFont, QPainter, QPen
from PySide6.QtWidgets import QWidget

from wavecursorlib.render import Band, CursorLine, Segment
from wavecursorlib.view import WaveformView

from .log import dbg
from .theme import COLORS

_DEFAULT_CHANNEL_COLORS = [
    "#44aa44", "#44aaaa", "#aa44aa", "#aaaa44",
    "#4488cc", "#cc8844", "#88cc44", "#cc4488",
]


class WaveformWidget(QWidget):
    """Draws per-channel min/max columns and the playback cursor.

    All geometry comes from ``WaveformView.describe()``; this class only
    chooses pens and forwards resize, zoom and click events.
    """

    position_clicked = Signal(int)  # frame index
    zoom_changed = Signal(float)

    def __init__(self, parent=None, *, max_zoom: float = 256,
                 zoom_step: float = 2.0):
        super().__init__(parent)
        self._view = WaveformView(max_zoom=max_zoom)
        self._zoom_step = zoom_step
        self._channel_colors = [QColor(c) for c in _DEFAULT_CHANNEL_COLORS]
        self._cursor_color = QColor("#ff5050")
        self._show_center_line = True
        self._loading = False
        self._message = ""
        self.setMinimumHeight(80)
        self.setFocusPolicy(Qt.StrongFocus)

    @property
    def view(self) -> WaveformView:
        return self._view

    # ── Appearance ─────────────────────────────────────────────────────────

    def set_colors(self, channel_colors: list[str], cursor_color: str):
        if channel_colors:
            self._channel_colors = [QColor(c) for c in channel_colors]
        self._cursor_color = QColor(cursor_color)
        self.update()

    def set_show_center_line(self, show: bool):
        self._show_center_line = show
        self.update()

    def set_zoom_step(self, step: float):
        self._zoom_step = step

    # ── Data ───────────────────────────────────────────────────────────────

    def set_loading(self, loading: bool):
        """Show or hide a 'Loading…' placeholder over the current waveform."""
        self._loading = loading
        if loading:
            self._message = ""
        self.update()

    def set_message(self, message: str):
        """Centered text shown while no buffer is loaded (e.g. an error)."""
        self._message = message
        self.update()

    def set_cursor(self, frame: int):
        self._view.position_changed(frame)
        self.update()

    def set_zoom(self, factor: float) -> float:
        zoom = self._view.set_zoom(factor)
        self.zoom_changed.emit(zoom)
        self.update()
        return zoom

    # ── Qt events ──────────────────────────────────────────────────────────

    def resizeEvent(self, event):
        self._view.resize(self.width(), self.height())
        super().resizeEvent(event)

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.fillRect(self.rect(), QColor(COLORS["bg"]))
        self._view.resize(self.width(), self.height())

        prims = self._view.describe()
        lines: dict[int, list[QLineF]] = {}
        bands: list[Band] = []
        cursor: CursorLine | None = None
        for prim in prims:
            if isinstance(prim, Segment):
                lines.setdefault(prim.channel, []).append(
                    QLineF(prim.x1 + 0.5, prim.y1, prim.x2 + 0.5, prim.y2))
            elif isinstance(prim, Band):
                bands.append(prim)
            elif isinstance(prim, CursorLine):
                cursor = prim

        self._draw_bands(painter, bands)
        for ch, ch_lines in lines.items():
            color = self._channel_colors[ch % len(self._channel_colors)]
            painter.setPen(QPen(color, 1))
            painter.drawLines(ch_lines)

        if self._view.buffer is None or self._loading:
            self._draw_placeholder(painter)
        elif cursor is not None:
            painter.setPen(QPen(self._cursor_color, 1))
            painter.drawLine(QLineF(cursor.x + 0.5, cursor.top,
                                    cursor.x + 0.5, cursor.bottom))
        painter.end()

    def mousePressEvent(self, event):
        if event.button() == Qt.LeftButton and self._view.buffer is not None:
            frame = self._view.seek_pixel(int(event.position().x()))
            dbg(f"seek to frame {frame}")
            self.position_clicked.emit(frame)
            self.update()
        super().mousePressEvent(event)

    def wheelEvent(self, event):
        delta = event.angleDelta().y()
        if delta == 0:
            return
        if delta > 0:
            zoom = self._view.zoom_in(self._zoom_step)
        else:
            zoom = self._view.zoom_out(self._zoom_step)
        self.zoom_changed.emit(zoom)
        self.update()
        event.accept()

    def keyPressEvent(self, event):
        key = event.key()
        if key in (Qt.Key_Plus, Qt.Key_Equal):
            self.zoom_changed.emit(self._view.zoom_in(self._zoom_step))
        elif key == Qt.Key_Minus:
            self.zoom_changed.emit(self._view.zoom_out(self._zoom_step))
        elif key == Qt.Key_0:
            self.zoom_changed.emit(self._view.set_zoom(1))
        else:
            super().keyPressEvent(event)
            return
        self.update()

    # ── Internal helpers ───────────────────────────────────────────────────

    def _draw_bands(self, painter: QPainter, bands: list[Band]):
        if self._show_center_line:
            center = QColor(COLORS["center_line"])
            center.setAlpha(120)
            painter.setPen(QPen(center, 1, Qt.DotLine))
            for band in bands:
                painter.drawLine(QLineF(0, band.center, self.width(), band.center))
        painter.setPen(QPen(QColor(COLORS["separator"]), 1))
        for band in bands[:-1]:
            painter.drawLine(QLineF(0, band.bottom, self.width(), band.bottom))

    def _draw_placeholder(self, painter: QPainter):
        if self._loading:
            text = "Loading waveform…"
        else:
            text = self._message or "Select an audio file"
        painter.setPen(QColor(COLORS["dim"]))
        painter.setFont(QFont("Sans", 10))
        painter.drawText(self.rect(), Qt.AlignCenter, text)

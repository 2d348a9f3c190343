"""Main application window: directory tree, file list, waveform, transport."""

from __future__ import annotations

import functools
import os
import sys
from typing import Any

from PySide6.QtCore import QDir, QModelIndex, Qt, Slot
from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import (
    QApplication,
    QFileSystemModel,
    QLabel,
    QListView,
    QMainWindow,
    QSplitter,
    QToolBar,
    QTreeView,
)

from wavecursorlib.audio import (
    AUDIO_EXTENSIONS,
    RAW_EXTENSIONS,
    decode_file,
    decode_raw_pcm,
    format_duration,
    is_audio_file,
)
from wavecursorlib.config import flatten_structured_config
from wavecursorlib.loading import LoadResult

from .log import dbg, set_enabled, timed
from .playback import PlaybackController
from .settings import load_config, save_config
from .theme import COLORS, apply_dark_theme
from .widget import WaveformWidget
from .worker import WaveformLoadWorker, prune_workers


class WaveCursorWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("WaveCursor")

        self._config: dict[str, Any] = load_config()
        self._flat = flatten_structured_config(self._config)
        gui = self._config["gui"]
        self.resize(gui["window_width"], gui["window_height"])

        self._workers: list[WaveformLoadWorker] = []

        self._playback = PlaybackController(
            self, interval_ms=self._flat["cursor_interval_ms"])
        self._playback.cursor_updated.connect(self._on_cursor_updated)
        self._playback.duration_changed.connect(self._on_duration_changed)
        self._playback.playback_finished.connect(self._on_playback_finished)
        self._playback.error.connect(self._on_playback_error)

        self._build_ui()
        apply_dark_theme(self)

    # ── UI construction ────────────────────────────────────────────────────

    def _build_ui(self):
        gui = self._config["gui"]
        start_dir = gui.get("last_directory") or QDir.homePath()
        if not os.path.isdir(start_dir):
            start_dir = QDir.homePath()

        self._dir_model = QFileSystemModel(self)
        self._dir_model.setFilter(QDir.AllDirs | QDir.NoDotAndDotDot)
        self._dir_model.setRootPath(QDir.rootPath())
        self._dir_tree = QTreeView()
        self._dir_tree.setModel(self._dir_model)
        for col in range(1, self._dir_model.columnCount()):
            self._dir_tree.hideColumn(col)
        self._dir_tree.setCurrentIndex(self._dir_model.index(start_dir))
        self._dir_tree.scrollTo(self._dir_model.index(start_dir))
        self._dir_tree.selectionModel().currentChanged.connect(
            self._on_directory_changed)

        self._file_model = QFileSystemModel(self)
        self._file_model.setFilter(QDir.Files | QDir.NoDotAndDotDot)
        self._file_model.setNameFilters(
            [f"*{ext}" for ext in sorted(AUDIO_EXTENSIONS)])
        self._file_model.setNameFilterDisables(False)
        self._file_list = QListView()
        self._file_list.setModel(self._file_model)
        self._show_directory(start_dir)
        self._file_list.selectionModel().currentChanged.connect(
            self._on_file_changed)

        self._waveform = WaveformWidget(
            max_zoom=self._flat["max_zoom"], zoom_step=self._flat["zoom_step"])
        self._waveform.set_colors(gui["channel_colors"], gui["cursor_color"])
        self._waveform.set_show_center_line(self._flat["show_center_line"])
        self._waveform.view.set_zoom(self._flat["zoom_factor"])
        self._waveform.position_clicked.connect(self._on_position_clicked)
        self._waveform.zoom_changed.connect(self._on_zoom_changed)

        splitter = QSplitter(Qt.Horizontal)
        splitter.addWidget(self._dir_tree)
        splitter.addWidget(self._file_list)
        splitter.addWidget(self._waveform)
        splitter.setStretchFactor(2, 1)
        splitter.setSizes([260, 260, 880])
        self.setCentralWidget(splitter)

        toolbar = QToolBar("Transport")
        toolbar.setMovable(False)
        self.addToolBar(toolbar)
        self._play_action = QAction("Play", self)
        self._play_action.setShortcut(QKeySequence(Qt.Key_Space))
        self._play_action.triggered.connect(self._on_play_toggled)
        toolbar.addAction(self._play_action)
        stop_action = QAction("Stop", self)
        stop_action.triggered.connect(self._on_stop)
        toolbar.addAction(stop_action)
        toolbar.addSeparator()
        fit_action = QAction("Fit", self)
        fit_action.triggered.connect(lambda: self._waveform.set_zoom(1))
        toolbar.addAction(fit_action)

        self._status = QLabel("")
        self.statusBar().addPermanentWidget(self._status)

    def _show_directory(self, path: str):
        root = self._file_model.setRootPath(path)
        self._file_list.setRootIndex(root)

    # ── File selection / loading ───────────────────────────────────────────

    @Slot(QModelIndex, QModelIndex)
    def _on_directory_changed(self, current: QModelIndex, _previous: QModelIndex):
        path = self._dir_model.filePath(current)
        if os.path.isdir(path):
            self._show_directory(path)
            self._config["gui"]["last_directory"] = path

    @Slot(QModelIndex, QModelIndex)
    def _on_file_changed(self, current: QModelIndex, _previous: QModelIndex):
        path = self._file_model.filePath(current)
        if path and os.path.isfile(path) and is_audio_file(path):
            self._load_file(path)

    def _decoder_for(self, path: str):
        if os.path.splitext(path)[1].lower() in RAW_EXTENSIONS:
            return functools.partial(
                decode_raw_pcm, path,
                channel_count=self._flat["raw_channels"],
                sample_rate=self._flat["raw_sample_rate"],
                dtype=self._flat["raw_dtype"],
            )
        return functools.partial(decode_file, path)

    def _load_file(self, path: str):
        self._playback.stop()
        self._play_action.setText("Play")
        for worker in self._workers:
            worker.cancel()
        self._workers = prune_workers(self._workers)

        view = self._waveform.view
        ticket = view.begin_load()
        worker = WaveformLoadWorker(
            ticket, self._decoder_for(path), path=path,
            pixel_width=self._waveform.width(), zoom_factor=view.zoom,
            parent=self,
        )
        worker.finished.connect(self._on_load_finished)
        worker.error.connect(self._on_load_error)
        self._workers.append(worker)
        self._waveform.set_loading(True)
        self.statusBar().showMessage(f"Loading {os.path.basename(path)}…")
        dbg(f"load generation {ticket.generation}: {path}")
        worker.start()

    @Slot(object)
    def _on_load_finished(self, result: LoadResult):
        if not self._waveform.view.accept(result):
            dbg(f"stale load generation {result.generation} dropped")
            return
        self._waveform.set_loading(False)
        name = os.path.basename(result.path or "")
        self.statusBar().showMessage(f"Loaded {name}", 3000)
        self._status.setStyleSheet("")
        self._update_status()

    def _update_status(self):
        view = self._waveform.view
        buf = view.buffer
        if buf is None:
            self._status.setText("")
            return
        self._status.setText(
            f"{buf.channel_count} ch  |  {buf.sample_rate} Hz  |  "
            f"{format_duration(buf.frame_count, buf.sample_rate)}  |  "
            f"zoom {view.zoom:g}x")

    @Slot(int, str)
    def _on_load_error(self, generation: int, message: str):
        view = self._waveform.view
        if not view.loader.is_current(generation):
            return
        self._waveform.set_loading(False)
        self._waveform.set_message(f"Cannot load file: {message}")
        self.statusBar().showMessage(f"Error: {message}")
        self._status.setStyleSheet(f"color: {COLORS['error']};")

    # ── Transport ──────────────────────────────────────────────────────────

    @Slot()
    def _on_play_toggled(self):
        if self._playback.is_playing:
            self._on_stop()
            return
        view = self._waveform.view
        if view.buffer is None:
            return
        self._playback.play(view.buffer, view.cursor.position_frames)
        if self._playback.is_playing:
            self._play_action.setText("Pause")

    @Slot()
    def _on_stop(self):
        self._playback.stop()
        self._play_action.setText("Play")

    @Slot(int)
    def _on_cursor_updated(self, frame: int):
        self._waveform.set_cursor(frame)

    @Slot(int)
    def _on_duration_changed(self, frames: int):
        self._waveform.view.duration_changed(frames)

    @Slot()
    def _on_playback_finished(self):
        self._play_action.setText("Play")

    @Slot(str)
    def _on_playback_error(self, message: str):
        self._play_action.setText("Play")
        self.statusBar().showMessage(f"Playback error: {message}")

    @Slot(int)
    def _on_position_clicked(self, frame: int):
        if self._playback.is_playing:
            self._playback.play(self._waveform.view.buffer, frame)

    @Slot(float)
    def _on_zoom_changed(self, _zoom: float):
        self._update_status()

    # ── Lifetime ───────────────────────────────────────────────────────────

    def closeEvent(self, event):
        self._playback.stop()
        self._waveform.view.loader.cancel()
        for worker in self._workers:
            worker.cancel()
            worker.wait(2000)
        gui = self._config["gui"]
        gui["window_width"] = self.width()
        gui["window_height"] = self.height()
        try:
            save_config(self._config)
        except OSError as e:
            dbg(f"saving config failed: {e}")
        super().closeEvent(event)


def main():
    argv = list(sys.argv)
    if "--debug" in argv:
        argv.remove("--debug")
        set_enabled(True)

    with timed("main() total"):
        app = QApplication(argv)
        app.setStyle("Fusion")
        with timed("WaveCursorWindow created"):
            window = WaveCursorWindow()
        window.show()
    sys.exit(app.exec())

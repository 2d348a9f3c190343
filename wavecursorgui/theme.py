"""Color palette and dark-theme application."""

from __future__ import annotations

from PySide6.QtGui import QColor, QPalette
from PySide6.QtWidgets import QApplication


COLORS = {
    "information": "#4499ff",
    "error": "#ff4444",
    "dim": "#888888",
    "text": "#dddddd",
    "bg": "#1e1e1e",
    "bg_alt": "#252525",
    "accent": "#3a3a3a",
    "separator": "#555555",
    "center_line": "#a064dc",
}


STYLESHEET = """
    QMainWindow { background-color: #1e1e1e; }
    QToolBar { background-color: #2d2d2d; border-bottom: 1px solid #555; spacing: 6px; padding: 2px; }
    QToolBar QToolButton { color: #dddddd; padding: 4px 8px; }
    QToolBar QToolButton:hover { background-color: #3a3a3a; }
    QToolBar QToolButton:disabled { color: #666666; }
    QSplitter::handle { background-color: #555; width: 2px; }
    QTreeView, QListView { background-color: #252525; border: none; outline: none; }
    QTreeView::item:selected, QListView::item:selected { background-color: #2a6db5; }
    QHeaderView::section { background-color: #2d2d2d; color: #dddddd; border: none; border-bottom: 1px solid #555; padding: 4px 6px; }
    QStatusBar { background-color: #2d2d2d; color: #888888; }
"""


def apply_dark_theme(window) -> None:
    """Apply the dark palette and stylesheet to the application and window."""
    app = QApplication.instance()

    palette = QPalette()
    text = QColor(COLORS["text"])
    palette.setColor(QPalette.Window, QColor(COLORS["bg"]))
    palette.setColor(QPalette.WindowText, text)
    palette.setColor(QPalette.Base, QColor(COLORS["bg_alt"]))
    palette.setColor(QPalette.AlternateBase, QColor(COLORS["accent"]))
    palette.setColor(QPalette.Text, text)
    palette.setColor(QPalette.Button, QColor(COLORS["accent"]))
    palette.setColor(QPalette.ButtonText, text)
    palette.setColor(QPalette.Highlight, QColor("#2a6db5"))
    palette.setColor(QPalette.HighlightedText, QColor("#ffffff"))
    palette.setColor(QPalette.Disabled, QPalette.Text, QColor("#666666"))
    palette.setColor(QPalette.Disabled, QPalette.ButtonText, QColor("#666666"))

    app.setPalette(palette)
    window.setStyleSheet(STYLESHEET)

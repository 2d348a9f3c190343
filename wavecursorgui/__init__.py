"""WaveCursor GUI: PySide6 shell around the wavecursorlib engine."""


def main():
    from .mainwindow import main as _main
    return _main()

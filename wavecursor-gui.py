"""
WaveCursor GUI: PySide6 waveform viewer with playback cursor.

Usage:
    python wavecursor-gui.py

Requires: PySide6 and sounddevice, both installed by ``pip install wavecursor``.
Pass ``--debug`` (or set ``WC_DEBUG=1``) for a debug trace on stderr.
"""

from wavecursorgui import main

if __name__ == "__main__":
    main()

"""Waveform render model: envelope + cursor → ordered draw primitives.

The painting layer owns colors and pen styles; everything here is plain
geometry in widget coordinates (origin top-left, y grows downwards).
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .models import Envelope


@dataclass(frozen=True)
class Band:
    """Horizontal lane for one channel (channel 0 is topmost)."""
    channel: int
    top: float
    height: float

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def center(self) -> float:
        return self.top + self.height / 2.0


@dataclass(frozen=True)
class Segment:
    """Vertical line for one column: from the max value down to the min."""
    channel: int
    x1: int
    y1: float
    x2: int
    y2: float


@dataclass(frozen=True)
class CursorLine:
    """Playback cursor spanning the full widget height."""
    x: int
    top: float
    bottom: float


def channel_bands(widget_height: float, channel_count: int) -> list[Band]:
    """Split *widget_height* into equal lanes in channel order."""
    if channel_count <= 0:
        return []
    lane_h = max(float(widget_height), 0.0) / channel_count
    return [Band(channel=ch, top=ch * lane_h, height=lane_h)
            for ch in range(channel_count)]


def value_to_y(value, band: Band):
    """Map a sample value to y inside *band*.

    1.0 touches the top edge, -1.0 the bottom edge, 0.0 is the center.
    Works on scalars and numpy arrays.
    """
    return band.height * (1.0 - value) / 2.0 + band.top


def describe(envelope: Envelope | None, cursor_pixel: int,
             widget_height: float, channel_count: int) -> list:
    """Ordered draw primitives for one repaint.

    Per channel: its ``Band`` followed by one ``Segment`` per column with
    data.  The ``CursorLine`` comes last so it draws above the waveform.
    """
    prims: list = []
    bands = channel_bands(widget_height, channel_count)
    env_channels = envelope.channel_count if envelope is not None else 0
    for band in bands:
        prims.append(band)
        ch = band.channel
        if ch >= env_channels:
            continue
        valid = envelope.valid_mask(ch)
        if not valid.any():
            continue
        xs = np.nonzero(valid)[0]
        ys_top = value_to_y(envelope.maxs[ch, xs], band)
        ys_bot = value_to_y(envelope.mins[ch, xs], band)
        prims.extend(
            Segment(ch, int(x), float(yt), int(x), float(yb))
            for x, yt, yb in zip(xs, ys_top, ys_bot)
        )
    prims.append(CursorLine(x=int(cursor_pixel), top=0.0,
                            bottom=float(max(widget_height, 0))))
    return prims

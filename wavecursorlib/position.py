"""Mapping between playback position (frames) and pixel columns."""

from __future__ import annotations

import math
from dataclasses import dataclass


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def to_pixel(position_frames: int, duration_frames: int,
             pixel_width: int) -> int:
    """Pixel column for a playback position, clamped to ``[0, width - 1]``.

    Returns 0 when nothing is loaded (``duration_frames <= 0``) or the
    widget has no width.
    """
    if duration_frames <= 0 or pixel_width <= 0:
        return 0
    px = _round_half_up(position_frames * pixel_width / duration_frames)
    return max(0, min(px, pixel_width - 1))


def to_position(pixel_offset: int, duration_frames: int,
                pixel_width: int) -> float:
    """Proportional playback position for a pixel column; inverse of to_pixel.

    Not rounded to a whole frame; seeking callers round via
    :func:`round_frames`.  Clamped to ``[0, duration_frames]``.
    """
    if duration_frames <= 0 or pixel_width <= 0:
        return 0.0
    pos = pixel_offset * duration_frames / pixel_width
    return max(0.0, min(pos, float(duration_frames)))


def round_frames(position: float) -> int:
    """Nearest whole frame, halves rounded up."""
    return _round_half_up(position)


def frames_to_ms(frames: int, sample_rate: int) -> int:
    if sample_rate <= 0:
        return 0
    return _round_half_up(frames * 1000.0 / sample_rate)


def ms_to_frames(ms: float, sample_rate: int) -> int:
    if sample_rate <= 0:
        return 0
    return _round_half_up(ms * sample_rate / 1000.0)


class PlaybackPositionMapper:
    """Stateful mapper fed by duration and resize notifications."""

    def __init__(self, duration_frames: int = 0, pixel_width: int = 0):
        self.duration_frames = max(int(duration_frames), 0)
        self.pixel_width = max(int(pixel_width), 0)

    def duration_changed(self, duration_frames: int) -> None:
        self.duration_frames = max(int(duration_frames), 0)

    def resize(self, pixel_width: int) -> None:
        self.pixel_width = max(int(pixel_width), 0)

    def to_pixel(self, position_frames: int) -> int:
        return to_pixel(position_frames, self.duration_frames, self.pixel_width)

    def to_position(self, pixel_offset: int) -> float:
        return to_position(pixel_offset, self.duration_frames, self.pixel_width)

    def clamp(self, position_frames: int) -> int:
        return max(0, min(int(position_frames), self.duration_frames))


@dataclass
class PlaybackCursor:
    """Playback position.  The pixel is always derived, never stored."""
    position_frames: int = 0

    def pixel(self, mapper: PlaybackPositionMapper) -> int:
        return mapper.to_pixel(self.position_frames)

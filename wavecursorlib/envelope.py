"""Per-pixel min/max envelope reduction and its cache."""

from __future__ import annotations

import logging
import math

import numpy as np

from .models import Envelope, SampleBuffer

log = logging.getLogger(__name__)


def clamp_width(pixel_width) -> int:
    try:
        width = int(pixel_width)
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(width, 0)


def clamp_zoom(zoom_factor) -> float:
    """Clamp a zoom factor to ``>= 1``; non-numeric or non-finite → 1."""
    try:
        zoom = float(zoom_factor)
    except (TypeError, ValueError):
        return 1.0
    if not math.isfinite(zoom) or zoom < 1.0:
        return 1.0
    return zoom


def samples_per_pixel(frame_count: int, pixel_width: int,
                      zoom_factor: float) -> int:
    """Frames aggregated into one column.

    Zoom 1 fits the whole buffer into *pixel_width*; larger zoom values
    aggregate proportionally more frames per column.
    """
    if pixel_width <= 0:
        return 0
    return max(1, int(math.floor((frame_count // pixel_width) * zoom_factor)))


def _empty(buffer: SampleBuffer, width: int, zoom: float,
           spp: int = 0) -> Envelope:
    nch = buffer.channel_count
    mins = np.full((nch, width), np.nan, dtype=np.float64)
    maxs = np.full((nch, width), np.nan, dtype=np.float64)
    mins.setflags(write=False)
    maxs.setflags(write=False)
    return Envelope(mins=mins, maxs=maxs, pixel_width=width,
                    zoom_factor=zoom, buffer_token=buffer.token,
                    samples_per_pixel=spp)


def build_envelope(buffer: SampleBuffer, pixel_width: int,
                   zoom_factor: float = 1) -> Envelope:
    """Reduce *buffer* to a ``(channels, pixel_width)`` min/max envelope.

    Column ``x`` covers frames ``[x * spp, min((x + 1) * spp, frames))``.
    Columns whose range is empty are "no data" (NaN).  Out-of-range widths
    and zoom factors are clamped, never rejected.  Pure function.
    """
    width = clamp_width(pixel_width)
    zoom = clamp_zoom(zoom_factor)
    n = buffer.frame_count
    if width == 0 or n == 0:
        return _empty(buffer, width, zoom)

    spp = samples_per_pixel(n, width, zoom)
    # columns whose first frame exists
    n_valid = min(width, -(-n // spp))
    end = min(width * spp, n)
    starts = np.arange(n_valid, dtype=np.int64) * spp

    data = buffer.data[:end]
    col_mins = np.minimum.reduceat(data, starts, axis=0)
    col_maxs = np.maximum.reduceat(data, starts, axis=0)

    nch = buffer.channel_count
    mins = np.full((nch, width), np.nan, dtype=np.float64)
    maxs = np.full((nch, width), np.nan, dtype=np.float64)
    mins[:, :n_valid] = col_mins.T
    maxs[:, :n_valid] = col_maxs.T
    mins.setflags(write=False)
    maxs.setflags(write=False)
    return Envelope(mins=mins, maxs=maxs, pixel_width=width,
                    zoom_factor=zoom, buffer_token=buffer.token,
                    samples_per_pixel=spp)


class EnvelopeCache:
    """Holds the last envelope and rebuilds it only when its key changes.

    The key is ``(pixel_width, zoom_factor, buffer.token)``.  The cached
    envelope is shared read-only with the render path.
    """

    def __init__(self):
        self._envelope: Envelope | None = None
        self._builds = 0

    @property
    def envelope(self) -> Envelope | None:
        return self._envelope

    @property
    def builds(self) -> int:
        """Number of envelopes built since creation."""
        return self._builds

    def get(self, buffer: SampleBuffer, pixel_width: int,
            zoom_factor: float = 1) -> Envelope:
        width = clamp_width(pixel_width)
        zoom = clamp_zoom(zoom_factor)
        env = self._envelope
        if env is not None and env.same_key(width, zoom, buffer.token):
            return env
        env = build_envelope(buffer, width, zoom)
        log.debug("envelope rebuilt: width=%d zoom=%g spp=%d buffer=%d",
                  width, zoom, env.samples_per_pixel, buffer.token)
        self._builds += 1
        self._envelope = env
        return env

    def put(self, envelope: Envelope) -> None:
        """Adopt an envelope built elsewhere (e.g. on a load worker)."""
        self._envelope = envelope

    def invalidate(self) -> None:
        self._envelope = None


class EnvelopeBuilder:
    """Envelope builder with its own cache.

    ``build()`` is the pure reduction; ``get()`` goes through the cache.
    """

    def __init__(self):
        self.cache = EnvelopeCache()

    @staticmethod
    def build(buffer: SampleBuffer, pixel_width: int,
              zoom_factor: float = 1) -> Envelope:
        return build_envelope(buffer, pixel_width, zoom_factor)

    def get(self, buffer: SampleBuffer, pixel_width: int,
            zoom_factor: float = 1) -> Envelope:
        return self.cache.get(buffer, pixel_width, zoom_factor)

    def invalidate(self) -> None:
        self.cache.invalidate()

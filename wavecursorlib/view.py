"""Qt-free waveform view state.

``WaveformView`` owns the live :class:`SampleBuffer`, the envelope cache,
the position mapper and the playback cursor, and turns UI, decoder and
playback notifications into draw primitives.  It holds no widget
references; the GUI shell forwards events into it and paints what
:meth:`WaveformView.describe` returns.
"""

from __future__ import annotations

import logging

from . import events
from .envelope import EnvelopeCache, clamp_zoom
from .events import EventBus
from .loading import LoadCoordinator, LoadResult, LoadTicket
from .models import Envelope, SampleBuffer
from .position import (PlaybackCursor, PlaybackPositionMapper,
                       ms_to_frames, round_frames)
from .render import describe

log = logging.getLogger(__name__)


class WaveformView:

    def __init__(self, *, max_zoom: float = 256, event_bus: EventBus | None = None):
        self.bus = event_bus or EventBus()
        self.loader = LoadCoordinator()
        self.mapper = PlaybackPositionMapper()
        self.cursor = PlaybackCursor()
        self._cache = EnvelopeCache()
        self._buffer: SampleBuffer | None = None
        self._buffer_generation = 0
        self._path: str | None = None
        self._width = 0
        self._height = 0
        self._zoom = 1.0
        self._max_zoom = clamp_zoom(max_zoom)

    # ── Read-only state ────────────────────────────────────────────────────

    @property
    def buffer(self) -> SampleBuffer | None:
        return self._buffer

    @property
    def buffer_generation(self) -> int:
        return self._buffer_generation

    @property
    def path(self) -> str | None:
        return self._path

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def zoom(self) -> float:
        return self._zoom

    @property
    def channel_count(self) -> int:
        return self._buffer.channel_count if self._buffer is not None else 0

    @property
    def cursor_pixel(self) -> int:
        return self.cursor.pixel(self.mapper)

    # ── Decoder input ──────────────────────────────────────────────────────

    def begin_load(self) -> LoadTicket:
        """New load ticket; any load still in flight becomes stale."""
        return self.loader.begin()

    def accept(self, result: LoadResult) -> bool:
        """Swap in a finished load if it is still the newest one."""
        if not self.loader.deliver(result):
            self.bus.emit(events.LOAD_STALE, generation=result.generation,
                          path=result.path)
            return False
        self.set_buffer(result.buffer, generation=result.generation,
                        path=result.path)
        env = result.envelope
        if env is not None and env.same_key(self._width, self._zoom,
                                            result.buffer.token):
            self._cache.put(env)
        return True

    def set_buffer(self, buffer: SampleBuffer, *, generation: int | None = None,
                   path: str | None = None) -> None:
        """Replace the live buffer wholesale and reset the cursor."""
        self._buffer = buffer
        self._buffer_generation = (generation if generation is not None
                                   else self.loader.generation)
        self._path = path
        self._cache.invalidate()
        self.mapper.duration_changed(buffer.frame_count)
        self.cursor = PlaybackCursor()
        log.debug("buffer swapped: %r generation=%d", buffer,
                  self._buffer_generation)
        self.bus.emit(events.BUFFER_LOADED, buffer=buffer,
                      generation=self._buffer_generation, path=path)

    def clear(self) -> None:
        """Drop the buffer and cancel any load in flight."""
        self.loader.cancel()
        self._buffer = None
        self._path = None
        self._cache.invalidate()
        self.mapper.duration_changed(0)
        self.cursor = PlaybackCursor()
        self.bus.emit(events.BUFFER_CLEARED)

    # ── UI shell input ─────────────────────────────────────────────────────

    def resize(self, width: int, height: int) -> None:
        self._width = max(int(width), 0)
        self._height = max(int(height), 0)
        self.mapper.resize(self._width)

    def set_zoom(self, factor: float) -> float:
        """Set the zoom factor, clamped to ``[1, max_zoom]``."""
        self._zoom = min(clamp_zoom(factor), self._max_zoom)
        return self._zoom

    def zoom_in(self, step: float = 2.0) -> float:
        """Fewer frames per column."""
        return self.set_zoom(self._zoom / max(step, 1.0))

    def zoom_out(self, step: float = 2.0) -> float:
        """More frames per column."""
        return self.set_zoom(self._zoom * max(step, 1.0))

    def seek_pixel(self, x: int) -> int:
        """Click-to-seek: move the cursor to column *x*, return the frame."""
        pos = self.mapper.clamp(round_frames(self.mapper.to_position(x)))
        self.position_changed(pos)
        return pos

    # ── Playback engine input ──────────────────────────────────────────────

    def position_changed(self, frames: int) -> None:
        self.cursor.position_frames = self.mapper.clamp(frames)
        self.bus.emit(events.CURSOR_MOVED, frames=self.cursor.position_frames,
                      pixel=self.cursor_pixel)

    def duration_changed(self, frames: int) -> None:
        self.mapper.duration_changed(frames)
        self.cursor.position_frames = self.mapper.clamp(self.cursor.position_frames)

    def position_changed_ms(self, ms: float) -> None:
        if self._buffer is None:
            return
        self.position_changed(ms_to_frames(ms, self._buffer.sample_rate))

    def duration_changed_ms(self, ms: float) -> None:
        if self._buffer is None:
            return
        self.duration_changed(ms_to_frames(ms, self._buffer.sample_rate))

    # ── Painter output ─────────────────────────────────────────────────────

    def envelope(self) -> Envelope | None:
        """Envelope for the current buffer, width and zoom (cached)."""
        if self._buffer is None:
            return None
        builds = self._cache.builds
        env = self._cache.get(self._buffer, self._width, self._zoom)
        if self._cache.builds != builds:
            self.bus.emit(events.ENVELOPE_REBUILT, envelope=env)
        return env

    def describe(self) -> list:
        """Ordered draw primitives for the current state."""
        env = self.envelope()
        if env is not None and env.buffer_token != self._buffer.token:
            env = None
        return describe(env, self.cursor_pixel, self._height,
                        self.channel_count)

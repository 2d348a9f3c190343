"""Notifications published by :class:`~wavecursorlib.view.WaveformView`.

====================  ============================  ===============================
Event                 Payload (keyword arguments)   Emitted when
====================  ============================  ===============================
``buffer.loaded``     ``buffer, generation, path``  a load is accepted, or
                                                    ``set_buffer()`` is called
``buffer.cleared``    none                          ``clear()`` drops the buffer
``envelope.rebuilt``  ``envelope``                  width, zoom or buffer changed
                                                    and the cache rebuilt
``load.stale``        ``generation, path``          a superseded load finishes
``cursor.moved``      ``frames, pixel``             the playback position changes
====================  ============================  ===============================

Handlers run synchronously on the emitting thread, which for
``load.stale`` may be a load worker.
"""

from __future__ import annotations

import threading
from typing import Any, Callable

BUFFER_LOADED = "buffer.loaded"
BUFFER_CLEARED = "buffer.cleared"
ENVELOPE_REBUILT = "envelope.rebuilt"
LOAD_STALE = "load.stale"
CURSOR_MOVED = "cursor.moved"

PAYLOADS: dict[str, frozenset[str]] = {
    BUFFER_LOADED: frozenset({"buffer", "generation", "path"}),
    BUFFER_CLEARED: frozenset(),
    ENVELOPE_REBUILT: frozenset({"envelope"}),
    LOAD_STALE: frozenset({"generation", "path"}),
    CURSOR_MOVED: frozenset({"frames", "pixel"}),
}


def _check_event(event_type: str) -> None:
    if event_type not in PAYLOADS:
        known = ", ".join(sorted(PAYLOADS))
        raise ValueError(f"Unknown event {event_type!r} (known: {known})")


class EventBus:
    """Publish/subscribe bus for the events listed above.

    Unknown event names are rejected on subscribe and emit, and an emit
    must carry exactly the payload keys of its event.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[Callable[..., Any]]] = {}
        self._lock = threading.Lock()

    def subscribe(self, event_type: str,
                  handler: Callable[..., Any]) -> Callable[[], None]:
        """Register *handler*; returns a callable that unsubscribes it."""
        _check_event(event_type)
        with self._lock:
            self._handlers.setdefault(event_type, []).append(handler)
        return lambda: self.unsubscribe(event_type, handler)

    def unsubscribe(self, event_type: str, handler: Callable[..., Any]) -> None:
        with self._lock:
            handlers = self._handlers.get(event_type, [])
            if handler in handlers:
                handlers.remove(handler)

    def handler_count(self, event_type: str) -> int:
        with self._lock:
            return len(self._handlers.get(event_type, []))

    def emit(self, event_type: str, **data: Any) -> None:
        _check_event(event_type)
        expected = PAYLOADS[event_type]
        if set(data) != expected:
            raise ValueError(
                f"{event_type} expects payload {sorted(expected)}, "
                f"got {sorted(data)}")
        with self._lock:
            handlers = list(self._handlers.get(event_type, []))
        for handler in handlers:
            handler(**data)

import pytest

from wavecursorlib import events
from wavecursorlib.events import EventBus


def test_handlers_receive_payload_in_order():
    bus = EventBus()
    calls = []
    bus.subscribe(events.CURSOR_MOVED, lambda frames, pixel: calls.append(("a", frames, pixel)))
    bus.subscribe(events.CURSOR_MOVED, lambda **kw: calls.append(("b", kw["frames"], kw["pixel"])))
    bus.emit(events.CURSOR_MOVED, frames=10, pixel=2)
    assert calls == [("a", 10, 2), ("b", 10, 2)]


def test_subscribe_returns_unsubscriber():
    bus = EventBus()
    seen = []
    off = bus.subscribe(events.BUFFER_CLEARED, lambda: seen.append(1))
    assert bus.handler_count(events.BUFFER_CLEARED) == 1
    bus.emit(events.BUFFER_CLEARED)
    off()
    bus.emit(events.BUFFER_CLEARED)
    assert seen == [1]
    assert bus.handler_count(events.BUFFER_CLEARED) == 0


def test_unsubscribe_unknown_handler_is_harmless():
    bus = EventBus()
    bus.unsubscribe(events.LOAD_STALE, print)


def test_unknown_event_rejected():
    bus = EventBus()
    with pytest.raises(ValueError):
        bus.subscribe("buffer.lodaed", print)
    with pytest.raises(ValueError):
        bus.emit("nope")


def test_payload_must_match_event():
    bus = EventBus()
    with pytest.raises(ValueError):
        bus.emit(events.CURSOR_MOVED, frames=1)
    with pytest.raises(ValueError):
        bus.emit(events.BUFFER_CLEARED, extra=True)


def test_handler_errors_propagate():
    bus = EventBus()

    def boom(envelope):
        raise RuntimeError("handler failed")

    bus.subscribe(events.ENVELOPE_REBUILT, boom)
    with pytest.raises(RuntimeError):
        bus.emit(events.ENVELOPE_REBUILT, envelope=None)

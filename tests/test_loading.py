import threading

import pytest

from wavecursorlib.loading import (
    LoadCoordinator,
    LoadResult,
    StaleResult,
    run_load,
)
from wavecursorlib.models import InvalidFormat, SampleBuffer


def _decoder(values=(0.5, -0.5, 0.25, -0.25), channels=1):
    return lambda: SampleBuffer(list(values), channels, 8000)


def test_generations_increase_monotonically():
    coord = LoadCoordinator()
    assert coord.generation == 0
    gens = [coord.begin().generation for _ in range(5)]
    assert gens == sorted(gens)
    assert len(set(gens)) == 5
    assert coord.generation == gens[-1]


def test_begin_cancels_previous_ticket():
    coord = LoadCoordinator()
    first = coord.begin()
    second = coord.begin()
    assert first.is_cancelled
    assert not second.is_cancelled


def test_run_load_builds_envelope():
    coord = LoadCoordinator()
    ticket = coord.begin()
    result = run_load(ticket, _decoder(), pixel_width=2, zoom_factor=1,
                      path="a.wav")
    assert result.generation == ticket.generation
    assert result.path == "a.wav"
    assert result.envelope.pairs(0) == [(-0.5, 0.5), (-0.25, 0.25)]
    assert result.envelope.buffer_token == result.buffer.token


def test_run_load_without_width_skips_envelope():
    coord = LoadCoordinator()
    result = run_load(coord.begin(), _decoder())
    assert result.envelope is None


def test_cancelled_ticket_raises_stale():
    coord = LoadCoordinator()
    ticket = coord.begin()
    coord.begin()
    with pytest.raises(StaleResult):
        run_load(ticket, _decoder(), pixel_width=10)


def test_cancel_during_decode_raises_stale():
    coord = LoadCoordinator()
    ticket = coord.begin()

    def decode():
        coord.begin()  # user selects another file mid-decode
        return SampleBuffer([0.0], 1, 8000)

    with pytest.raises(StaleResult):
        run_load(ticket, decode, pixel_width=10)


def test_deliver_accepts_only_current_generation():
    coord = LoadCoordinator()
    old = coord.begin()
    old_result = LoadResult(old.generation, SampleBuffer([0.0], 1, 8000), None)
    new = coord.begin()
    new_result = LoadResult(new.generation, SampleBuffer([0.0], 1, 8000), None)
    assert not coord.deliver(old_result)
    assert coord.deliver(new_result)


def test_deliver_rejects_after_cancel():
    coord = LoadCoordinator()
    ticket = coord.begin()
    result = run_load(ticket, _decoder())
    coord.cancel()
    assert not coord.deliver(result)


def test_decoder_errors_propagate():
    coord = LoadCoordinator()

    def decode():
        raise InvalidFormat("bad")

    with pytest.raises(InvalidFormat):
        run_load(coord.begin(), decode)


class TestSubmit:
    def test_delivers_current_result(self):
        coord = LoadCoordinator()
        got = []
        try:
            future = coord.submit(_decoder(), pixel_width=2, path="x.wav",
                                  on_done=got.append)
            result = future.result(timeout=5)
        finally:
            coord.shutdown()
        assert result is got[0]
        assert result.path == "x.wav"

    def test_superseded_load_is_never_delivered(self):
        coord = LoadCoordinator()
        gate = threading.Event()
        started = threading.Event()
        delivered = []

        def slow_decode():
            started.set()
            gate.wait(5)
            return SampleBuffer([0.1, 0.2], 1, 8000)

        try:
            first = coord.submit(slow_decode, pixel_width=2,
                                 on_done=delivered.append)
            assert started.wait(5)
            second = coord.submit(_decoder(), pixel_width=2,
                                  on_done=delivered.append)
            gate.set()
            assert first.result(timeout=5) is None
            newest = second.result(timeout=5)
        finally:
            coord.shutdown()
        assert delivered == [newest]
        assert newest.generation == coord.generation

    def test_begin_waits_for_running_on_done(self):
        coord = LoadCoordinator()
        in_done = threading.Event()
        release = threading.Event()
        seen = []

        def on_done(result):
            in_done.set()
            release.wait(5)
            seen.append(coord.is_current(result.generation))

        try:
            future = coord.submit(_decoder(), on_done=on_done)
            assert in_done.wait(5)
            other = threading.Thread(target=coord.begin)
            other.start()
            other.join(0.2)
            assert other.is_alive()
            release.set()
            other.join(5)
            result = future.result(timeout=5)
        finally:
            coord.shutdown()
        assert seen == [True]
        assert coord.generation == result.generation + 1

    def test_errors_go_to_on_error(self):
        coord = LoadCoordinator()
        errors = []

        def decode():
            raise OSError("unreadable")

        try:
            future = coord.submit(decode, on_error=lambda g, e: errors.append((g, e)))
            assert future.result(timeout=5) is None
        finally:
            coord.shutdown()
        assert len(errors) == 1
        assert isinstance(errors[0][1], OSError)

    def test_errors_of_stale_loads_are_dropped(self):
        coord = LoadCoordinator()
        gate = threading.Event()
        started = threading.Event()
        errors = []

        def failing():
            started.set()
            gate.wait(5)
            raise OSError("late failure")

        try:
            first = coord.submit(failing, on_error=lambda g, e: errors.append(g))
            assert started.wait(5)
            coord.begin()
            gate.set()
            assert first.result(timeout=5) is None
        finally:
            coord.shutdown()
        assert errors == []

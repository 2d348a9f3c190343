"""Asynchronous load handoff: generation counter, cancellation, stale drops.

Every load gets a :class:`LoadTicket` carrying a monotonically increasing
generation number.  Starting a new load cancels the previous ticket.  A
finished load is only accepted by :meth:`LoadCoordinator.deliver` when its
generation is still the current one; anything else is stale and dropped.
"""

from __future__ import annotations

import itertools
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable

from .envelope import build_envelope
from .models import Envelope, SampleBuffer

log = logging.getLogger(__name__)


class StaleResult(Exception):
    """A load finished (or was about to) after a newer load superseded it."""
    pass


@dataclass
class LoadTicket:
    generation: int
    cancelled: threading.Event

    def cancel(self) -> None:
        self.cancelled.set()

    @property
    def is_cancelled(self) -> bool:
        return self.cancelled.is_set()

    def check(self) -> None:
        """Raise :class:`StaleResult` if this ticket has been cancelled."""
        if self.cancelled.is_set():
            raise StaleResult(f"load generation {self.generation} superseded")


@dataclass
class LoadResult:
    generation: int
    buffer: SampleBuffer
    envelope: Envelope | None
    path: str | None = None


def run_load(ticket: LoadTicket, decode: Callable[[], SampleBuffer], *,
             pixel_width: int = 0, zoom_factor: float = 1,
             path: str | None = None) -> LoadResult:
    """Decode and build the first envelope.  Meant to run on a worker.

    The ticket is checked between steps; a cancelled ticket raises
    :class:`StaleResult`.  Decoder exceptions propagate unchanged.
    """
    ticket.check()
    buffer = decode()
    ticket.check()
    envelope = None
    if pixel_width > 0:
        envelope = build_envelope(buffer, pixel_width, zoom_factor)
        ticket.check()
    return LoadResult(ticket.generation, buffer, envelope, path)


class LoadCoordinator:
    """Hands out tickets and accepts only the newest finished load."""

    def __init__(self):
        self._counter = itertools.count(1)
        self._lock = threading.RLock()
        self._current: LoadTicket | None = None
        self._executor: ThreadPoolExecutor | None = None

    @property
    def generation(self) -> int:
        """Generation of the most recent ticket (0 before the first load)."""
        cur = self._current
        return cur.generation if cur is not None else 0

    def begin(self) -> LoadTicket:
        """Start a new load, cancelling the one in flight (if any)."""
        with self._lock:
            if self._current is not None:
                self._current.cancel()
            ticket = LoadTicket(next(self._counter), threading.Event())
            self._current = ticket
        log.debug("load generation %d started", ticket.generation)
        return ticket

    def cancel(self) -> None:
        """Cancel the load in flight without starting a new one."""
        with self._lock:
            if self._current is not None:
                self._current.cancel()

    def is_current(self, generation: int) -> bool:
        cur = self._current
        return (cur is not None and cur.generation == generation
                and not cur.is_cancelled)

    def deliver(self, result: LoadResult) -> bool:
        """Return True if *result* may replace the visible buffer."""
        with self._lock:
            ok = self.is_current(result.generation)
        if not ok:
            log.debug("dropping stale load generation %d (current %d)",
                      result.generation, self.generation)
        return ok

    # -- thread-pool helper (headless use) ---------------------------------

    def submit(self, decode: Callable[[], SampleBuffer], *,
               pixel_width: int = 0, zoom_factor: float = 1,
               path: str | None = None,
               on_done: Callable[[LoadResult], None] | None = None,
               on_error: Callable[[int, Exception], None] | None = None,
               ) -> Future:
        """Run :func:`run_load` on a single background worker.

        *on_done* is called (on the worker thread, with the coordinator lock
        held) only for results that pass :meth:`deliver`.  *on_error*
        receives decoder failures of the current generation; stale results
        are never reported.
        """
        ticket = self.begin()
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="wavecursor-load")

        def job() -> LoadResult | None:
            try:
                result = run_load(ticket, decode, pixel_width=pixel_width,
                                  zoom_factor=zoom_factor, path=path)
            except StaleResult:
                log.debug("load generation %d cancelled", ticket.generation)
                return None
            except Exception as e:
                if not self.is_current(ticket.generation):
                    log.debug("dropping failure of stale load generation %d: %s",
                              ticket.generation, e)
                    return None
                log.debug("load generation %d failed: %s",
                          ticket.generation, e)
                if on_error is None:
                    raise
                on_error(ticket.generation, e)
                return None
            # begin() cannot run between the check and the callback
            with self._lock:
                if not self.deliver(result):
                    return None
                if on_done is not None:
                    on_done(result)
            return result

        return self._executor.submit(job)

    def shutdown(self, wait: bool = True) -> None:
        self.cancel()
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None

"""Background load worker: decode + first envelope off the UI thread."""

from __future__ import annotations

from typing import Callable

from PySide6.QtCore import QThread, Signal

from wavecursorlib.loading import LoadTicket, StaleResult, run_load
from wavecursorlib.models import SampleBuffer


class WaveformLoadWorker(QThread):
    """Runs :func:`run_load` for one ticket.

    ``finished`` carries the :class:`LoadResult`; the receiver still has to
    pass it through ``WaveformView.accept`` since a newer load may have
    started meanwhile.  Cancelled loads emit nothing.
    """

    finished = Signal(object)   # LoadResult
    error = Signal(int, str)    # (generation, message)

    def __init__(self, ticket: LoadTicket, decode: Callable[[], SampleBuffer],
                 *, path: str | None = None, pixel_width: int = 0,
                 zoom_factor: float = 1, parent=None):
        super().__init__(parent)
        self._ticket = ticket
        self._decode = decode
        self._path = path
        self._pixel_width = pixel_width
        self._zoom_factor = zoom_factor

    @property
    def generation(self) -> int:
        return self._ticket.generation

    def cancel(self):
        """Request early termination; the result will not be emitted."""
        self._ticket.cancel()

    def run(self):
        try:
            result = run_load(self._ticket, self._decode,
                              pixel_width=self._pixel_width,
                              zoom_factor=self._zoom_factor, path=self._path)
        except StaleResult:
            return
        except Exception as e:
            if not self._ticket.is_cancelled:
                self.error.emit(self._ticket.generation, str(e))
            return
        if self._ticket.is_cancelled:
            return
        self.finished.emit(result)


def prune_workers(workers: list) -> list:
    """Return the workers still running; schedule the rest for deletion."""
    running = []
    for worker in workers:
        if worker.isRunning():
            running.append(worker)
        else:
            worker.deleteLater()
    return running

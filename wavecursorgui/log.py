"""Debug trace for the WaveCursor GUI.

Off by default.  Turned on by ``WC_DEBUG=1`` (or ``true``) in the
environment, or by starting the GUI with ``--debug``.  Lines go to stderr
as ``[HH:MM:SS.mmm Source] message``; *Source* is the calling class, or
the module name when called from a plain function.
"""

from __future__ import annotations

import contextlib
import os
import sys
import time

_enabled: bool | None = None


def enabled() -> bool:
    global _enabled
    if _enabled is None:
        _enabled = os.environ.get("WC_DEBUG", "").strip().lower() in ("1", "true")
    return _enabled


def set_enabled(on: bool) -> None:
    global _enabled
    _enabled = bool(on)


def _source(depth: int) -> str:
    frame = sys._getframe(depth + 1)
    owner = frame.f_locals.get("self")
    if owner is not None:
        return type(owner).__name__
    return frame.f_globals.get("__name__", "?").rsplit(".", 1)[-1]


def _emit(source: str, msg: str) -> None:
    now = time.time()
    stamp = time.strftime("%H:%M:%S", time.localtime(now))
    print(f"[{stamp}.{int(now % 1 * 1000):03d} {source}] {msg}",
          file=sys.stderr, flush=True)


def dbg(msg: str) -> None:
    if enabled():
        _emit(_source(1), msg)


@contextlib.contextmanager
def timed(label: str, source: str = "startup"):
    """Trace how long the ``with`` block took, in milliseconds."""
    if not enabled():
        yield
        return
    t0 = time.perf_counter()
    try:
        yield
    finally:
        _emit(source, f"{label}: {(time.perf_counter() - t0) * 1000:.1f} ms")

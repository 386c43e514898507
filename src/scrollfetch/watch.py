"""watch(): run a fetch in a managed daemon thread.

The fetch callback is never awaited by the controller, so page loads run
off the UI thread. Results travel back through ``Observable.set()``,
which is marshaled onto the UI thread once ``set_scheduler`` is in place.
"""

from __future__ import annotations

import logging
from threading import Event, Thread
from typing import Callable

logger = logging.getLogger("scrollfetch.watch")


class WatchHandle:
    """Handle for one background run.

    ``dispose()`` only raises a flag; the running function checks
    ``disposed`` and decides whether to publish its result.
    """

    __slots__ = ("_disposed", "_done")

    def __init__(self) -> None:
        self._disposed = False
        self._done = Event()

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def done(self) -> bool:
        return self._done.is_set()

    def dispose(self) -> None:
        self._disposed = True

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the run to finish. Returns False on timeout."""
        return self._done.wait(timeout)


def watch(fn: Callable[[WatchHandle], object]) -> WatchHandle:
    """Start ``fn(handle)`` in a daemon thread and return the handle.

    Usage:
        def load(handle):
            page = client.get(url).json()
            if not handle.disposed:
                data.set(page)

        handle = watch(load)
    """
    handle = WatchHandle()

    def _run() -> None:
        try:
            fn(handle)
        except Exception:
            logger.exception("Background run %r failed", fn)
        finally:
            handle._done.set()

    Thread(target=_run, daemon=True).start()
    return handle

"""Remembers which sentinel index last caused a fetch."""

from __future__ import annotations

from scrollfetch.store import KeyValueStore

DEFAULT_KEY = "entryId"


class TriggerTracker:
    """Last-triggered index, kept in an injected session store.

    Only the most recent index is held. A missing or unreadable value
    means no trigger has happened yet; it is never read as index 0.
    """

    def __init__(self, store: KeyValueStore, key: str = DEFAULT_KEY) -> None:
        self._store = store
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def get(self) -> int | None:
        raw = self._store.get(self._key)
        if raw is None:
            return None
        try:
            return int(raw)
        except ValueError:
            return None

    def set(self, index: int) -> None:
        self._store.set(self._key, str(int(index)))

    def reset(self) -> None:
        """Drop the remembered index. Called by the application, never the controller."""
        self._store.delete(self._key)

    def __repr__(self) -> str:
        return f"TriggerTracker({self._key!r}, last={self.get()!r})"

"""Session key/value stores used to remember the last trigger.

``SessionStore`` is process scoped and shared by every controller, like
browser session storage. ``MemoryStore`` keeps its values on the instance,
for tests and for lists that must not share trigger history.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from scrollfetch import _session


@runtime_checkable
class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class SessionStore:
    """String store scoped to the current process session.

    ``namespace`` prefixes every key so independent lists can keep separate
    trigger history in the same session.
    """

    def __init__(self, namespace: str = "") -> None:
        self._prefix = f"{namespace}:" if namespace else ""

    def get(self, key: str) -> str | None:
        return _session.values.get(self._prefix + key)

    def set(self, key: str, value: str) -> None:
        _session.values[self._prefix + key] = str(value)

    def delete(self, key: str) -> None:
        _session.values.pop(self._prefix + key, None)

    def __repr__(self) -> str:
        return f"SessionStore(namespace={self._prefix.rstrip(':')!r})"


class MemoryStore:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial) if initial else {}

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = str(value)

    def delete(self, key: str) -> None:
        self._values.pop(key, None)

    def __repr__(self) -> str:
        return f"MemoryStore({self._values!r})"

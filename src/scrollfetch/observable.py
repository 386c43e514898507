"""Observable values for controller settings and rendered item lists.

Reading an Observable inside a Computed or reaction registers it as a
dependency; writing it schedules those dependents. The controller keeps
``fetch_more``, the item count and the trigger position in Observables so
that changing any of them re-resolves the sentinel indices.

Background threads (the page fetcher) must not write Observables while
the UI thread is reading them. Call ``set_scheduler()`` once from the UI
thread and ``Observable.set()`` from any other thread is handed to that
scheduler instead of running in place.
"""

from __future__ import annotations

import threading
from typing import Callable, Generic, Iterable, Iterator, TypeVar

from scrollfetch._tracking import current_derivation, schedule

T = TypeVar("T")

_scheduler: Callable[[Callable[[], None]], object] | None = None
_scheduler_thread: threading.Thread | None = None


def set_scheduler(scheduler) -> None:
    """Route cross-thread Observable writes through ``scheduler``.

    Call from the UI thread, e.g. ``set_scheduler(app.call_from_thread)``.
    Passing ``None`` restores direct writes.
    """
    global _scheduler, _scheduler_thread
    _scheduler = scheduler
    _scheduler_thread = threading.current_thread() if scheduler is not None else None


class _Tracked:
    """Observer bookkeeping shared by Observable and ObservableList."""

    __slots__ = ("_observers",)

    def __init__(self) -> None:
        self._observers: dict = {}

    def _track(self) -> None:
        derivation = current_derivation.get()
        if derivation is not None:
            self._observers[derivation] = None
            derivation._dependencies.add(self)

    def _notify(self) -> None:
        for observer in list(self._observers):
            schedule(observer)

    def _remove_observer(self, observer) -> None:
        self._observers.pop(observer, None)


class Observable(_Tracked, Generic[T]):
    """A single value that notifies its readers when it changes."""

    __slots__ = ("_value",)

    def __init__(self, value: T) -> None:
        super().__init__()
        self._value = value

    def get(self) -> T:
        self._track()
        return self._value

    def peek(self) -> T:
        """Read without registering a dependency."""
        return self._value

    def set(self, value: T) -> None:
        if _scheduler is not None and threading.current_thread() is not _scheduler_thread:
            _scheduler(lambda v=value: self._set_direct(v))
        else:
            self._set_direct(value)

    def _set_direct(self, value: T) -> None:
        old = self._value
        if old is not value and old != value:
            self._value = value
            self._notify()

    def __repr__(self) -> str:
        return f"Observable({self._value!r})"


class ObservableList(_Tracked, Generic[T]):
    """The render layer's list of mounted elements.

    Reads (len, indexing, iteration) track; mutations notify. Mutate it
    from the UI thread only.
    """

    __slots__ = ("_items",)

    def __init__(self, items: Iterable[T] | None = None) -> None:
        super().__init__()
        self._items: list[T] = list(items) if items else []

    def __getitem__(self, index: int) -> T:
        self._track()
        return self._items[index]

    def __len__(self) -> int:
        self._track()
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        self._track()
        return iter(list(self._items))

    def __bool__(self) -> bool:
        self._track()
        return bool(self._items)

    def append(self, item: T) -> None:
        self._items.append(item)
        self._notify()

    def extend(self, items: Iterable[T]) -> None:
        added = list(items)
        if added:
            self._items.extend(added)
            self._notify()

    def pop(self, index: int = -1) -> T:
        result = self._items.pop(index)
        self._notify()
        return result

    def replace(self, items: Iterable[T]) -> None:
        """Swap the whole list, e.g. after a filter or a fresh first page."""
        self._items = list(items)
        self._notify()

    def clear(self) -> None:
        if self._items:
            self._items.clear()
            self._notify()

    def __repr__(self) -> str:
        return f"ObservableList({self._items!r})"

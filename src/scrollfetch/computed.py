"""Computed values: cached derivations of Observables.

A Computed re-evaluates lazily: a dependency change only marks it dirty
and forwards the invalidation to its own observers. The next ``get()``
recomputes. The controller resolves its sentinel indices this way, so
the resolver runs once per item-count or trigger change no matter how
many events read the indices in between.
"""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

from scrollfetch._tracking import current_derivation, schedule

T = TypeVar("T")

_UNSET = object()


class Computed(Generic[T]):
    """A derived value that tracks what it reads and caches the result."""

    __slots__ = ("_fn", "_value", "_dirty", "_dependencies", "_observers")

    def __init__(self, fn: Callable[[], T]) -> None:
        self._fn = fn
        self._value: object = _UNSET
        self._dirty = True
        self._dependencies: set = set()
        self._observers: dict = {}

    def get(self) -> T:
        derivation = current_derivation.get()
        if derivation is not None:
            self._observers[derivation] = None
            derivation._dependencies.add(self)

        if self._dirty:
            self._recompute()
        return self._value  # type: ignore[return-value]

    def _recompute(self) -> None:
        self._release_dependencies()
        token = current_derivation.set(self)
        try:
            self._value = self._fn()
        finally:
            current_derivation.reset(token)
        self._dirty = False

    def _run(self) -> None:
        if not self._dirty:
            self._dirty = True
            for observer in list(self._observers):
                schedule(observer)

    def _release_dependencies(self) -> None:
        for dep in self._dependencies:
            dep._remove_observer(self)
        self._dependencies.clear()

    def _remove_observer(self, observer) -> None:
        self._observers.pop(observer, None)

    def dispose(self) -> None:
        """Detach from every dependency and drop the cached value."""
        self._release_dependencies()
        self._observers.clear()
        self._dirty = True
        self._value = _UNSET

    def __repr__(self) -> str:
        state = "dirty" if self._dirty else f"cached={self._value!r}"
        return f"Computed({getattr(self._fn, '__name__', 'fn')}, {state})"


def computed(fn: Callable[[], T]) -> Computed[T]:
    """Decorator form of ``Computed``.

    Usage:
        count = Observable(10)

        @computed
        def midpoint():
            return count.get() // 2

        midpoint.get()  # 5
    """
    return Computed(fn)

"""Reactions: side effects driven by Observable changes.

- ``autorun(fn)`` runs ``fn`` now and again whenever anything it read
  changes.
- ``reaction(data_fn, effect_fn)`` re-runs ``data_fn`` on change and calls
  ``effect_fn`` only when its result differs from the previous one.

The controller uses ``reaction`` to call ``reconfigure()`` whenever the
resolved indices or the elements sitting at them change.
"""

from __future__ import annotations

from typing import Callable, TypeVar

from scrollfetch._tracking import current_derivation

T = TypeVar("T")


class Reaction:
    """Eager derivation. Re-tracks its dependencies on every run."""

    __slots__ = ("_fn", "_dependencies", "_disposed")

    def __init__(self, fn: Callable[[], None]) -> None:
        self._fn = fn
        self._dependencies: set = set()
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def _track(self, fn: Callable[[], T]) -> T:
        for dep in self._dependencies:
            dep._remove_observer(self)
        self._dependencies.clear()

        token = current_derivation.set(self)
        try:
            return fn()
        finally:
            current_derivation.reset(token)

    def _run(self) -> None:
        if self._disposed:
            return
        self._track(self._fn)

    def dispose(self) -> None:
        """Stop reacting. Safe to call more than once."""
        self._disposed = True
        for dep in self._dependencies:
            dep._remove_observer(self)
        self._dependencies.clear()

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else "active"
        return f"{type(self).__name__}({getattr(self._fn, '__name__', 'fn')}, {state})"


class _DataReaction(Reaction):
    """``reaction(data_fn, effect_fn)``: effect only on a changed result."""

    __slots__ = ("_effect_fn", "_last_value", "_initialized")

    def __init__(self, data_fn: Callable[[], T], effect_fn: Callable[[T], None]) -> None:
        super().__init__(data_fn)
        self._effect_fn = effect_fn
        self._last_value = None
        self._initialized = False

    def _run(self) -> None:
        if self._disposed:
            return
        new_value = self._track(self._fn)
        if not self._initialized or new_value != self._last_value:
            self._last_value = new_value
            self._initialized = True
            self._effect_fn(new_value)


def autorun(fn: Callable[[], None]) -> Reaction:
    """Run ``fn`` immediately and again whenever what it read changes.

    Returns the Reaction; call ``.dispose()`` to stop it.
    """
    r = Reaction(fn)
    r._run()
    return r


def reaction(
    data_fn: Callable[[], T],
    effect_fn: Callable[[T], None],
    *,
    fire_immediately: bool = False,
) -> Reaction:
    """Call ``effect_fn(value)`` whenever ``data_fn()`` returns something new.

    Without ``fire_immediately`` the first evaluation only establishes the
    dependencies and the baseline value.

    Usage:
        count = Observable(10)
        seen = []
        r = reaction(lambda: count.get() // 2, seen.append)
        count.set(11)   # 5 -> 5, no effect
        count.set(12)   # seen == [6]
        r.dispose()
    """
    r = _DataReaction(data_fn, effect_fn)
    if fire_immediately:
        r._run()
    else:
        r._last_value = r._track(data_fn)
        r._initialized = True
    return r

"""Watch handles that tie a sentinel element to the visibility facility.

A handle observes at most one element. ``bind`` always disconnects the
previous observation before creating the new one, and ``unbind`` can be
called any number of times, including from inside the visibility
callback that the handle itself delivered.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Protocol, Sequence, Union

logger = logging.getLogger("scrollfetch.binding")


@dataclass(frozen=True)
class VisibilityRecord:
    """One entry of a visibility notification."""

    target: Any
    is_intersecting: bool
    intersection_ratio: float = 0.0


VisibilityCallback = Callable[[Sequence[VisibilityRecord]], object]


@dataclass(frozen=True)
class ObservationOptions:
    """Handed to the visibility facility untouched.

    ``threshold``: visible fraction(s) of the element at which the facility
    reports a change. ``root_margin``: CSS-style margin ("200px 0px")
    growing the observed region so items count as visible a little early.
    """

    threshold: Union[float, tuple[float, ...], None] = None
    root_margin: str | None = None


class WatchHandle(Protocol):
    def disconnect(self) -> None: ...


class VisibilityFacility(Protocol):
    def observe(
        self, element: Any, callback: VisibilityCallback, options: ObservationOptions
    ) -> WatchHandle: ...


class ObserverBinding:
    """One sentinel watch: at most one element, one facility handle."""

    def __init__(
        self,
        name: str,
        facility: VisibilityFacility,
        callback: VisibilityCallback,
        options: ObservationOptions,
    ) -> None:
        self._name = name
        self._facility = facility
        self._callback = callback
        self._options = options
        self._element: Any = None
        self._handle: WatchHandle | None = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def element(self) -> Any:
        return self._element

    @property
    def bound(self) -> bool:
        return self._handle is not None

    def bind(self, element: Any) -> None:
        """Observe ``element``, dropping whatever was observed before."""
        self.unbind()
        if element is None:
            return
        handle = self._facility.observe(element, self._callback, self._options)
        self._element = element
        self._handle = handle
        logger.debug("%s watch bound to %r", self._name, element)

    def unbind(self) -> None:
        """Disconnect the current observation. No-op when nothing is bound."""
        handle = self._handle
        if handle is None:
            return
        # Clear first so a callback fired during disconnect sees an unbound handle.
        self._handle = None
        self._element = None
        handle.disconnect()
        logger.debug("%s watch unbound", self._name)

    def __repr__(self) -> str:
        state = f"bound={self._element!r}" if self.bound else "unbound"
        return f"ObserverBinding({self._name}, {state})"


class BindingPair:
    """The primary and fallback handles. They share only the callback."""

    def __init__(
        self,
        facility: VisibilityFacility,
        callback: VisibilityCallback,
        options: ObservationOptions,
    ) -> None:
        self.primary = ObserverBinding("primary", facility, callback, options)
        self.fallback = ObserverBinding("fallback", facility, callback, options)

    @property
    def armed(self) -> int:
        """How many handles currently observe an element."""
        return int(self.primary.bound) + int(self.fallback.bound)

    def unbind_all(self) -> None:
        self.primary.unbind()
        self.fallback.unbind()

    def __iter__(self):
        return iter((self.primary, self.fallback))

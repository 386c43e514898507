"""FetchOnScroll: the pagination controller a list view owns.

Wires the pieces together:

- settings (``fetch_more``, item count, trigger) live in Observables
- the sentinel indices are a Computed over those settings
- a reaction watches the indices and the elements sitting at them and
  calls ``reconfigure()``, the one place watches get torn down and armed
- both watches deliver into a single TriggerDispatcher

Two ways to hand over the rendered elements:

``items=ObservableList(...)``
    The controller looks the sentinels up itself and re-arms whenever the
    list changes. This is the normal mode.

``number_of_items=N``
    The render layer attaches the sentinels by calling ``primary_ref`` and
    ``fallback_ref`` for the elements at ``primary_index`` and
    ``fallback_index``. A change of indices unbinds both watches; the
    render layer is expected to call the refs again.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Sequence

from scrollfetch.binding import BindingPair, ObservationOptions, VisibilityFacility, VisibilityRecord
from scrollfetch.computed import Computed
from scrollfetch.dispatcher import TriggerDispatcher, default_position_of
from scrollfetch.observable import Observable, ObservableList
from scrollfetch.reaction import Reaction, reaction
from scrollfetch.resolver import (
    Percentage,
    SentinelIndices,
    Trigger,
    TriggerPoint,
    parse_trigger,
    resolve,
)
from scrollfetch.store import KeyValueStore, SessionStore
from scrollfetch.tracker import DEFAULT_KEY, TriggerTracker

logger = logging.getLogger("scrollfetch.controller")


def _coerce_trigger(value: Any) -> Trigger:
    if isinstance(value, Percentage):
        return value
    if isinstance(value, (TriggerPoint, str)) or value is None:
        return parse_trigger(trigger_point=value)
    if isinstance(value, float) and 0 < value < 1:
        raise ValueError(
            f"ambiguous trigger {value!r}: pass Percentage({value!r}) for a fraction of the list"
        )
    return parse_trigger(trigger_index=value)


def _threshold(value: float | Sequence[float] | None) -> float | tuple[float, ...] | None:
    if value is None:
        return None
    values = (value,) if isinstance(value, (int, float)) else tuple(value)
    for v in values:
        if not 0 <= v <= 1:
            raise ValueError(f"threshold values must be in [0, 1], got {v!r}")
    return values[0] if isinstance(value, (int, float)) else values


class FetchOnScroll:
    def __init__(
        self,
        fetch_next: Callable[[], object],
        facility: VisibilityFacility,
        *,
        items: ObservableList | None = None,
        number_of_items: int | None = None,
        trigger_point: TriggerPoint | str | None = None,
        trigger_index: int | float | None = None,
        percentage: float | None = None,
        fetch_more: bool = True,
        threshold: float | Sequence[float] | None = None,
        root_margin: str | None = None,
        store: KeyValueStore | None = None,
        storage_key: str = DEFAULT_KEY,
        position_of: Callable[[Any], int | None] = default_position_of,
    ) -> None:
        if items is None and number_of_items is None:
            raise ValueError("either items or number_of_items is required")
        if items is not None and number_of_items is not None:
            raise ValueError("items and number_of_items are mutually exclusive")
        if number_of_items is not None and number_of_items < 0:
            raise ValueError(f"number_of_items must be >= 0, got {number_of_items!r}")

        self._items = items
        self._count = Observable(number_of_items or 0)
        self._trigger: Observable[Trigger] = Observable(
            parse_trigger(trigger_point, trigger_index, percentage)
        )
        self._fetch_more = Observable(bool(fetch_more))
        self._disposed = False

        self._indices: Computed[SentinelIndices | None] = Computed(self._resolve)
        self._tracker = TriggerTracker(store if store is not None else SessionStore(), storage_key)
        self._dispatcher = TriggerDispatcher(
            fetch_next,
            self._tracker,
            self._indices.get,
            self._enabled,
            position_of,
        )
        self._bindings = BindingPair(
            facility,
            self._dispatcher.on_visibility,
            ObservationOptions(_threshold(threshold), root_margin),
        )

        if items is not None:
            self._reaction: Reaction = reaction(
                self._sentinels, self._arm, fire_immediately=True
            )
        else:
            self._reaction = reaction(self._indices.get, self._on_indices_changed)

    # --- Settings ---

    @property
    def fetch_more(self) -> bool:
        return self._fetch_more.get()

    @fetch_more.setter
    def fetch_more(self, value: bool) -> None:
        self._fetch_more.set(bool(value))

    @property
    def number_of_items(self) -> int:
        if self._items is not None:
            return len(self._items)
        return self._count.get()

    @number_of_items.setter
    def number_of_items(self, value: int) -> None:
        if self._items is not None:
            raise ValueError("the item count follows the items list")
        if value < 0:
            raise ValueError(f"number_of_items must be >= 0, got {value!r}")
        self._count.set(value)

    @property
    def trigger(self) -> Trigger:
        return self._trigger.get()

    @trigger.setter
    def trigger(self, value: TriggerPoint | str | Percentage | int | float | None) -> None:
        self._trigger.set(_coerce_trigger(value))

    # --- Derived state ---

    @property
    def indices(self) -> SentinelIndices | None:
        return self._indices.get()

    @property
    def primary_index(self) -> int | None:
        indices = self._indices.get()
        return indices.primary if indices is not None else None

    @property
    def fallback_index(self) -> int | None:
        indices = self._indices.get()
        return indices.fallback if indices is not None else None

    @property
    def bindings(self) -> BindingPair:
        return self._bindings

    @property
    def tracker(self) -> TriggerTracker:
        return self._tracker

    @property
    def disposed(self) -> bool:
        return self._disposed

    # --- Events ---

    def on_visibility(self, records: Sequence[VisibilityRecord]) -> int:
        return self._dispatcher.on_visibility(records)

    def primary_ref(self, element: Any) -> None:
        """Attach the primary sentinel. ``None`` detaches it."""
        indices = self._indices.get()
        # When both sentinels coincide a single watch serves both.
        handle = self._bindings.fallback if indices is not None and indices.shared else self._bindings.primary
        self._attach(handle, element)

    def fallback_ref(self, element: Any) -> None:
        """Attach the fallback sentinel. ``None`` detaches it."""
        self._attach(self._bindings.fallback, element)

    def reconfigure(self) -> None:
        """Tear down both watches and re-arm them where the controller can.

        With ``items`` the watches are armed on the current sentinels. In ref
        mode the controller holds no elements, so this only unbinds and the
        render layer has to call ``primary_ref`` / ``fallback_ref`` again.
        """
        if self._items is None:
            self._bindings.unbind_all()
            return
        self._arm(self._sentinels())

    def dispose(self) -> None:
        """Stop re-arming and release both watches. Safe to repeat."""
        if self._disposed:
            return
        self._disposed = True
        self._reaction.dispose()
        self._bindings.unbind_all()
        self._indices.dispose()
        logger.debug("Controller disposed")

    def __enter__(self) -> FetchOnScroll:
        return self

    def __exit__(self, *exc_info) -> None:
        self.dispose()

    # --- Internals ---

    def _enabled(self) -> bool:
        return not self._disposed and self._fetch_more.peek()

    def _resolve(self) -> SentinelIndices | None:
        count = len(self._items) if self._items is not None else self._count.get()
        return resolve(count, self._trigger.get())

    def _sentinels(self) -> tuple[SentinelIndices, Any, Any] | None:
        indices = self._indices.get()
        if indices is None:
            return None
        return indices, self._items[indices.primary], self._items[indices.fallback]

    def _arm(self, sentinels: tuple[SentinelIndices, Any, Any] | None) -> None:
        if self._disposed:
            return
        self._bindings.unbind_all()
        if sentinels is None:
            logger.debug("No items, no sentinel armed")
            return
        indices, primary, fallback = sentinels
        self._bindings.fallback.bind(fallback)
        if not indices.shared:
            self._bindings.primary.bind(primary)
        logger.debug("Armed sentinels primary=%d fallback=%d", indices.primary, indices.fallback)

    def _on_indices_changed(self, indices: SentinelIndices | None) -> None:
        if self._disposed:
            return
        logger.debug("Sentinel indices changed to %s, dropping stale watches", indices)
        self._bindings.unbind_all()

    def _attach(self, handle, element: Any) -> None:
        if self._disposed:
            return
        if element is None or self._indices.get() is None:
            handle.unbind()
            return
        handle.bind(element)

    def __repr__(self) -> str:
        return (
            f"FetchOnScroll(indices={self._indices.get()!r}, "
            f"fetch_more={self._fetch_more.peek()!r}, armed={self._bindings.armed})"
        )

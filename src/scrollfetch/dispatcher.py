"""Trigger arbitration between the primary and fallback sentinels.

Both watches feed the same ``on_visibility``. For each visible record:

1. primary index: remember it in the tracker, then fetch.
2. fallback index: fetch only if the tracker does not already hold the
   primary index. The fallback fires when the primary watch never
   reported for this cycle; it never updates the tracker itself.

The dispatcher keeps no state of its own. Everything it needs (indices,
the enabled flag, the tracker) is read at the moment a record is handled,
so it is correct however the two watches interleave.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Sequence

from scrollfetch.binding import VisibilityRecord
from scrollfetch.resolver import SentinelIndices
from scrollfetch.tracker import TriggerTracker

logger = logging.getLogger("scrollfetch.dispatcher")

POSITION_ATTRIBUTE = "data-id"


def default_position_of(target: Any) -> int | None:
    """Recover the list position tagged onto a rendered element.

    Looks for a ``data_id`` attribute, then a ``"data-id"`` entry in the
    element's ``attrs`` mapping or the element itself if it is a mapping.
    """
    raw = getattr(target, "data_id", None)
    if raw is None:
        attrs = getattr(target, "attrs", None)
        if attrs is None and isinstance(target, dict):
            attrs = target
        if attrs is not None:
            raw = attrs.get(POSITION_ATTRIBUTE)
    if raw is None or isinstance(raw, bool):
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


class TriggerDispatcher:
    def __init__(
        self,
        fetch_next: Callable[[], object],
        tracker: TriggerTracker,
        indices: Callable[[], SentinelIndices | None],
        enabled: Callable[[], bool],
        position_of: Callable[[Any], int | None] = default_position_of,
    ) -> None:
        self._fetch_next = fetch_next
        self._tracker = tracker
        self._indices = indices
        self._enabled = enabled
        self._position_of = position_of

    @property
    def tracker(self) -> TriggerTracker:
        return self._tracker

    def on_visibility(self, records: Sequence[VisibilityRecord]) -> int:
        """Handle one notification batch. Returns the number of fetches issued.

        Records are taken left to right and each one re-reads the tracker.
        A batch fetches at most once; a primary record that comes after a
        fetch in the same batch still records itself.
        """
        fetched = 0
        for record in records:
            if not record.is_intersecting or not self._enabled():
                continue
            indices = self._indices()
            if indices is None:
                continue

            observed = self._position_of(record.target)
            if observed is None:
                logger.debug("Ignoring visibility record without a position: %r", record.target)
                continue

            if observed == indices.primary:
                self._tracker.set(observed)
                if not fetched:
                    self._fetch(observed, "primary")
                    fetched += 1
            elif observed == indices.fallback and self._tracker.get() != indices.primary:
                if not fetched:
                    self._fetch(observed, "fallback")
                    fetched += 1
        return fetched

    def __call__(self, records: Sequence[VisibilityRecord]) -> int:
        return self.on_visibility(records)

    def _fetch(self, index: int, source: str) -> None:
        logger.debug("Fetching next page from %s sentinel at index %d", source, index)
        try:
            self._fetch_next()
        except Exception:
            # A failed fetch still consumes the cycle.
            logger.exception("fetch callback raised for %s sentinel at index %d", source, index)

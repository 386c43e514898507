"""Textual visibility facility. Opt-in, requires textual.

Textual has no intersection observer, so this module computes one from
widget regions. Call ``check()`` whenever the view may have moved,
typically from the scrolling container:

    class Feed(VerticalScroll):
        def on_mount(self) -> None:
            self.visibility = TextualVisibility(self, app=self.app)
            self.controller = FetchOnScroll(
                fetcher.fetch_next, self.visibility, items=self.rows,
                trigger_point="75%", root_margin="5px 0px",
            )

        def watch_scroll_y(self, old: float, new: float) -> None:
            super().watch_scroll_y(old, new)
            self.visibility.check()
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable

from textual.geometry import Region, Spacing

from scrollfetch.binding import ObservationOptions, VisibilityCallback, VisibilityRecord

logger = logging.getLogger("scrollfetch.textual")

_MARGIN_PART = re.compile(r"^(-?\d+)(px|%)?$")


def parse_margin(margin: str | None) -> Spacing:
    """Parse a CSS-style margin into ``Spacing(top, right, bottom, left)``.

    One to four parts, each an integer with an optional ``px`` suffix.
    Cells stand in for pixels. Percentages are not supported in a
    terminal and raise ``ValueError``.
    """
    if not margin or not margin.strip():
        return Spacing(0, 0, 0, 0)
    values = []
    for part in margin.split():
        match = _MARGIN_PART.match(part)
        if match is None or match.group(2) == "%":
            raise ValueError(f"invalid margin {margin!r}")
        values.append(int(match.group(1)))
    if len(values) == 1:
        return Spacing(values[0], values[0], values[0], values[0])
    if len(values) == 2:
        return Spacing(values[0], values[1], values[0], values[1])
    if len(values) == 3:
        return Spacing(values[0], values[1], values[2], values[1])
    if len(values) == 4:
        return Spacing(*values)
    raise ValueError(f"invalid margin {margin!r}")


def _grow(region: Region, margin: Spacing) -> Region:
    top, right, bottom, left = margin
    return Region(
        region.x - left,
        region.y - top,
        max(0, region.width + left + right),
        max(0, region.height + top + bottom),
    )


def _min_threshold(threshold: float | tuple[float, ...] | None) -> float:
    if threshold is None:
        return 0.0
    if isinstance(threshold, tuple):
        return min(threshold) if threshold else 0.0
    return float(threshold)


class Watch:
    """One observed widget. Returned by ``TextualVisibility.observe``."""

    def __init__(
        self,
        owner: TextualVisibility,
        element: Any,
        callback: VisibilityCallback,
        options: ObservationOptions,
    ) -> None:
        self.element = element
        self._owner = owner
        self._callback = callback
        self._margin = parse_margin(options.root_margin)
        self._threshold = _min_threshold(options.threshold)
        self._visible: bool | None = None
        self.connected = True

    def disconnect(self) -> None:
        if self.connected:
            self.connected = False
            self._owner._forget(self)

    def _measure(self, root: Region) -> VisibilityRecord | None:
        region = self.element.region
        area = region.area
        if area:
            ratio = region.intersection(_grow(root, self._margin)).area / area
        else:
            ratio = 0.0
        if self._threshold > 0:
            visible = ratio >= self._threshold
        else:
            visible = ratio > 0
        if visible == self._visible:
            return None
        self._visible = visible
        return VisibilityRecord(self.element, visible, ratio)


class TextualVisibility:
    """Visibility facility over Textual widget regions.

    ``viewport`` is the region everything is measured against: a
    ``Region``, a widget (its ``region`` is used) or a callable returning
    a ``Region``. When ``app`` is given, ``check()`` does nothing while the
    app is not running.
    """

    def __init__(self, viewport: Region | Any | Callable[[], Region], *, app: Any = None) -> None:
        self._viewport = viewport
        self._app = app
        self._watches: list[Watch] = []

    def observe(
        self, element: Any, callback: VisibilityCallback, options: ObservationOptions
    ) -> Watch:
        watch = Watch(self, element, callback, options)
        self._watches.append(watch)
        return watch

    @property
    def watches(self) -> list[Watch]:
        return list(self._watches)

    def check(self) -> int:
        """Deliver a record to every watch whose visibility changed.

        The first check after ``observe`` always reports the initial
        state. Returns the number of callbacks made.
        """
        if self._app is not None and not self._app.is_running:
            return 0
        root = self._viewport_region()
        delivered = 0
        for watch in list(self._watches):
            # An earlier callback in this pass may have disconnected it.
            if not watch.connected:
                continue
            record = watch._measure(root)
            if record is None:
                continue
            watch._callback([record])
            delivered += 1
        return delivered

    def _viewport_region(self) -> Region:
        if isinstance(self._viewport, Region):
            return self._viewport
        if callable(self._viewport):
            return self._viewport()
        return self._viewport.region

    def _forget(self, watch: Watch) -> None:
        try:
            self._watches.remove(watch)
        except ValueError:
            logger.debug("Watch for %r already forgotten", watch.element)

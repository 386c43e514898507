"""Maps a trigger setting and an item count onto sentinel indices.

Three ways to say where the primary sentinel sits:

- a ``TriggerPoint`` tier: ``"50%"``, ``"75%"`` or ``"100%"``
- a ``Percentage`` of the list, any fraction in (0, 1]
- an explicit index (``int``, or a float that gets floored)

The fallback sentinel is always the last item. An empty list has no
sentinels at all.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Union


class TriggerPoint(str, Enum):
    HALF = "50%"
    THREE_QUARTERS = "75%"
    END = "100%"


_TIER_FRACTIONS = {
    TriggerPoint.HALF: 0.5,
    TriggerPoint.THREE_QUARTERS: 0.75,
}


@dataclass(frozen=True)
class Percentage:
    """Primary sentinel at ``floor(item_count * fraction)``."""

    fraction: float

    def __post_init__(self) -> None:
        if not 0 < self.fraction <= 1:
            raise ValueError(f"percentage must be in (0, 1], got {self.fraction!r}")


Trigger = Union[TriggerPoint, Percentage, int, float]


class SentinelIndices(NamedTuple):
    primary: int
    fallback: int

    @property
    def shared(self) -> bool:
        """True when one element serves as both sentinels."""
        return self.primary == self.fallback


def parse_trigger(
    trigger_point: TriggerPoint | str | None = None,
    trigger_index: int | float | None = None,
    percentage: float | None = None,
) -> Trigger:
    """Normalise the user-facing trigger options into one ``Trigger``.

    An explicit index wins over a percentage, which wins over a tier.
    Nothing at all means the last item. Bad values raise ``ValueError``
    here, at configuration time.
    """
    if trigger_index is not None:
        if isinstance(trigger_index, bool) or not isinstance(trigger_index, (int, float)):
            raise ValueError(f"trigger_index must be a number, got {trigger_index!r}")
        if not math.isfinite(trigger_index):
            raise ValueError(f"trigger_index must be finite, got {trigger_index!r}")
        return trigger_index
    if percentage is not None:
        return Percentage(percentage)
    if trigger_point is None:
        return TriggerPoint.END
    try:
        return TriggerPoint(trigger_point)
    except ValueError:
        raise ValueError(
            f"unknown trigger point {trigger_point!r}, expected one of "
            f"{[p.value for p in TriggerPoint]}"
        ) from None


def _clamp(index: int, item_count: int) -> int:
    return max(0, min(index, item_count - 1))


def resolve(item_count: int, trigger: Trigger) -> SentinelIndices | None:
    """Return the (primary, fallback) indices, or None when there are no items."""
    if item_count <= 0:
        return None
    if isinstance(trigger, str) and not isinstance(trigger, TriggerPoint):
        trigger = TriggerPoint(trigger)

    if isinstance(trigger, TriggerPoint):
        if trigger is TriggerPoint.END:
            primary = item_count - 1
        else:
            primary = math.floor(item_count * _TIER_FRACTIONS[trigger])
    elif isinstance(trigger, Percentage):
        primary = math.floor(item_count * trigger.fraction)
    else:
        primary = math.floor(trigger)

    return SentinelIndices(_clamp(primary, item_count), item_count - 1)

"""Dependency tracking for the controller's reactive settings.

While a Computed or reaction evaluates, every Observable it reads is
recorded as one of its dependencies. Writing an Observable schedules its
dependents again, which is how a growing item list ends up re-arming the
sentinel watches.

Batching: writes inside ``transaction()`` or an ``@action`` queue their
dependents and run them once when the outermost batch exits.
"""

from __future__ import annotations

import contextvars
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from scrollfetch.computed import Computed
    from scrollfetch.reaction import Reaction

    Derivation = Computed | Reaction

# Set while a derivation evaluates; Observable reads register against it.
current_derivation: contextvars.ContextVar[Derivation | None] = contextvars.ContextVar(
    "current_derivation", default=None
)

_batch_depth: int = 0

# Insertion ordered so reactions run in the order they were invalidated.
_pending: dict[Derivation, None] = {}


def begin_batch() -> None:
    global _batch_depth
    _batch_depth += 1


def end_batch() -> None:
    """Leave a batch. The outermost exit runs everything that was queued."""
    global _batch_depth
    _batch_depth -= 1
    if _batch_depth == 0:
        _flush_pending()


def schedule(derivation: Derivation) -> None:
    """Run a derivation now, or queue it if a batch is open."""
    if _batch_depth > 0:
        _pending[derivation] = None
    else:
        derivation._run()


def _flush_pending() -> None:
    while _pending:
        batch = list(_pending)
        _pending.clear()
        for derivation in batch:
            derivation._run()


def get_pending_count() -> int:
    """Number of derivations waiting for the current batch to close."""
    return len(_pending)

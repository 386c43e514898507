"""Batched writes.

Inside ``transaction()`` or an ``@action`` function, Observable writes
queue their dependents; everything runs once when the outermost batch
exits. Use it when a render changes several settings at once, e.g. a new
item count together with a new trigger position, so the sentinel watches
are re-armed once instead of twice.
"""

from __future__ import annotations

import functools
from contextlib import contextmanager
from typing import Callable, ParamSpec, TypeVar

from scrollfetch._tracking import begin_batch, end_batch

P = ParamSpec("P")
R = TypeVar("R")


def action(fn: Callable[P, R]) -> Callable[P, R]:
    """Decorator: batch every Observable write made by ``fn``."""

    @functools.wraps(fn)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        begin_batch()
        try:
            return fn(*args, **kwargs)
        finally:
            end_batch()

    return wrapper


@contextmanager
def transaction():
    """Context manager form of ``action``.

    Usage:
        with transaction():
            controller.number_of_items = 40
            controller.trigger = "75%"
        # watches re-armed here, once
    """
    begin_batch()
    try:
        yield
    finally:
        end_batch()

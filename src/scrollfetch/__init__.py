"""scrollfetch: fetch the next page when a list is scrolled far enough."""

from importlib.metadata import version as _version

__version__ = _version("scrollfetch")

from scrollfetch._tracking import get_pending_count
from scrollfetch.observable import Observable, ObservableList, set_scheduler
from scrollfetch.computed import Computed, computed
from scrollfetch.reaction import Reaction, autorun, reaction
from scrollfetch.action import action, transaction
from scrollfetch.resolver import Percentage, SentinelIndices, TriggerPoint, parse_trigger, resolve
from scrollfetch.store import KeyValueStore, MemoryStore, SessionStore
from scrollfetch.tracker import TriggerTracker
from scrollfetch.binding import BindingPair, ObservationOptions, ObserverBinding, VisibilityRecord
from scrollfetch.dispatcher import TriggerDispatcher, default_position_of
from scrollfetch.controller import FetchOnScroll
from scrollfetch.watch import watch, WatchHandle
from scrollfetch.fetcher import LoadingState, PageFetcher
# textual NOT auto-imported — opt-in only

__all__ = [
    "Observable",
    "ObservableList",
    "Computed",
    "computed",
    "Reaction",
    "autorun",
    "reaction",
    "action",
    "transaction",
    "get_pending_count",
    "set_scheduler",
    "Percentage",
    "SentinelIndices",
    "TriggerPoint",
    "parse_trigger",
    "resolve",
    "KeyValueStore",
    "MemoryStore",
    "SessionStore",
    "TriggerTracker",
    "BindingPair",
    "ObservationOptions",
    "ObserverBinding",
    "VisibilityRecord",
    "TriggerDispatcher",
    "default_position_of",
    "FetchOnScroll",
    "watch",
    "WatchHandle",
    "LoadingState",
    "PageFetcher",
]

"""Tests for trigger arbitration between the primary and fallback sentinels."""

import logging

from scrollfetch import (
    MemoryStore,
    SentinelIndices,
    TriggerDispatcher,
    TriggerTracker,
    VisibilityRecord,
    default_position_of,
)


class _Row:
    def __init__(self, data_id):
        self.data_id = data_id


def _visible(index):
    return VisibilityRecord(_Row(index), True, 1.0)


def _hidden(index):
    return VisibilityRecord(_Row(index), False, 0.0)


def _dispatcher(indices=SentinelIndices(5, 9), enabled=True, fetch=None, store=None):
    calls = []
    tracker = TriggerTracker(store if store is not None else MemoryStore())
    d = TriggerDispatcher(
        fetch if fetch is not None else (lambda: calls.append("fetch")),
        tracker,
        lambda: indices,
        lambda: enabled,
    )
    return d, tracker, calls


class TestScenarios:
    def test_primary_visible(self):
        """Scenario A: the primary sentinel fetches and is remembered."""
        d, tracker, calls = _dispatcher()
        assert d.on_visibility([_visible(5)]) == 1
        assert calls == ["fetch"]
        assert tracker.get() == 5

    def test_fallback_backstop(self):
        """Scenario B: the primary never crossed, the fallback still fetches."""
        d, tracker, calls = _dispatcher()
        d.on_visibility([_visible(9)])
        assert calls == ["fetch"]
        assert tracker.get() is None

    def test_primary_then_fallback(self):
        """Scenario C: the fallback is suppressed once the primary fired."""
        d, tracker, calls = _dispatcher()
        d.on_visibility([_visible(5)])
        d.on_visibility([_visible(9)])
        assert calls == ["fetch"]

    def test_single_item(self):
        """Scenario D: one shared sentinel, one fetch."""
        d, tracker, calls = _dispatcher(indices=SentinelIndices(0, 0))
        d.on_visibility([_visible(0)])
        assert calls == ["fetch"]
        assert tracker.get() == 0

    def test_disabled(self):
        """Scenario E: nothing fetches while fetching is switched off."""
        d, tracker, calls = _dispatcher(enabled=False)
        for index in range(10):
            d.on_visibility([_visible(index)])
        assert calls == []
        assert tracker.get() is None


class TestBatches:
    def test_empty_batch(self):
        d, tracker, calls = _dispatcher()
        assert d.on_visibility([]) == 0
        assert calls == []

    def test_hidden_records_ignored(self):
        d, tracker, calls = _dispatcher()
        d.on_visibility([_hidden(5), _hidden(9)])
        assert calls == []
        assert tracker.get() is None

    def test_primary_then_fallback_in_one_batch(self):
        d, tracker, calls = _dispatcher()
        assert d.on_visibility([_visible(5), _visible(9)]) == 1
        assert calls == ["fetch"]
        assert tracker.get() == 5

    def test_fallback_then_primary_in_one_batch(self):
        d, tracker, calls = _dispatcher()
        assert d.on_visibility([_visible(9), _visible(5)]) == 1
        assert calls == ["fetch"]
        # The primary still records itself, so a later fallback stays quiet.
        assert tracker.get() == 5
        d.on_visibility([_visible(9)])
        assert calls == ["fetch"]

    def test_other_indices_ignored(self):
        d, tracker, calls = _dispatcher()
        d.on_visibility([_visible(3), _visible(8)])
        assert calls == []


class TestGuard:
    def test_suppressed_only_when_tracker_holds_primary(self):
        store = MemoryStore({"entryId": "5"})
        d, tracker, calls = _dispatcher(store=store)
        d.on_visibility([_visible(9)])
        assert calls == []

    def test_stale_tracker_from_earlier_cycle_does_not_suppress(self):
        store = MemoryStore({"entryId": "2"})
        d, tracker, calls = _dispatcher(store=store)
        d.on_visibility([_visible(9)])
        assert calls == ["fetch"]
        assert tracker.get() == 2

    def test_tracker_equal_to_fallback_does_not_suppress(self):
        store = MemoryStore({"entryId": "9"})
        d, tracker, calls = _dispatcher(store=store)
        d.on_visibility([_visible(9)])
        assert calls == ["fetch"]

    def test_primary_fires_again_even_if_remembered(self):
        store = MemoryStore({"entryId": "5"})
        d, tracker, calls = _dispatcher(store=store)
        d.on_visibility([_visible(5)])
        assert calls == ["fetch"]


class TestFailures:
    def test_no_sentinels(self):
        d, tracker, calls = _dispatcher(indices=None)
        d.on_visibility([_visible(0)])
        assert calls == []

    def test_unidentifiable_target(self, caplog):
        d, tracker, calls = _dispatcher()
        with caplog.at_level(logging.DEBUG, logger="scrollfetch.dispatcher"):
            d.on_visibility([VisibilityRecord(object(), True)])
        assert calls == []
        assert "without a position" in caplog.text

    def test_fetch_exception_is_logged_and_consumes_cycle(self, caplog):
        def boom():
            raise RuntimeError("network down")

        d, tracker, _ = _dispatcher(fetch=boom)
        with caplog.at_level(logging.ERROR, logger="scrollfetch.dispatcher"):
            assert d.on_visibility([_visible(5)]) == 1
        assert tracker.get() == 5
        assert "network down" in caplog.text

    def test_enabled_read_on_every_event(self):
        state = {"enabled": True}
        calls = []
        tracker = TriggerTracker(MemoryStore())

        def fetch():
            calls.append("fetch")
            state["enabled"] = False

        d = TriggerDispatcher(fetch, tracker, lambda: SentinelIndices(5, 9), lambda: state["enabled"])
        d.on_visibility([_visible(5)])
        d.on_visibility([_visible(5)])
        d.on_visibility([_visible(9)])
        assert calls == ["fetch"]


class TestDefaultPositionOf:
    def test_attribute(self):
        assert default_position_of(_Row("7")) == 7

    def test_attrs_mapping(self):
        class _Node:
            attrs = {"data-id": "3"}

        assert default_position_of(_Node()) == 3

    def test_mapping(self):
        assert default_position_of({"data-id": 4}) == 4

    def test_missing_or_garbage(self):
        assert default_position_of(object()) is None
        assert default_position_of(_Row("abc")) is None
        assert default_position_of(_Row(True)) is None

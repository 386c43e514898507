"""Tests for session stores and the trigger tracker."""

import pytest

from scrollfetch import MemoryStore, SessionStore, TriggerTracker
from scrollfetch import _session


@pytest.fixture(autouse=True)
def _fresh_session():
    _session.clear()
    yield
    _session.clear()


class TestSessionStore:
    def test_get_missing(self):
        assert SessionStore().get("entryId") is None

    def test_shared_across_instances(self):
        SessionStore().set("entryId", "5")
        assert SessionStore().get("entryId") == "5"

    def test_namespaces_are_separate(self):
        SessionStore("inbox").set("entryId", "5")
        assert SessionStore("archive").get("entryId") is None
        assert SessionStore("inbox").get("entryId") == "5"

    def test_values_stored_as_strings(self):
        store = SessionStore()
        store.set("entryId", 7)
        assert store.get("entryId") == "7"

    def test_delete(self):
        store = SessionStore()
        store.set("entryId", "1")
        store.delete("entryId")
        store.delete("entryId")
        assert store.get("entryId") is None


class TestMemoryStore:
    def test_isolated(self):
        a = MemoryStore()
        a.set("entryId", "3")
        assert MemoryStore().get("entryId") is None
        assert _session.values == {}

    def test_initial(self):
        assert MemoryStore({"entryId": "2"}).get("entryId") == "2"


class TestTriggerTracker:
    def test_absent_is_none_not_zero(self):
        tracker = TriggerTracker(MemoryStore())
        assert tracker.get() is None

    def test_set_get(self):
        tracker = TriggerTracker(MemoryStore())
        tracker.set(5)
        assert tracker.get() == 5
        tracker.set(0)
        assert tracker.get() == 0

    def test_most_recent_only(self):
        tracker = TriggerTracker(MemoryStore())
        tracker.set(5)
        tracker.set(10)
        assert tracker.get() == 10

    def test_unparsable_is_none(self):
        tracker = TriggerTracker(MemoryStore({"entryId": "not-a-number"}))
        assert tracker.get() is None

    def test_survives_new_tracker(self):
        TriggerTracker(SessionStore()).set(4)
        assert TriggerTracker(SessionStore()).get() == 4

    def test_custom_key(self):
        store = MemoryStore()
        TriggerTracker(store, key="feed").set(3)
        assert store.get("feed") == "3"
        assert store.get("entryId") is None

    def test_reset(self):
        tracker = TriggerTracker(MemoryStore())
        tracker.set(5)
        tracker.reset()
        assert tracker.get() is None

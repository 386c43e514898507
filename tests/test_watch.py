"""Tests for watch() — background runs with auto-marshaled Observable.set()."""

import logging
import threading

from scrollfetch import Observable, watch
import scrollfetch.observable as _obs_mod


class TestWatch:
    def test_runs_with_handle(self):
        seen = []
        handle = watch(seen.append)
        assert handle.join(timeout=2)
        assert seen == [handle]
        assert handle.done

    def test_dispose_flag(self):
        gate = threading.Event()
        handle = watch(lambda h: gate.wait(timeout=2))
        assert not handle.disposed
        handle.dispose()
        assert handle.disposed
        gate.set()
        assert handle.join(timeout=2)

    def test_failure_is_logged_and_run_finishes(self, caplog):
        def boom(handle):
            raise RuntimeError("fetch exploded")

        with caplog.at_level(logging.ERROR, logger="scrollfetch.watch"):
            handle = watch(boom)
            assert handle.join(timeout=2)
        assert handle.done
        assert "fetch exploded" in caplog.text


class TestWatchWithScheduler:
    def test_observable_updated_through_scheduler(self):
        old_sched, old_thread = _obs_mod._scheduler, _obs_mod._scheduler_thread
        calls = []
        _obs_mod._scheduler = lambda f: (calls.append(f), f())
        _obs_mod._scheduler_thread = threading.current_thread()
        try:
            result = Observable(None)
            handle = watch(lambda h: result.set(42))
            assert handle.join(timeout=2)
            assert result.get() == 42
            assert len(calls) == 1
        finally:
            _obs_mod._scheduler = old_sched
            _obs_mod._scheduler_thread = old_thread

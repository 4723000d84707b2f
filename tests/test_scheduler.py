"""
Tests for scheduler implementations.

CRITICAL TESTS:
1. test_advance_runs_due_tasks - Every due run happens, in order
2. test_thread_scheduler_ticks - Real-time tasks actually fire
"""

import threading

import pytest

from campfire.host import ManualScheduler, ThreadScheduler


class TestManualScheduler:
    """Test the deterministic scheduler."""

    def test_advance_runs_due_tasks(self):
        """
        CRITICAL TEST: Tasks run once per interval, seeing the run time.
        """
        scheduler = ManualScheduler(start=100)
        seen = []
        scheduler.schedule_repeating(lambda: seen.append(scheduler.now()), 2)

        runs = scheduler.advance(7)

        assert runs == 3
        assert seen == [102, 104, 106]
        assert scheduler.now() == 107

    def test_interleaved_tasks(self):
        scheduler = ManualScheduler()
        order = []
        scheduler.schedule_repeating(lambda: order.append("a"), 2)
        scheduler.schedule_repeating(lambda: order.append("b"), 3)

        scheduler.advance(6)

        assert order == ["a", "b", "a", "a", "b"]

    def test_cancel(self):
        scheduler = ManualScheduler()
        calls = []
        task = scheduler.schedule_repeating(lambda: calls.append(1), 1)

        scheduler.cancel(task)

        assert scheduler.advance(10) == 0
        assert scheduler.pending == 0
        assert calls == []

    def test_cancel_unknown_is_noop(self):
        ManualScheduler().cancel(42)

    def test_advance_without_tasks_moves_clock(self):
        scheduler = ManualScheduler(start=5)
        scheduler.advance(10)
        assert scheduler.now() == 15

    def test_invalid_interval(self):
        with pytest.raises(ValueError):
            ManualScheduler().schedule_repeating(lambda: None, 0)


class TestThreadScheduler:
    """Test the real-time scheduler."""

    def test_thread_scheduler_ticks(self):
        """
        CRITICAL TEST: A scheduled task fires on its own thread.
        """
        scheduler = ThreadScheduler()
        fired = threading.Event()
        task = scheduler.schedule_repeating(fired.set, 0.01)

        try:
            assert fired.wait(timeout=2.0)
        finally:
            scheduler.cancel(task)

    def test_failing_task_keeps_running(self):
        scheduler = ThreadScheduler()
        calls = []
        done = threading.Event()

        def flaky():
            calls.append(1)
            if len(calls) >= 3:
                done.set()
            raise RuntimeError("boom")

        scheduler.schedule_repeating(flaky, 0.01)
        try:
            assert done.wait(timeout=2.0)
        finally:
            scheduler.shutdown()

    def test_cancel_stops_task(self):
        scheduler = ThreadScheduler()
        calls = []
        task = scheduler.schedule_repeating(lambda: calls.append(1), 0.01)

        scheduler.cancel(task)
        count = len(calls)
        threading.Event().wait(0.05)

        assert len(calls) == count

"""
Scheduler implementations.

ThreadScheduler runs each task on its own daemon thread at a fixed cadence.
ManualScheduler runs tasks only when its clock is advanced, which makes tick
behaviour deterministic for tests and simulations.
"""

import itertools
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .base import Scheduler

logger = logging.getLogger(__name__)


class ThreadScheduler(Scheduler):
    """
    Real-time scheduler backed by threads.

    Example:
        scheduler = ThreadScheduler()
        task = scheduler.schedule_repeating(engine.tick, 1.0)
        # ... later ...
        scheduler.cancel(task)
    """

    def __init__(self):
        self._ids = itertools.count(1)
        self._lock = threading.Lock()
        self._tasks: Dict[int, tuple] = {}

    def schedule_repeating(self, callback: Callable[[], None], interval_seconds: float) -> int:
        task_id = next(self._ids)
        stop = threading.Event()
        thread = threading.Thread(
            target=self._run,
            args=(task_id, callback, interval_seconds, stop),
            name=f"campfire-task-{task_id}",
            daemon=True,
        )
        with self._lock:
            self._tasks[task_id] = (thread, stop)
        thread.start()
        return task_id

    def cancel(self, task_id: int) -> None:
        with self._lock:
            task = self._tasks.pop(task_id, None)
        if task is None:
            return
        thread, stop = task
        stop.set()
        if thread is not threading.current_thread():
            thread.join(timeout=2.0)

    def shutdown(self) -> None:
        """Cancel every task."""
        with self._lock:
            task_ids = list(self._tasks)
        for task_id in task_ids:
            self.cancel(task_id)

    def _run(self, task_id: int, callback, interval: float, stop: threading.Event):
        while not stop.wait(interval):
            try:
                callback()
            except Exception as e:
                logger.exception(f"Scheduled task {task_id} failed: {e}")


@dataclass
class _ManualTask:
    callback: Callable[[], None]
    interval: float
    next_run: float


class ManualScheduler(Scheduler):
    """
    Deterministic scheduler driven by advance().

    The scheduler owns a clock; pass scheduler.now as the engine's clock so
    ticks and time accounting see the same time.
    """

    def __init__(self, start: float = 0.0):
        self._now = float(start)
        self._ids = itertools.count(1)
        self._tasks: Dict[int, _ManualTask] = {}

    def now(self) -> float:
        return self._now

    def schedule_repeating(self, callback: Callable[[], None], interval_seconds: float) -> int:
        if interval_seconds <= 0:
            raise ValueError(f"Interval must be positive: {interval_seconds}")
        task_id = next(self._ids)
        self._tasks[task_id] = _ManualTask(
            callback=callback,
            interval=interval_seconds,
            next_run=self._now + interval_seconds,
        )
        return task_id

    def cancel(self, task_id: int) -> None:
        self._tasks.pop(task_id, None)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward, running every task that falls due in order.

        Returns:
            Number of callbacks run
        """
        target = self._now + seconds
        runs = 0

        while True:
            due = self._next_due(target)
            if due is None:
                break
            task_id, task = due
            self._now = task.next_run
            task.next_run += task.interval
            task.callback()
            runs += 1

        self._now = target
        return runs

    def _next_due(self, target: float) -> Optional[tuple]:
        candidates = [
            (task.next_run, task_id, task)
            for task_id, task in self._tasks.items()
            if task.next_run <= target
        ]
        if not candidates:
            return None
        _, task_id, task = min(candidates, key=lambda c: (c[0], c[1]))
        return task_id, task

from __future__ import annotations

import heapq
import itertools
import logging
import threading
import time
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger("live_config.scheduler")
logger.addHandler(logging.NullHandler())

Task = Callable[[], None]


class ScheduledTask:
    """A periodic task; a failing run is logged and never stops the schedule."""

    def __init__(self, func: Task, initial_delay: float, period: float) -> None:
        if not callable(func):
            raise TypeError("Scheduled task must be callable")
        if period <= 0:
            raise ValueError("period must be positive")
        if initial_delay < 0:
            raise ValueError("initial_delay must not be negative")
        self._func = func
        self.initial_delay = float(initial_delay)
        self.period = float(period)
        self.run_count = 0
        self._cancelled = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        self._cancelled.set()

    def run(self) -> None:
        self.run_count += 1
        try:
            self._func()
        except Exception:
            logger.exception("Scheduled task %r failed", self._func)

    def __repr__(self) -> str:
        return (
            f"<ScheduledTask func={self._func!r} delay={self.initial_delay} "
            f"period={self.period} runs={self.run_count}>"
        )


class Scheduler:
    """
    Runs periodic tasks on one shared daemon thread, started on first schedule().

    Repetition is fixed-delay: the next run is due ``period`` seconds after the
    previous run finished.
    """

    def __init__(self, name: str = "live-config-scheduler") -> None:
        self._name = name
        self._cond = threading.Condition()
        self._queue: List[Tuple[float, int, ScheduledTask]] = []
        self._seq = itertools.count()
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def schedule(self, initial_delay: float, period: float, task: Task) -> ScheduledTask:
        scheduled = ScheduledTask(task, initial_delay, period)
        with self._cond:
            if self._stop_event.is_set():
                raise RuntimeError("Scheduler has been shut down")
            due = time.monotonic() + scheduled.initial_delay
            heapq.heappush(self._queue, (due, next(self._seq), scheduled))
            self._ensure_started()
            self._cond.notify()
        logger.debug("Scheduled %r", scheduled)
        return scheduled

    def _ensure_started(self) -> None:
        if self._thread is None:
            t = threading.Thread(target=self._loop, name=self._name, daemon=True)
            self._thread = t
            t.start()
            logger.debug("Scheduler thread started (daemon).")

    def _next_due(self) -> Optional[ScheduledTask]:
        """Block until a task is due and pop it; None once stopped."""
        with self._cond:
            while not self._stop_event.is_set():
                if not self._queue:
                    self._cond.wait()
                    continue
                due, _, task = self._queue[0]
                if task.cancelled:
                    heapq.heappop(self._queue)
                    continue
                remaining = due - time.monotonic()
                if remaining <= 0:
                    heapq.heappop(self._queue)
                    return task
                self._cond.wait(remaining)
            return None

    def _loop(self) -> None:
        while True:
            task = self._next_due()
            if task is None:
                break
            task.run()
            with self._cond:
                if not task.cancelled and not self._stop_event.is_set():
                    due = time.monotonic() + task.period
                    heapq.heappush(self._queue, (due, next(self._seq), task))
        logger.debug("Scheduler loop exiting.")

    def shutdown(self, wait: bool = True) -> None:
        """Stop the background thread; pending runs are dropped."""
        with self._cond:
            self._stop_event.set()
            self._queue.clear()
            self._cond.notify_all()
        t = self._thread
        if wait and t is not None and t.is_alive() and t is not threading.current_thread():
            t.join()
            logger.debug("Scheduler thread stopped.")

    def __repr__(self) -> str:
        return f"<Scheduler name={self._name!r} running={self.running} tasks={len(self._queue)}>"

import logging
import threading

import pytest

from live_config.scheduler import ScheduledTask, Scheduler


@pytest.fixture
def scheduler():
    s = Scheduler()
    yield s
    s.shutdown()


def test_scheduler_is_started_lazily(scheduler):
    assert scheduler.running is False
    scheduler.schedule(10, 10, lambda: None)
    assert scheduler.running is True


def test_task_runs_repeatedly(scheduler):
    done = threading.Event()
    runs = []

    def task():
        runs.append(1)
        if len(runs) >= 3:
            done.set()

    scheduler.schedule(0, 0.01, task)
    assert done.wait(5)


def test_failing_task_keeps_running(scheduler, caplog):
    caplog.set_level(logging.ERROR, logger="live_config.scheduler")
    done = threading.Event()
    attempts = []

    def task():
        attempts.append(1)
        if len(attempts) >= 3:
            done.set()
        raise RuntimeError("boom")

    scheduler.schedule(0, 0.01, task)
    assert done.wait(5)
    assert any("failed" in r.getMessage() for r in caplog.records)


def test_tasks_share_one_thread(scheduler):
    runs = {}
    both = threading.Event()

    def recorder(label):
        def record():
            runs[label] = threading.current_thread().name
            if len(runs) == 2:
                both.set()

        return record

    scheduler.schedule(0, 0.01, recorder("a"))
    scheduler.schedule(0, 0.01, recorder("b"))
    assert both.wait(5)
    assert set(runs.values()) == {"live-config-scheduler"}


def test_cancelled_task_stops(scheduler):
    task = scheduler.schedule(60, 60, lambda: None)
    task.cancel()
    assert task.cancelled is True
    assert task.run_count == 0


def test_schedule_after_shutdown_raises():
    s = Scheduler()
    s.schedule(60, 60, lambda: None)
    s.shutdown()
    assert s.running is False
    with pytest.raises(RuntimeError):
        s.schedule(1, 1, lambda: None)


def test_scheduled_task_validation():
    with pytest.raises(TypeError):
        ScheduledTask(123, 0, 1)  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        ScheduledTask(lambda: None, 0, 0)
    with pytest.raises(ValueError):
        ScheduledTask(lambda: None, -1, 1)


def test_scheduled_task_run_swallows_exception():
    def bad():
        raise ValueError("nope")

    task = ScheduledTask(bad, 0, 1)
    task.run()
    assert task.run_count == 1

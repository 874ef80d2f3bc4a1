"""Tests for the worker pool and event inbox."""

from __future__ import annotations

import threading

import pytest

from rootly_tui.tui.messages import CacheCleared, KeyPressed, Tick
from rootly_tui.tui.scheduler import AsyncCommandScheduler


@pytest.fixture()
def scheduler(log):
    s = AsyncCommandScheduler(log, max_workers=2)
    yield s
    s.shutdown(wait=True)


def _to_event(result, exc):
    return CacheCleared(error=None if exc is None else str(exc))


def test_success_posts_one_event(scheduler) -> None:
    future = scheduler.dispatch(lambda: 42, lambda result, exc: KeyPressed(str(result)))
    future.result(timeout=5)
    assert scheduler.next_event(timeout=5) == KeyPressed("42")
    assert scheduler.pending() == []


def test_failure_posts_one_event(scheduler, log) -> None:
    def work():
        raise RuntimeError("boom")

    scheduler.dispatch(work, _to_event).result(timeout=5)
    assert scheduler.next_event(timeout=5) == CacheCleared(error="boom")
    assert scheduler.pending() == []
    assert any("RuntimeError: boom" in line for line in log.entries())


def test_every_unit_reports(scheduler) -> None:
    futures = [
        scheduler.dispatch(lambda i=i: i, lambda result, exc: KeyPressed(str(result)))
        for i in range(10)
    ]
    for future in futures:
        future.result(timeout=5)
    keys = sorted(int(e.key) for e in scheduler.pending())
    assert keys == list(range(10))


def test_work_runs_off_caller_thread(scheduler) -> None:
    caller = threading.get_ident()
    future = scheduler.dispatch(threading.get_ident, lambda result, exc: KeyPressed(str(result)))
    future.result(timeout=5)
    assert scheduler.next_event(timeout=5).key != str(caller)


def test_next_event_times_out(scheduler) -> None:
    assert scheduler.next_event(timeout=0.01) is None


def test_post_from_any_thread(scheduler) -> None:
    thread = threading.Thread(target=scheduler.post, args=(Tick(),))
    thread.start()
    thread.join()
    assert scheduler.next_event(timeout=5) == Tick()


def test_schedule_posts_after_delay(scheduler) -> None:
    scheduler.schedule(0.01, Tick())
    assert scheduler.next_event(timeout=5) == Tick()


def test_schedule_after_shutdown_is_ignored(log) -> None:
    s = AsyncCommandScheduler(log)
    s.shutdown(wait=True)
    s.schedule(0.0, Tick())
    assert s.next_event(timeout=0.05) is None

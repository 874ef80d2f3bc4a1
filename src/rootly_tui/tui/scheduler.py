"""Worker pool plus a serialized inbox for the reducer.

Fetch units run on a :class:`~concurrent.futures.ThreadPoolExecutor`. Each
unit posts exactly one event into the inbox when it finishes, success or
failure. The render thread drains the inbox with :meth:`next_event` and is
the only consumer, which is what makes the reducer single-threaded.

There is no cancellation: a unit runs until its transport gives up.
"""

from __future__ import annotations

import queue
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional, TypeVar

from rootly_tui.debug import DebugLog
from rootly_tui.tui.messages import Event

T = TypeVar("T")

DEFAULT_WORKERS = 4


class AsyncCommandScheduler:
    """Run blocking work off the render thread and collect the results.

    Args:
        log: Logging handle.
        max_workers: Worker thread count.

    Example::

        scheduler = AsyncCommandScheduler(log)
        scheduler.dispatch(
            lambda: orchestrator.list_alerts(1),
            lambda page, exc: ListLoaded(Resource.ALERTS, 1, page, str(exc) if exc else None),
        )
        event = scheduler.next_event(timeout=1.0)
    """

    def __init__(self, log: DebugLog, max_workers: int = DEFAULT_WORKERS) -> None:
        self._log = log
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="fetch")
        self._inbox: queue.Queue[Event] = queue.Queue()
        self._timers: set[threading.Timer] = set()
        self._timers_lock = threading.Lock()
        self._closed = False

    def post(self, event: Event) -> None:
        """Put *event* in the inbox. Safe from any thread."""
        self._inbox.put(event)

    def dispatch(
        self,
        work: Callable[[], T],
        on_done: Callable[[Optional[T], Optional[Exception]], Event],
    ) -> Future[None]:
        """Run *work* on a worker and post ``on_done(result, error)``.

        Exactly one of ``result`` and ``error`` is meaningful. The event is
        posted whether *work* returns or raises.
        """

        def unit() -> None:
            try:
                result = work()
            except Exception as exc:
                self._log.debug("Fetch unit failed", error=f"{type(exc).__name__}: {exc}")
                self.post(on_done(None, exc))
            else:
                self.post(on_done(result, None))

        return self._executor.submit(unit)

    def schedule(self, delay: float, event: Event) -> None:
        """Post *event* after *delay* seconds."""
        if self._closed:
            return

        def fire() -> None:
            with self._timers_lock:
                self._timers.discard(timer)
            self.post(event)

        timer = threading.Timer(delay, fire)
        timer.daemon = True
        with self._timers_lock:
            self._timers.add(timer)
        timer.start()

    def next_event(self, timeout: Optional[float] = None) -> Optional[Event]:
        """Block for the next event; ``None`` if *timeout* passes first."""
        try:
            return self._inbox.get(timeout=timeout)
        except queue.Empty:
            return None

    def pending(self) -> list[Event]:
        """Remove and return every event currently in the inbox."""
        events: list[Event] = []
        while True:
            try:
                events.append(self._inbox.get_nowait())
            except queue.Empty:
                return events

    def shutdown(self, wait: bool = False) -> None:
        """Stop timers and the worker pool. In-flight units are abandoned."""
        self._closed = True
        with self._timers_lock:
            timers = list(self._timers)
            self._timers.clear()
        for timer in timers:
            timer.cancel()
        self._executor.shutdown(wait=wait, cancel_futures=True)

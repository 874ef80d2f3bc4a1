"""Execute reducer commands."""

from __future__ import annotations

import webbrowser
from functools import partial
from typing import Callable, Iterable, Optional

from rootly_tui.debug import DebugLog
from rootly_tui.exceptions import RootlyTuiError
from rootly_tui.orchestrator import DataOrchestrator
from rootly_tui.tui.messages import (
    CacheCleared,
    ClearCache,
    Command,
    DetailLoaded,
    FetchDetail,
    FetchList,
    ListLoaded,
    OpenUrl,
    Resource,
    ScheduleTick,
    Tick,
)
from rootly_tui.tui.scheduler import AsyncCommandScheduler


def error_text(exc: Optional[Exception]) -> Optional[str]:
    """User-facing text for a failed unit; ``None`` when there was no failure."""
    if exc is None:
        return None
    if isinstance(exc, RootlyTuiError):
        return str(exc)
    return f"Unexpected error: {type(exc).__name__}: {exc}"


class EffectRunner:
    """Turn commands into scheduler work.

    Args:
        scheduler: Where fetch units run and events are posted.
        orchestrator: Cache-aware data access.
        log: Logging handle.
        open_url: Opens a URL in the user's browser.
    """

    def __init__(
        self,
        scheduler: AsyncCommandScheduler,
        orchestrator: DataOrchestrator,
        log: DebugLog,
        open_url: Callable[[str], object] = webbrowser.open,
    ) -> None:
        self._scheduler = scheduler
        self._orchestrator = orchestrator
        self._log = log
        self._open_url = open_url

    def run(self, commands: Iterable[Command]) -> None:
        for command in commands:
            self.execute(command)

    def execute(self, command: Command) -> None:
        if isinstance(command, FetchList):
            self._fetch_list(command)
        elif isinstance(command, FetchDetail):
            self._fetch_detail(command)
        elif isinstance(command, ClearCache):
            self._scheduler.dispatch(
                self._orchestrator.clear_all,
                lambda _, exc: CacheCleared(error=error_text(exc)),
            )
        elif isinstance(command, ScheduleTick):
            self._scheduler.schedule(command.delay, Tick())
        elif isinstance(command, OpenUrl):
            self._log.debug("Opening URL", url=command.url)
            self._open_url(command.url)

    def _fetch_list(self, command: FetchList) -> None:
        orchestrator = self._orchestrator
        if command.resource is Resource.INCIDENTS:
            work = partial(orchestrator.list_incidents, command.page, command.sort)
        else:
            work = partial(orchestrator.list_alerts, command.page)

        self._scheduler.dispatch(
            work,
            lambda page, exc: ListLoaded(
                resource=command.resource,
                generation=command.generation,
                page=page,
                error=error_text(exc),
            ),
        )

    def _fetch_detail(self, command: FetchDetail) -> None:
        orchestrator = self._orchestrator
        if command.resource is Resource.INCIDENTS:
            work = partial(orchestrator.get_incident_detail, command.item_id, command.version)
        else:
            work = partial(orchestrator.get_alert_detail, command.item_id, command.version)

        self._scheduler.dispatch(
            work,
            lambda record, exc: DetailLoaded(
                resource=command.resource,
                index=command.index,
                item_id=command.item_id,
                generation=command.generation,
                record=record,
                error=error_text(exc),
            ),
        )

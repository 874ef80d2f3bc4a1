"""Interactive loop: read events, reduce, execute commands, redraw."""

from __future__ import annotations

import threading
from typing import Callable, Optional

import click
from rich.console import Console, RenderableType
from rich.live import Live

from rootly_tui.debug import DebugLog
from rootly_tui.orchestrator import DataOrchestrator
from rootly_tui.tui import reducer
from rootly_tui.tui.effects import EffectRunner
from rootly_tui.tui.messages import KeyPressed
from rootly_tui.tui.render import render
from rootly_tui.tui.scheduler import AsyncCommandScheduler
from rootly_tui.tui.state import AppState

POLL_INTERVAL = 0.25

_KEY_NAMES = {
    "\t": "tab",
    "\r": "enter",
    "\n": "enter",
    "\x1b": "esc",
    "\x03": "ctrl+c",
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\xe0H": "up",
    "\xe0P": "down",
}


def key_name(raw: str) -> str:
    """Map the characters :func:`click.getchar` returns to a key name."""
    return _KEY_NAMES.get(raw, raw)


class TuiRunner:
    """Own the render thread.

    Args:
        orchestrator: Data access used by fetch units.
        log: Logging handle; its ring buffer feeds the logs panel.
        console: Console to draw on.
        tz_name: Time zone for displayed timestamps.
        read_key: Blocking key reader, replaceable in tests.
    """

    def __init__(
        self,
        orchestrator: DataOrchestrator,
        log: DebugLog,
        console: Optional[Console] = None,
        tz_name: str = "UTC",
        read_key: Callable[[], str] = click.getchar,
    ) -> None:
        self._log = log
        self._console = console or Console()
        self._tz_name = tz_name
        self._read_key = read_key
        self.state = AppState()
        self.scheduler = AsyncCommandScheduler(log)
        self.effects = EffectRunner(self.scheduler, orchestrator, log)

    def run(self) -> None:
        self._log.info("Starting interactive UI")
        self.effects.run(reducer.start(self.state))
        threading.Thread(target=self._key_loop, name="keys", daemon=True).start()

        try:
            with Live(
                self._render(),
                console=self._console,
                screen=True,
                auto_refresh=False,
                transient=True,
            ) as live:
                while not self.state.quitting:
                    event = self.scheduler.next_event(timeout=POLL_INTERVAL)
                    if event is None:
                        continue
                    self.effects.run(reducer.reduce(self.state, event))
                    live.update(self._render(), refresh=True)
        finally:
            self.scheduler.shutdown()
            self._log.info("Interactive UI stopped")

    def _render(self) -> RenderableType:
        return render(self.state, self._log.entries(), self._tz_name)

    def _key_loop(self) -> None:
        while not self.state.quitting:
            try:
                raw = self._read_key()
            except (EOFError, KeyboardInterrupt):
                self.scheduler.post(KeyPressed("ctrl+c"))
                return
            self.scheduler.post(KeyPressed(key_name(raw)))

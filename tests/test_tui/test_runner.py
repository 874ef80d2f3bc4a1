"""Tests for the interactive loop."""

from __future__ import annotations

from io import StringIO

import pytest
from rich.console import Console

from rootly_tui.client.mock import MockSource
from rootly_tui.orchestrator import DataOrchestrator
from rootly_tui.tui.messages import KeyPressed
from rootly_tui.tui.runner import TuiRunner, key_name


def _keys(*keys: str):
    pending = list(keys)

    def read_key() -> str:
        if not pending:
            raise EOFError
        return pending.pop(0)

    return read_key


@pytest.fixture()
def orchestrator(log, fixed_now) -> DataOrchestrator:
    return DataOrchestrator(MockSource(clock=lambda: fixed_now), None, None, log)


@pytest.mark.parametrize(
    "raw,name",
    [("\t", "tab"), ("\r", "enter"), ("\x1b[A", "up"), ("\x1b[B", "down"), ("\x03", "ctrl+c"), ("j", "j")],
)
def test_key_name(raw: str, name: str) -> None:
    assert key_name(raw) == name


def test_key_loop_posts_keys_then_quits_on_eof(orchestrator, log) -> None:
    runner = TuiRunner(orchestrator, log, read_key=_keys("j", "\t"))
    try:
        runner._key_loop()
        assert runner.scheduler.pending() == [
            KeyPressed("j"),
            KeyPressed("tab"),
            KeyPressed("ctrl+c"),
        ]
    finally:
        runner.scheduler.shutdown(wait=True)


def test_run_until_quit(orchestrator, log) -> None:
    console = Console(file=StringIO(), width=120)
    runner = TuiRunner(orchestrator, log, console=console, read_key=_keys("q"))
    runner.run()
    assert runner.state.quitting
    assert any("Interactive UI stopped" in line for line in log.entries())

"""Shared test fixtures for rootly-tui.

Provides isolated config environments, logging handles, a controllable
clock for cache expiry, and the CLI runner. These fixtures are discovered
by pytest and available to all test modules without explicit imports.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from rootly_tui.debug import DebugLog
from rootly_tui.models import Config, RequestConfig


# ---------------------------------------------------------------------------
# Logging and time
# ---------------------------------------------------------------------------


@pytest.fixture
def log() -> DebugLog:
    """A throwaway logging handle with only the ring buffer attached."""
    handle = DebugLog(name="test")
    yield handle
    handle.close()


class FakeClock:
    """Manually advanced replacement for :func:`time.time`."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fixed_now() -> datetime:
    """Reference time for sample data."""
    return datetime(2024, 6, 10, 12, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME, XDG_CACHE_HOME, and XDG_DATA_HOME to
    subdirectories of tmp_path so that tests never touch real user
    config, and clears the ROOTLY_* environment variables.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("rootly_tui.config._is_xdg_platform", lambda: True)

    for var in ["ROOTLY_API_KEY", "ROOTLY_ENDPOINT"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def api_config() -> Config:
    """A valid config pointing at a fake host, with retries disabled."""
    return Config(
        api_key="test-key",
        endpoint="api.example.com",
        request=RequestConfig(timeout=5, max_retries=0),
    )


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner.

    Returns a CliRunner instance that captures stdout/stderr and
    provides a consistent interface for invoking Typer apps in tests.
    """
    from typer.testing import CliRunner

    return CliRunner()

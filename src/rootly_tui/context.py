"""Per-invocation objects shared by every command.

The root callback builds one :class:`AppContext` and stores it as
``ctx.obj``; commands fetch it with :func:`get_app_context`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import typer

from rootly_tui.cache import open_cache_tiers
from rootly_tui.client import MockSource, RemoteSource, RootlyClient
from rootly_tui.config import get_cache_dir, resolve_config
from rootly_tui.debug import DebugLog
from rootly_tui.exceptions import ConfigError
from rootly_tui.models import Config
from rootly_tui.orchestrator import DataOrchestrator
from rootly_tui.output import OutputManager


@dataclass
class AppContext:
    output: OutputManager
    log: DebugLog
    mock: bool = False

    def load_config_unchecked(self) -> Config:
        """Resolve the effective config without requiring credentials."""
        return resolve_config()

    def load_config(self) -> Config:
        """Resolve the effective config, requiring credentials unless in mock mode.

        Raises:
            ConfigError: If no API key or endpoint is configured.
        """
        config = self.load_config_unchecked()
        if not self.mock and not config.is_valid():
            raise ConfigError(
                "No API key configured. Run 'rootly-tui config init' or set ROOTLY_API_KEY."
            )
        return config

    def open_source(self, config: Config) -> RemoteSource:
        if self.mock:
            self.log.info("Using mock data")
            return MockSource()
        return RootlyClient(config, self.log)

    def open_orchestrator(self, config: Optional[Config] = None) -> DataOrchestrator:
        """Build the data orchestrator with its cache tiers.

        The caller owns the result and must call ``close()`` on it.
        """
        config = config or self.load_config()
        list_cache, detail_cache = open_cache_tiers(config.cache, get_cache_dir(), self.log)
        return DataOrchestrator(
            self.open_source(config),
            list_cache,
            detail_cache,
            self.log,
            page_size=config.page_size,
        )


def get_app_context(ctx: typer.Context) -> AppContext:
    """Return the :class:`AppContext` installed by the root callback."""
    obj = ctx.find_root().obj
    if not isinstance(obj, AppContext):
        raise RuntimeError("AppContext not initialised")
    return obj

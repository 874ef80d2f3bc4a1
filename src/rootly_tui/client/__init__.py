"""Remote data sources: the Rootly HTTP client and an offline mock."""

from rootly_tui.client.mock import MockSource
from rootly_tui.client.rootly_client import RootlyClient
from rootly_tui.client.source import RemoteSource

__all__ = ["MockSource", "RemoteSource", "RootlyClient"]

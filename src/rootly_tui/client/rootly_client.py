"""HTTP client for the Rootly REST API.

This module provides :class:`RootlyClient`, a blocking client over
:class:`httpx.Client` that implements
:class:`~rootly_tui.client.source.RemoteSource`. It layers on:

- **Auth** -- ``Authorization: Bearer <key>`` on every request.
- **Retry with backoff** -- retries on 5xx and network errors with
  exponential delay (1 s, 2 s, 4 s, ...).
- **Error mapping** -- non-success statuses become typed
  :class:`~rootly_tui.exceptions.RootlyTuiError` subclasses.
- **Decoding** -- JSON:API documents become domain records via
  :mod:`rootly_tui.client.decode`.

The underlying :class:`httpx.Client` is thread-safe, so one instance serves
every worker thread of the TUI.
"""

from __future__ import annotations

import time
from typing import Any, Optional

import httpx

from rootly_tui import __version__
from rootly_tui.client import decode
from rootly_tui.debug import DebugLog, pretty_json
from rootly_tui.exceptions import (
    AuthError,
    ConnectionError_,
    DecodeError,
    NotFoundError,
    ServerError,
)
from rootly_tui.models import Alert, AlertPage, Config, Incident, IncidentPage

JSONAPI_CONTENT_TYPE = "application/vnd.api+json"

INCIDENT_INCLUDES = "roles,causes,incident_types,environments,services,groups"
"""Related resources requested with an incident detail."""


class RootlyClient:
    """Blocking Rootly API client.

    Args:
        config: Effective configuration (API key, endpoint, request settings).
        log: Logging handle for request/response tracing.
        transport: Optional :class:`httpx.BaseTransport`, used by tests to
            substitute :class:`httpx.MockTransport`.

    Example::

        with RootlyClient(config, log) as client:
            page = client.list_incidents(page=1, page_size=25, sort="-created_at")
    """

    def __init__(
        self,
        config: Config,
        log: DebugLog,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._config = config
        self._log = log
        self._client = httpx.Client(
            base_url=config.base_url,
            timeout=config.request.timeout,
            verify=config.request.verify_ssl,
            follow_redirects=True,
            transport=transport,
            headers={
                "Authorization": f"Bearer {config.api_key}",
                "Content-Type": JSONAPI_CONTENT_TYPE,
                "Accept": JSONAPI_CONTENT_TYPE,
                "User-Agent": f"rootly-tui/{__version__}",
            },
        )
        log.debug("Creating API client", endpoint=config.base_url)

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> RootlyClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    # ------------------------------------------------------------------ #
    # RemoteSource
    # ------------------------------------------------------------------ #

    def list_incidents(self, page: int, page_size: int, sort: str = "") -> IncidentPage:
        params: dict[str, Any] = {"page[number]": page, "page[size]": page_size}
        if sort:
            params["sort"] = sort
        payload = self._get_json("/v1/incidents", params)
        result = decode.decode_incident_page(payload, requested_page=page)
        self._log.debug("Parsed incidents", count=len(result.items), page=page)
        return result

    def list_alerts(self, page: int, page_size: int) -> AlertPage:
        params = {"page[number]": page, "page[size]": page_size}
        payload = self._get_json("/v1/alerts", params)
        result = decode.decode_alert_page(payload, requested_page=page)
        self._log.debug("Parsed alerts", count=len(result.items), page=page)
        return result

    def get_incident(self, incident_id: str) -> Incident:
        payload = self._get_json(
            f"/v1/incidents/{incident_id}", {"include": INCIDENT_INCLUDES}
        )
        return decode.decode_incident(payload)

    def get_alert(self, alert_id: str) -> Alert:
        payload = self._get_json(f"/v1/alerts/{alert_id}", {})
        return decode.decode_alert(payload)

    def validate_api_key(self) -> None:
        """Make a one-item list call to check the key.

        Raises:
            AuthError: If the key is rejected.
            RootlyTuiError: For any other failure.
        """
        self._get_json("/v1/incidents", {"page[size]": 1})
        self._log.info("API key validated", endpoint=self._config.base_url)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _get_json(self, path: str, params: dict[str, Any]) -> Any:
        response = self._execute_with_retry("GET", path, params)
        self._log.debug(
            "API response",
            path=path,
            status=response.status_code,
            bodyLength=len(response.content),
        )
        self._map_response_error(response)
        try:
            return response.json()
        except ValueError as exc:
            self._log.error("Failed to parse response", path=path, body=pretty_json(response.content))
            raise DecodeError(f"Failed to parse response from {path}: {exc}") from exc

    def _execute_with_retry(
        self,
        method: str,
        path: str,
        params: dict[str, Any],
    ) -> httpx.Response:
        """Execute the HTTP request with exponential-backoff retry.

        Retries on 5xx status codes and connection / timeout errors up to
        ``max_retries`` times. The delay doubles each attempt: 1 s, 2 s, 4 s, ...
        """
        max_retries = self._config.request.max_retries

        for attempt in range(max_retries + 1):
            try:
                self._log.debug("API request", method=method, path=path, params=params)
                response = self._client.request(method, path, params=params)

                if response.status_code >= 500 and attempt < max_retries:
                    delay = 2 ** attempt
                    self._log.warning(
                        f"Server error {response.status_code}, retrying in {delay}s "
                        f"(attempt {attempt + 1}/{max_retries})"
                    )
                    time.sleep(delay)
                    continue

                return response

            except (httpx.ConnectError, httpx.TimeoutException, httpx.NetworkError) as exc:
                if attempt < max_retries:
                    delay = 2 ** attempt
                    self._log.warning(
                        f"Connection error: {exc}, retrying in {delay}s "
                        f"(attempt {attempt + 1}/{max_retries})"
                    )
                    time.sleep(delay)
                    continue
                self._log.error("Request failed", method=method, path=path, error=exc)
                raise ConnectionError_(
                    f"Connection failed after {max_retries + 1} attempts: {exc}"
                ) from exc

        raise ServerError("Request failed after all retries")  # pragma: no cover

    def _map_response_error(self, response: httpx.Response) -> None:
        """Raise a typed exception for error HTTP status codes."""
        status = response.status_code
        if status < 400:
            return

        msg = _error_message(response)
        full_msg = f"HTTP {status}: {msg}" if msg else f"HTTP {status}"
        self._log.error("API error", status=status, body=pretty_json(response.content))

        if status in (401, 403):
            raise AuthError(full_msg)
        if status == 404:
            raise NotFoundError(full_msg)
        raise ServerError(full_msg)


def _error_message(response: httpx.Response) -> str:
    """Pull a message out of a JSON:API ``errors`` array or a plain error body."""
    try:
        detail = response.json()
    except ValueError:
        return response.text[:200] if response.text else ""
    if isinstance(detail, dict):
        errors = detail.get("errors")
        if isinstance(errors, list) and errors and isinstance(errors[0], dict):
            first = errors[0]
            return str(first.get("detail") or first.get("title") or "")
        return str(detail.get("message") or detail.get("error") or "")
    return str(detail)

"""Tests for the Rootly HTTP client."""

from __future__ import annotations

from typing import Any
from unittest.mock import patch

import httpx
import pytest

from rootly_tui.client.rootly_client import INCIDENT_INCLUDES, RootlyClient
from rootly_tui.exceptions import (
    AuthError,
    ConnectionError_,
    DecodeError,
    NotFoundError,
    ServerError,
)
from rootly_tui.models import Config, RequestConfig


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _json_response(data: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(
        status_code=status_code,
        headers={"content-type": "application/vnd.api+json"},
        json=data,
    )


def _incidents_doc() -> dict:
    return {
        "data": [
            {
                "id": "abc",
                "attributes": {
                    "sequential_id": 7,
                    "title": "Down",
                    "updated_at": "2024-06-10T12:00:00Z",
                },
            }
        ],
        "meta": {"current_page": 1, "next_page": 2, "prev_page": None},
    }


class Recorder:
    """MockTransport handler that records requests and replays responses."""

    def __init__(self, *responses: Any) -> None:
        self._responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self._responses.pop(0) if len(self._responses) > 1 else self._responses[0]
        if isinstance(response, Exception):
            raise response
        return response


def _client(config: Config, log, handler) -> RootlyClient:
    return RootlyClient(config, log, transport=httpx.MockTransport(handler))


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class TestRequests:
    def test_list_incidents_params_and_headers(self, api_config, log) -> None:
        handler = Recorder(_json_response(_incidents_doc()))
        with _client(api_config, log, handler) as client:
            page = client.list_incidents(page=2, page_size=25, sort="-created_at")

        request = handler.requests[0]
        assert request.url.host == "api.example.com"
        assert request.url.scheme == "https"
        assert request.url.path == "/v1/incidents"
        assert request.url.params["page[number]"] == "2"
        assert request.url.params["page[size]"] == "25"
        assert request.url.params["sort"] == "-created_at"
        assert request.headers["Authorization"] == "Bearer test-key"
        assert request.headers["Content-Type"] == "application/vnd.api+json"
        assert page.items[0].sequential_id == "INC-7"
        assert page.pagination.has_next

    def test_sort_omitted_when_empty(self, api_config, log) -> None:
        handler = Recorder(_json_response(_incidents_doc()))
        with _client(api_config, log, handler) as client:
            client.list_incidents(page=1, page_size=10)
        assert "sort" not in handler.requests[0].url.params

    def test_list_alerts(self, api_config, log) -> None:
        doc = {"data": [{"id": "a1", "attributes": {"short_id": "ALT-1"}}], "meta": {}}
        handler = Recorder(_json_response(doc))
        with _client(api_config, log, handler) as client:
            page = client.list_alerts(page=1, page_size=10)
        assert handler.requests[0].url.path == "/v1/alerts"
        assert page.items[0].short_id == "ALT-1"

    def test_get_incident_requests_includes(self, api_config, log) -> None:
        handler = Recorder(_json_response({"data": {"id": "abc", "attributes": {"title": "Down"}}}))
        with _client(api_config, log, handler) as client:
            incident = client.get_incident("abc")
        request = handler.requests[0]
        assert request.url.path == "/v1/incidents/abc"
        assert request.url.params["include"] == INCIDENT_INCLUDES
        assert incident.detail_loaded

    def test_get_alert(self, api_config, log) -> None:
        handler = Recorder(_json_response({"data": {"id": "a1", "attributes": {"summary": "CPU"}}}))
        with _client(api_config, log, handler) as client:
            alert = client.get_alert("a1")
        assert handler.requests[0].url.path == "/v1/alerts/a1"
        assert alert.summary == "CPU"

    def test_explicit_scheme_kept(self, log) -> None:
        config = Config(api_key="k", endpoint="http://localhost:8080/", request=RequestConfig(max_retries=0))
        handler = Recorder(_json_response(_incidents_doc()))
        with _client(config, log, handler) as client:
            client.list_incidents(1, 5)
        assert str(handler.requests[0].url).startswith("http://localhost:8080/v1/incidents")

    def test_validate_api_key(self, api_config, log) -> None:
        handler = Recorder(_json_response(_incidents_doc()))
        with _client(api_config, log, handler) as client:
            client.validate_api_key()
        assert handler.requests[0].url.params["page[size]"] == "1"


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------


class TestErrors:
    @pytest.mark.parametrize(
        "status,exc_type",
        [(401, AuthError), (403, AuthError), (404, NotFoundError), (422, ServerError), (500, ServerError)],
    )
    def test_status_mapping(self, api_config, log, status, exc_type) -> None:
        handler = Recorder(_json_response({"errors": [{"title": "Nope", "detail": "Bad thing"}]}, status))
        with _client(api_config, log, handler) as client:
            with pytest.raises(exc_type, match=f"HTTP {status}: Bad thing"):
                client.list_alerts(1, 10)

    def test_validate_rejected_key(self, api_config, log) -> None:
        handler = Recorder(_json_response({"errors": [{"title": "Unauthorized"}]}, 401))
        with _client(api_config, log, handler) as client:
            with pytest.raises(AuthError):
                client.validate_api_key()

    def test_invalid_json(self, api_config, log) -> None:
        handler = Recorder(httpx.Response(200, content=b"<html>oops</html>"))
        with _client(api_config, log, handler) as client:
            with pytest.raises(DecodeError):
                client.list_incidents(1, 10)

    def test_unexpected_document(self, api_config, log) -> None:
        handler = Recorder(_json_response({"nothing": True}))
        with _client(api_config, log, handler) as client:
            with pytest.raises(DecodeError):
                client.list_incidents(1, 10)

    def test_exit_codes(self) -> None:
        assert AuthError("x").exit_code == 3
        assert NotFoundError("x").exit_code == 4
        assert ServerError("x").exit_code == 5
        assert ConnectionError_("x").exit_code == 6
        assert DecodeError("x").exit_code == 7


# ---------------------------------------------------------------------------
# Retry
# ---------------------------------------------------------------------------


class TestRetry:
    @patch("rootly_tui.client.rootly_client.time.sleep")
    def test_retries_server_error_then_succeeds(self, mock_sleep, log) -> None:
        config = Config(api_key="k", request=RequestConfig(max_retries=2))
        handler = Recorder(_json_response({}, 503), _json_response(_incidents_doc()))
        with _client(config, log, handler) as client:
            page = client.list_incidents(1, 10)
        assert len(handler.requests) == 2
        assert page.items[0].id == "abc"
        mock_sleep.assert_called_once_with(1)

    @patch("rootly_tui.client.rootly_client.time.sleep")
    def test_server_error_after_retries(self, mock_sleep, log) -> None:
        config = Config(api_key="k", request=RequestConfig(max_retries=2))
        handler = Recorder(_json_response({}, 502))
        with _client(config, log, handler) as client:
            with pytest.raises(ServerError):
                client.list_incidents(1, 10)
        assert len(handler.requests) == 3
        assert [c.args[0] for c in mock_sleep.call_args_list] == [1, 2]

    @patch("rootly_tui.client.rootly_client.time.sleep")
    def test_connection_error_after_retries(self, mock_sleep, log) -> None:
        config = Config(api_key="k", request=RequestConfig(max_retries=1))
        handler = Recorder(httpx.ConnectError("refused"))
        with _client(config, log, handler) as client:
            with pytest.raises(ConnectionError_, match="after 2 attempts"):
                client.list_alerts(1, 10)
        assert len(handler.requests) == 2

    @patch("rootly_tui.client.rootly_client.time.sleep")
    def test_client_error_not_retried(self, mock_sleep, log) -> None:
        config = Config(api_key="k", request=RequestConfig(max_retries=3))
        handler = Recorder(_json_response({}, 404))
        with _client(config, log, handler) as client:
            with pytest.raises(NotFoundError):
                client.get_alert("missing")
        assert len(handler.requests) == 1
        mock_sleep.assert_not_called()

"""
Webflow Connector Tests

Validates the HTTP layer without network access:
1. Error mapping and retry behavior of WebflowApiClient.request
2. Pagination stops on a short page
3. Direct and proxy request shapes
4. Server-side proxy path rewriting and response relay
"""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from connectors.webflow import (
    RetryConfig,
    WebflowApiClient,
    WebflowApiConfig,
    WebflowApiError,
    WebflowAuthenticationError,
    WebflowConfigurationError,
    WebflowNotFoundError,
    WebflowRateLimitError,
    WebflowValidationError,
    build_api_path,
    forward_proxy_request,
)
from connectors.webflow.client import endpoint_label, parse_retry_after
from core.config import Settings


class FakeResponse:
    def __init__(self, status=200, body="", headers=None):
        self.status = status
        self._body = body if isinstance(body, str) else json.dumps(body)
        self.headers = headers or {}

    async def text(self):
        return self._body


class FakeRequestContext:
    """Stands in for the object aiohttp's session.request() returns."""

    def __init__(self, response):
        self.response = response

    async def __aenter__(self):
        return self.response

    async def __aexit__(self, exc_type, exc, tb):
        return False


def make_client(max_retries=2, **kwargs):
    kwargs.setdefault("api_token", "token-123")
    client = WebflowApiClient(
        "site-1",
        api_config=WebflowApiConfig(retry_config=RetryConfig(max_retries=max_retries, base_delay=0.0)),
        **kwargs,
    )
    client._session = MagicMock()
    return client


def responses(*items):
    """AsyncMock for _send returning (status, headers, body) tuples in order."""
    side_effect = []
    for entry in items:
        if isinstance(entry, Exception):
            side_effect.append(entry)
            continue
        status, body = entry[0], entry[1]
        headers = entry[2] if len(entry) > 2 else {}
        side_effect.append((status, headers, body if isinstance(body, str) else json.dumps(body)))
    return AsyncMock(side_effect=side_effect)


# =============================================================================
# Helpers and Configuration
# =============================================================================

class TestHelpers:
    """Small pure helpers."""

    def test_retry_delay_backoff(self):
        config = RetryConfig(base_delay=1.0, max_delay=60.0)
        assert config.get_delay(0) == 1.0
        assert config.get_delay(1) == 2.0
        assert config.get_delay(3) == 8.0
        assert config.get_delay(10) == 60.0

    def test_parse_retry_after(self):
        assert parse_retry_after("5") == 5
        assert parse_retry_after("2.5") == 2
        assert parse_retry_after(None) == 60
        assert parse_retry_after("Wed, 21 Oct 2026 07:28:00 GMT") == 60

    def test_endpoint_label_masks_ids(self):
        assert endpoint_label("get", "collections/abc123/items") == "GET collections/{id}/items"
        assert endpoint_label("GET", "sites/site-1/collections") == "GET sites/{id}/collections"

    def test_headers_direct_mode(self):
        headers = WebflowApiClient("site-1", api_token="tok")._get_headers()
        assert headers["Authorization"] == "Bearer tok"
        assert headers["accept-version"] == "1.0.0"

    def test_headers_proxy_mode_carry_no_token(self):
        client = WebflowApiClient("site-1", api_token="tok", api_endpoint="https://proxy.example/api")
        assert client.use_proxy
        assert "Authorization" not in client._get_headers()

    def test_from_settings(self):
        settings = Settings(
            webflow_api_token="tok",
            webflow_site_id="site-env",
            timeout_seconds=5,
            max_retries=7,
        )
        client = WebflowApiClient.from_settings(settings)
        assert client.site_id == "site-env"
        assert client.api_config.timeout_seconds == 5
        assert client.api_config.retry_config.max_retries == 7

        assert WebflowApiClient.from_settings(settings, site_id="other").site_id == "other"

    def test_connect_requires_token_or_endpoint(self):
        client = WebflowApiClient("site-1")
        with pytest.raises(WebflowConfigurationError):
            asyncio.run(client.connect())

    def test_request_requires_connection(self):
        client = WebflowApiClient("site-1", api_token="tok")
        with pytest.raises(WebflowApiError, match="Not connected"):
            asyncio.run(client.request("GET", "sites/site-1/collections"))


# =============================================================================
# Request Error Handling
# =============================================================================

class TestRequestErrors:
    """Status code mapping and retries."""

    def test_success_returns_json(self):
        client = make_client()
        client._send = responses((200, {"collections": []}))
        assert asyncio.run(client.request("GET", "sites/site-1/collections")) == {"collections": []}

    def test_no_content(self):
        client = make_client()
        client._send = responses((204, ""))
        assert asyncio.run(client.request("DELETE", "collections/c1/items/i1")) == {}

    def test_server_error_retried(self):
        client = make_client()
        client._send = responses((503, "busy"), (200, {"ok": True}))
        assert asyncio.run(client.request("GET", "collections/c1")) == {"ok": True}
        assert client._send.await_count == 2

    def test_server_error_exhausts_retries(self):
        client = make_client(max_retries=2)
        client._send = responses((500, "boom"), (500, "boom"), (500, "boom"))
        with pytest.raises(WebflowApiError) as exc:
            asyncio.run(client.request("GET", "collections/c1"))
        assert exc.value.status_code == 500
        assert client._send.await_count == 3

    def test_transport_error_retried(self):
        client = make_client()
        client._send = responses(aiohttp.ClientConnectionError("reset"), (200, {"ok": True}))
        assert asyncio.run(client.request("GET", "collections/c1")) == {"ok": True}

    def test_timeout_exhausts_retries(self):
        client = make_client(max_retries=1)
        client._send = responses(asyncio.TimeoutError(), asyncio.TimeoutError())
        with pytest.raises(WebflowApiError, match="after 1 retries"):
            asyncio.run(client.request("GET", "collections/c1"))

    def test_rate_limit_waits_then_succeeds(self):
        client = make_client()
        client._send = responses((429, "slow down", {"retry-after": "0"}), (200, {"ok": True}))
        assert asyncio.run(client.request("GET", "collections/c1")) == {"ok": True}

    def test_rate_limit_exhausted(self):
        client = make_client(max_retries=1)
        client._send = responses(
            (429, "slow down", {"retry-after": "0"}),
            (429, "slow down", {"retry-after": "0"}),
        )
        with pytest.raises(WebflowRateLimitError) as exc:
            asyncio.run(client.request("GET", "collections/c1"))
        assert exc.value.status_code == 429
        assert exc.value.retry_after == 0

    @pytest.mark.parametrize("status,error_type", [
        (401, WebflowAuthenticationError),
        (403, WebflowAuthenticationError),
        (404, WebflowNotFoundError),
        (400, WebflowValidationError),
        (409, WebflowApiError),
    ])
    def test_client_errors_not_retried(self, status, error_type):
        client = make_client()
        client._send = responses((status, '{"message": "nope"}'))
        with pytest.raises(error_type) as exc:
            asyncio.run(client.request("GET", "collections/c1"))
        assert exc.value.status_code == status
        assert exc.value.response_body == '{"message": "nope"}'
        assert client._send.await_count == 1

    def test_invalid_json(self):
        client = make_client()
        client._send = responses((200, "<html>"))
        with pytest.raises(WebflowApiError, match="Invalid JSON"):
            asyncio.run(client.request("GET", "collections/c1"))


# =============================================================================
# API Methods and Pagination
# =============================================================================

class TestApiMethods:
    """Endpoint paths and pagination."""

    def test_list_collections(self):
        client = make_client()
        client.request = AsyncMock(return_value={"collections": [{"id": "c1"}]})
        assert asyncio.run(client.list_collections()) == [{"id": "c1"}]
        client.request.assert_awaited_once_with("GET", "sites/site-1/collections")

    def test_list_collections_missing_key(self):
        client = make_client()
        client.request = AsyncMock(return_value={})
        assert asyncio.run(client.list_collections()) == []

    def test_get_collection(self):
        client = make_client()
        client.request = AsyncMock(return_value={"id": "c1", "fields": []})
        asyncio.run(client.get_collection("c1"))
        client.request.assert_awaited_once_with("GET", "collections/c1")

    def test_list_collection_items_params(self):
        client = make_client()
        client.request = AsyncMock(return_value={"items": []})
        asyncio.run(client.list_collection_items("c1", offset=200))
        client.request.assert_awaited_once_with(
            "GET", "collections/c1/items", params={"limit": 100, "offset": 200}
        )

    def test_pagination_stops_on_short_page(self):
        client = make_client()
        client.list_collection_items = AsyncMock(side_effect=[
            {"items": [{"id": "1"}, {"id": "2"}]},
            {"items": [{"id": "3"}, {"id": "4"}]},
            {"items": [{"id": "5"}]},
        ])
        items = asyncio.run(client.fetch_all_collection_items("c1", page_size=2))

        assert [i["id"] for i in items] == ["1", "2", "3", "4", "5"]
        offsets = [call.kwargs["offset"] for call in client.list_collection_items.await_args_list]
        assert offsets == [0, 2, 4]

    def test_pagination_exact_multiple(self):
        client = make_client()
        client.list_collection_items = AsyncMock(side_effect=[
            {"items": [{"id": "1"}, {"id": "2"}]},
            {"items": []},
        ])
        items = asyncio.run(client.fetch_all_collection_items("c1", page_size=2))
        assert len(items) == 2
        assert client.list_collection_items.await_count == 2


# =============================================================================
# Request Shapes
# =============================================================================

class TestRequestShapes:
    """What actually goes over the wire."""

    def test_direct_get_sends_query_string(self):
        client = make_client()
        client._session.request = MagicMock(
            return_value=FakeRequestContext(FakeResponse(200, {"items": []}, {"Retry-After": "1"}))
        )
        status, headers, body = asyncio.run(
            client._send("GET", "collections/c1/items", {"limit": 100, "offset": 0})
        )

        assert status == 200
        assert headers == {"retry-after": "1"}
        args, kwargs = client._session.request.call_args
        assert args == ("GET", "https://api.webflow.com/v2/collections/c1/items")
        assert kwargs["params"] == {"limit": "100", "offset": "0"}
        assert kwargs["json"] is None

    def test_direct_post_sends_json_body(self):
        client = make_client()
        client._session.request = MagicMock(return_value=FakeRequestContext(FakeResponse(200, {})))
        asyncio.run(client._send("POST", "collections/c1/items", {"fieldData": {"name": "x"}}))

        kwargs = client._session.request.call_args.kwargs
        assert kwargs["params"] is None
        assert kwargs["json"] == {"fieldData": {"name": "x"}}

    def test_proxy_mode_posts_envelope(self):
        client = make_client(api_token=None, api_endpoint="https://proxy.example/api/webflow-proxy")
        client._session.post = MagicMock(return_value=FakeRequestContext(FakeResponse(200, {"items": []})))
        asyncio.run(client._send("GET", "collections/c1/items", {"limit": 100, "offset": 0}))

        args, kwargs = client._session.post.call_args
        assert args == ("https://proxy.example/api/webflow-proxy",)
        assert kwargs["json"] == {
            "siteId": "site-1",
            "method": "GET",
            "path": "collections/c1/items",
            "params": {"limit": 100, "offset": 0},
        }


# =============================================================================
# Server-side Proxy
# =============================================================================

class TestProxy:
    """Path rewriting and relay of the upstream response."""

    @pytest.mark.parametrize("path,expected", [
        ("collections", "sites/site-1/collections"),
        ("custom_code", "sites/site-1/custom_code"),
        ("sites/other/collections", "sites/other/collections"),
        ("collections/c1/items", "collections/c1/items"),
    ])
    def test_build_api_path(self, path, expected):
        assert build_api_path("site-1", path) == expected

    def _session(self, response):
        session = MagicMock()
        session.request = MagicMock(return_value=FakeRequestContext(response))
        return session

    def test_get_relays_status_and_body(self):
        session = self._session(FakeResponse(200, {"collections": [{"id": "c1"}]}))
        result = asyncio.run(forward_proxy_request(
            "tok", "site-1", "collections", params={"limit": 10}, session=session,
        ))

        assert result.status_code == 200
        assert result.body == {"collections": [{"id": "c1"}]}
        args, kwargs = session.request.call_args
        assert args == ("GET", "https://api.webflow.com/v2/sites/site-1/collections")
        assert kwargs["params"] == {"limit": "10"}
        assert kwargs["headers"]["Authorization"] == "Bearer tok"

    def test_non_get_sends_body(self):
        session = self._session(FakeResponse(201, {"id": "i1"}))
        result = asyncio.run(forward_proxy_request(
            "tok", "site-1", "collections/c1/items", method="post",
            params={"fieldData": {}}, session=session,
        ))

        assert result.status_code == 201
        args, kwargs = session.request.call_args
        assert args[0] == "POST"
        assert kwargs["json"] == {"fieldData": {}}
        assert kwargs["params"] is None

    def test_upstream_error_relayed(self):
        session = self._session(FakeResponse(404, {"message": "Collection not found"}))
        result = asyncio.run(forward_proxy_request("tok", "site-1", "collections/missing", session=session))
        assert result.status_code == 404
        assert result.body == {"message": "Collection not found"}

    def test_invalid_json_replaced(self):
        session = self._session(FakeResponse(502, "<html>bad gateway</html>"))
        result = asyncio.run(forward_proxy_request("tok", "site-1", "collections", session=session))
        assert result.status_code == 502
        assert result.body == {"error": "Invalid JSON response"}

    def test_shared_session_not_closed(self):
        session = self._session(FakeResponse(200, {}))
        session.close = AsyncMock()
        asyncio.run(forward_proxy_request("tok", "site-1", "collections", session=session))
        session.close.assert_not_awaited()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

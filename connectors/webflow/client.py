"""Webflow Data API HTTP Client.

Low-level HTTP client for Webflow CMS API v2 calls.
Handles authentication headers, proxy forwarding, pagination, retries, and
error handling.

Two modes:
- Direct: requests go to the Webflow API with a bearer token (server side)
- Proxy: requests are POSTed as {siteId, method, path, params} to a proxy
  endpoint that holds the token (see connectors/webflow/proxy.py)
"""

from typing import Any, Dict, List, Optional, Tuple
from dataclasses import dataclass, field
import json
import asyncio
import logging

import aiohttp

from core.config import WEBFLOW_API_BASE
from core.observability.metrics import record_request, record_request_retry

logger = logging.getLogger(__name__)


class WebflowApiError(Exception):
    """Base exception for Webflow API errors."""
    def __init__(self, message: str, status_code: int = 0, response_body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class WebflowAuthenticationError(WebflowApiError):
    """Authentication failed (401/403)."""
    pass


class WebflowNotFoundError(WebflowApiError):
    """Resource not found (404)."""
    pass


class WebflowRateLimitError(WebflowApiError):
    """Rate limit exceeded (429)."""
    def __init__(self, message: str, retry_after: int = 60):
        super().__init__(message, 429)
        self.retry_after = retry_after


class WebflowValidationError(WebflowApiError):
    """Request rejected by Webflow (400)."""
    pass


class WebflowConfigurationError(WebflowApiError):
    """Neither a proxy endpoint nor an API token is configured."""
    pass


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""
    max_retries: int = 3
    base_delay: float = 1.0  # seconds
    max_delay: float = 60.0  # seconds
    exponential_base: float = 2.0
    retry_on_status: Tuple[int, ...] = (429, 500, 502, 503, 504)

    def get_delay(self, attempt: int) -> float:
        """Calculate delay for retry attempt (exponential backoff)."""
        delay = self.base_delay * (self.exponential_base ** attempt)
        return min(delay, self.max_delay)


@dataclass
class WebflowApiConfig:
    """Configuration for the Webflow API client."""
    base_url: str = WEBFLOW_API_BASE
    api_version_header: str = "1.0.0"
    page_size: int = 100
    retry_config: RetryConfig = field(default_factory=RetryConfig)
    timeout_seconds: int = 30

    def get_url(self, path: str) -> str:
        """Full API URL for a path relative to /v2."""
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"


def endpoint_label(method: str, path: str) -> str:
    """Metrics label for a request with resource ids masked.

    Webflow v2 paths alternate resource and id segments, so every odd
    segment is an id: ``collections/abc/items`` -> ``collections/{id}/items``.
    """
    parts = path.strip("/").split("/")
    masked = ["{id}" if i % 2 else part for i, part in enumerate(parts)]
    return f"{method.upper()} {'/'.join(masked)}"


def parse_retry_after(value: Optional[str], default: int = 60) -> int:
    """Seconds from a Retry-After header; falls back to ``default``."""
    if not value:
        return default
    try:
        return max(0, int(float(value)))
    except ValueError:
        return default


class WebflowApiClient:
    """HTTP client for the Webflow CMS API.

    Provides:
    - Direct (token) or proxied API calls
    - Automatic pagination of collection items
    - Error handling and retries

    Usage:
        async with WebflowApiClient(site_id, api_token=token) as client:
            collections = await client.list_collections()
            items = await client.fetch_all_collection_items(collections[0]["id"])
    """

    def __init__(
        self,
        site_id: str,
        api_token: Optional[str] = None,
        api_endpoint: Optional[str] = None,
        api_config: Optional[WebflowApiConfig] = None,
    ):
        """Initialize API client.

        Args:
            site_id: Webflow site ID
            api_token: Webflow API token (direct mode)
            api_endpoint: Proxy endpoint URL (proxy mode, takes precedence)
            api_config: API configuration
        """
        self.site_id = site_id
        self.api_token = api_token
        self.api_endpoint = api_endpoint
        self.api_config = api_config or WebflowApiConfig()
        self._session: Optional[aiohttp.ClientSession] = None

    @classmethod
    def from_settings(cls, settings, site_id: Optional[str] = None) -> "WebflowApiClient":
        """Build a client from application Settings."""
        return cls(
            site_id=site_id or settings.webflow_site_id,
            api_token=settings.webflow_api_token,
            api_endpoint=settings.webflow_api_endpoint,
            api_config=WebflowApiConfig(
                base_url=settings.webflow_api_base,
                timeout_seconds=settings.timeout_seconds,
                retry_config=RetryConfig(max_retries=settings.max_retries),
            ),
        )

    @property
    def use_proxy(self) -> bool:
        return bool(self.api_endpoint)

    async def connect(self) -> None:
        """Initialize HTTP session."""
        if not self.use_proxy and not self.api_token:
            raise WebflowConfigurationError(
                "No API endpoint or token provided. Configure an API endpoint or token."
            )
        if self._session is None:
            self._session = aiohttp.ClientSession()

    async def disconnect(self) -> None:
        """Close HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "WebflowApiClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.disconnect()

    def _get_headers(self) -> Dict[str, str]:
        """Get headers for API requests."""
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if not self.use_proxy:
            headers["Authorization"] = f"Bearer {self.api_token}"
            headers["accept-version"] = self.api_config.api_version_header
        return headers

    async def _send(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Tuple[int, Dict[str, str], str]:
        """Perform one HTTP exchange and return (status, headers, body).

        Header names are lowercased.
        """
        timeout = aiohttp.ClientTimeout(total=self.api_config.timeout_seconds)

        if self.use_proxy:
            payload = {
                "siteId": self.site_id,
                "method": method,
                "path": path,
                "params": params or {},
            }
            request = self._session.post(
                self.api_endpoint,
                headers=self._get_headers(),
                json=payload,
                timeout=timeout,
            )
        else:
            query = None
            body = None
            if params and method.upper() == "GET":
                query = {k: str(v) for k, v in params.items()}
            elif params:
                body = params
            request = self._session.request(
                method,
                self.api_config.get_url(path),
                headers=self._get_headers(),
                params=query,
                json=body,
                timeout=timeout,
            )

        async with request as response:
            text = await response.text()
            return response.status, {k.lower(): v for k, v in response.headers.items()}, text

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Make an API request with automatic retries.

        Args:
            method: HTTP method
            path: API path relative to /v2 (e.g. "collections/abc/items")
            params: Query parameters (GET) or JSON body (other methods)

        Returns:
            Response JSON

        Raises:
            WebflowAuthenticationError: Authentication failed
            WebflowNotFoundError: Resource not found
            WebflowRateLimitError: Rate limit exceeded
            WebflowValidationError: Validation error
            WebflowApiError: Other API errors
        """
        if not self._session:
            raise WebflowApiError("Not connected. Call connect() first.")

        endpoint = endpoint_label(method, path)
        retry_config = self.api_config.retry_config
        last_error: Optional[Exception] = None

        for attempt in range(retry_config.max_retries + 1):
            try:
                status, headers, response_text = await self._send(method, path, params)
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                last_error = e
                if attempt < retry_config.max_retries:
                    delay = retry_config.get_delay(attempt)
                    logger.warning(
                        f"Request failed with {type(e).__name__}: {e}, "
                        f"retrying in {delay:.1f}s"
                    )
                    record_request_retry(endpoint)
                    await asyncio.sleep(delay)
                    continue
                record_request(endpoint, failed=True)
                raise WebflowApiError(
                    f"Request failed after {retry_config.max_retries} retries: {e}"
                ) from e

            # Success
            if status < 400:
                record_request(endpoint)
                if status == 204 or not response_text:
                    return {}
                try:
                    return json.loads(response_text)
                except ValueError as e:
                    raise WebflowApiError(
                        f"Invalid JSON response from {path}", status, response_text
                    ) from e

            if status in (401, 403):
                record_request(endpoint, failed=True)
                raise WebflowAuthenticationError(
                    f"Authentication failed: {response_text}",
                    status,
                    response_text,
                )

            if status == 404:
                record_request(endpoint, failed=True)
                raise WebflowNotFoundError(
                    f"Resource not found: {path}",
                    status,
                    response_text,
                )

            if status == 429:
                retry_after = parse_retry_after(headers.get("retry-after"))
                if attempt < retry_config.max_retries:
                    logger.warning(f"Rate limited, waiting {retry_after}s...")
                    record_request_retry(endpoint)
                    await asyncio.sleep(retry_after)
                    continue
                record_request(endpoint, failed=True)
                raise WebflowRateLimitError("Rate limit exceeded", retry_after)

            if status == 400:
                record_request(endpoint, failed=True)
                raise WebflowValidationError(
                    f"Validation error: {response_text}",
                    status,
                    response_text,
                )

            # Retry on server errors
            if status in retry_config.retry_on_status and attempt < retry_config.max_retries:
                delay = retry_config.get_delay(attempt)
                logger.warning(
                    f"Request failed with {status}, "
                    f"retrying in {delay:.1f}s (attempt {attempt + 1}/{retry_config.max_retries})"
                )
                record_request_retry(endpoint)
                await asyncio.sleep(delay)
                continue

            record_request(endpoint, failed=True)
            raise WebflowApiError(
                f"API error {status}: {response_text}",
                status,
                response_text,
            )

        raise WebflowApiError(f"Request failed: {last_error}")

    async def list_collections(self) -> List[Dict[str, Any]]:
        """List all CMS collections of the site."""
        response = await self.request("GET", f"sites/{self.site_id}/collections")
        return response.get("collections") or []

    async def get_collection(self, collection_id: str) -> Dict[str, Any]:
        """Get a collection with its field schema."""
        return await self.request("GET", f"collections/{collection_id}")

    async def list_collection_items(
        self,
        collection_id: str,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Dict[str, Any]:
        """Get one page of collection items.

        Returns:
            Raw response with ``items`` and ``pagination``
        """
        params = {
            "limit": limit or self.api_config.page_size,
            "offset": offset,
        }
        return await self.request("GET", f"collections/{collection_id}/items", params=params)

    async def fetch_all_collection_items(
        self,
        collection_id: str,
        page_size: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """List all items with automatic pagination.

        Stops at the first page shorter than ``page_size``.
        """
        page_size = page_size or self.api_config.page_size
        all_items: List[Dict[str, Any]] = []
        offset = 0

        while True:
            response = await self.list_collection_items(collection_id, limit=page_size, offset=offset)
            items = response.get("items") or []
            all_items.extend(items)

            if len(items) < page_size:
                break

            offset += page_size

        logger.debug(f"Fetched {len(all_items)} items from collection {collection_id}")
        return all_items

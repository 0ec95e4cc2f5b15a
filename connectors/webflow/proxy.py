"""Server-side Webflow API proxy.

Forwards a browser request of the form {siteId, method, path, params} to the
Webflow API using the server's token, and relays the upstream status and
JSON body unchanged. Keeps the token out of the browser.

Path rules:
- "sites/..." and "collections/..." are used as given
- anything else is scoped to the site: "sites/{siteId}/{path}"
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

import aiohttp

from core.config import WEBFLOW_API_BASE
from core.observability.logging import get_logger
from core.observability.metrics import record_request

logger = get_logger(__name__)


@dataclass
class ProxyResponse:
    """Upstream status and decoded body to relay to the caller."""
    status_code: int
    body: Any


def build_api_path(site_id: str, path: str) -> str:
    """Resolve a proxy path to a Webflow API path relative to /v2.

    Examples:
        >>> build_api_path("site1", "collections")
        'sites/site1/collections'
        >>> build_api_path("site1", "collections/abc/items")
        'collections/abc/items'
    """
    if path.startswith("sites/") or path.startswith("collections/"):
        return path
    return f"sites/{site_id}/{path}"


async def forward_proxy_request(
    api_token: str,
    site_id: str,
    path: str,
    method: Optional[str] = None,
    params: Optional[Dict[str, Any]] = None,
    base_url: str = WEBFLOW_API_BASE,
    timeout_seconds: int = 30,
    session: Optional[aiohttp.ClientSession] = None,
) -> ProxyResponse:
    """Forward one request to the Webflow API.

    GET params are sent as the query string, other methods send them as a
    JSON body. Non-JSON upstream bodies are replaced by an error object.

    Args:
        api_token: Webflow API token
        site_id: Site the request is scoped to
        path: API path as sent by the caller
        method: HTTP method (default GET)
        params: Query parameters or body
        base_url: Webflow API base URL
        timeout_seconds: Request timeout
        session: Optional shared session (a private one is created otherwise)

    Returns:
        ProxyResponse with the upstream status and body
    """
    method = (method or "GET").upper()
    url = f"{base_url.rstrip('/')}/{build_api_path(site_id, path)}"
    headers = {
        "Authorization": f"Bearer {api_token}",
        "Content-Type": "application/json",
        "accept-version": "1.0.0",
    }

    query = None
    body = None
    if params and method == "GET":
        query = {k: str(v) for k, v in params.items()}
    elif params:
        body = params

    own_session = session is None
    if own_session:
        session = aiohttp.ClientSession()

    try:
        async with session.request(
            method,
            url,
            headers=headers,
            params=query,
            json=body,
            timeout=aiohttp.ClientTimeout(total=timeout_seconds),
        ) as response:
            text = await response.text()
            status = response.status
    finally:
        if own_session:
            await session.close()

    try:
        data = json.loads(text) if text else {}
    except ValueError:
        data = {"error": "Invalid JSON response"}

    record_request(f"proxy {method}", failed=status >= 400)
    logger.debug(
        f"Proxied {method} {path} -> {status}",
        extra_fields={"site_id": site_id, "status": status},
    )
    return ProxyResponse(status_code=status, body=data)

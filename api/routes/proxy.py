"""Webflow API proxy endpoint.

Lets a browser-embedded calendar read CMS data without ever holding the
Webflow API token. The request body names the site, HTTP method, API path
and params; the upstream status and JSON body are relayed unchanged.
"""

import asyncio
from typing import Any, Dict, Optional

import aiohttp
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from connectors.webflow.proxy import forward_proxy_request
from core.config import Settings, get_settings
from core.observability.logging import get_logger, with_correlation


router = APIRouter()
logger = get_logger(__name__)


class ProxyRequest(BaseModel):
    """Proxy request body."""
    model_config = ConfigDict(populate_by_name=True)

    site_id: Optional[str] = Field(default=None, alias="siteId")
    method: Optional[str] = Field(default="GET", description="HTTP method to use upstream")
    path: Optional[str] = Field(default=None, description="API path relative to /v2")
    params: Dict[str, Any] = Field(default_factory=dict)


def _error(status_code: int, error: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "message": message})


@router.post("/webflow-proxy")
async def webflow_proxy(
    request: ProxyRequest,
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    """Forward a request to the Webflow API with the server's token."""
    if not request.site_id:
        return _error(400, "Missing siteId", "siteId is required")

    if not request.path:
        return _error(400, "Missing path", "API path is required")

    if not settings.webflow_api_token:
        logger.error("WEBFLOW_API_TOKEN environment variable is not set")
        return _error(500, "Server configuration error", "API token not configured")

    with with_correlation(site_id=request.site_id, request_path=request.path):
        try:
            upstream = await forward_proxy_request(
                api_token=settings.webflow_api_token,
                site_id=request.site_id,
                path=request.path,
                method=request.method,
                params=request.params,
                base_url=settings.webflow_api_base,
                timeout_seconds=settings.timeout_seconds,
            )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Proxy error: {e}", extra_fields={"error_type": type(e).__name__})
            return _error(500, "Proxy error", str(e) or "An unexpected error occurred")

    return JSONResponse(status_code=upstream.status_code, content=upstream.body)

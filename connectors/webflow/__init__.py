"""Webflow Connector Package.

Async client for the Webflow CMS Data API (v2) and the server-side proxy
that keeps the API token off the browser.
"""

from connectors.webflow.client import (
    WebflowApiClient,
    WebflowApiConfig,
    RetryConfig,
    WebflowApiError,
    WebflowAuthenticationError,
    WebflowNotFoundError,
    WebflowRateLimitError,
    WebflowValidationError,
    WebflowConfigurationError,
)
from connectors.webflow.proxy import ProxyResponse, build_api_path, forward_proxy_request

__all__ = [
    # Client
    "WebflowApiClient",
    "WebflowApiConfig",
    "RetryConfig",
    # Errors
    "WebflowApiError",
    "WebflowAuthenticationError",
    "WebflowNotFoundError",
    "WebflowRateLimitError",
    "WebflowValidationError",
    "WebflowConfigurationError",
    # Proxy
    "ProxyResponse",
    "build_api_path",
    "forward_proxy_request",
]

"""CMS Connectors - external content API integrations.

The core engine only ever sees raw collection, schema and item payloads;
everything about talking to the CMS lives here:
- Authentication (bearer token or proxy)
- API communication, pagination and retries
- Error mapping to typed exceptions
"""

from connectors.webflow import (
    WebflowApiClient,
    WebflowApiConfig,
    RetryConfig,
    WebflowApiError,
    WebflowAuthenticationError,
    WebflowNotFoundError,
    WebflowRateLimitError,
    WebflowValidationError,
    WebflowConfigurationError,
    forward_proxy_request,
)

__all__ = [
    "WebflowApiClient",
    "WebflowApiConfig",
    "RetryConfig",
    "WebflowApiError",
    "WebflowAuthenticationError",
    "WebflowNotFoundError",
    "WebflowRateLimitError",
    "WebflowValidationError",
    "WebflowConfigurationError",
    "forward_proxy_request",
]

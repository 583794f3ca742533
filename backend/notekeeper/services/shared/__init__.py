"""Shared utilities and base classes for services layer.

- HTTPClient: Base class for external API clients
- HTTPClientError: Exception for HTTP client failures
"""

from .http_client import HTTPClient, HTTPClientError

__all__ = [
    "HTTPClient",
    "HTTPClientError",
]

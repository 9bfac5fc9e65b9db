"""
Error taxonomy for the discovery pipeline.

Fatal errors stop the process before the listener starts:
ConfigurationError, QueryDirectoryError, ServerStartupError.

InventoryError subclasses only cost the query document that raised them;
the pipeline logs them and carries on with the next document.
"""
from __future__ import annotations

from typing import Optional


class HttpSdError(Exception):
    """Base class for all nautobot_http_sd exceptions."""


class ConfigurationError(HttpSdError):
    """Required settings are missing or invalid."""


class QueryDirectoryError(HttpSdError):
    """The query directory cannot be listed."""


class ServerStartupError(HttpSdError):
    """The discovery listener could not bind its address."""


class InventoryError(HttpSdError):
    """Base class for failures of a single inventory query."""


class UpstreamError(InventoryError):
    """
    Nautobot answered with an unexpected status, or could not be reached.

    status is None for transport failures (connection refused, timeout).
    body keeps the raw response text for diagnostics.
    """

    def __init__(self, message: str, status: Optional[int] = None, body: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class UpstreamAuthError(InventoryError):
    """Nautobot rejected the API token (HTTP 401)."""

    def __init__(self, message: str, body: str = "") -> None:
        super().__init__(message)
        self.status = 401
        self.body = body


class DecodeError(InventoryError):
    """The response body is not JSON or does not match the device schema."""


__all__ = [
    "HttpSdError",
    "ConfigurationError",
    "QueryDirectoryError",
    "ServerStartupError",
    "InventoryError",
    "UpstreamError",
    "UpstreamAuthError",
    "DecodeError",
]

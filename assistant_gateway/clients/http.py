"""
HTTP Client Module

This module provides the HTTP client factory used by tools that call external
REST APIs, with connection pooling, timeouts and connection-level retries.

Pattern: Factory pattern for creating configured HTTP clients
"""

from typing import Optional

import httpx


# =============================================================================
# Default Configuration Constants
# =============================================================================


DEFAULT_TIMEOUT_SECONDS: float = 30.0
"""Default timeout for HTTP requests in seconds."""

DEFAULT_MAX_CONNECTIONS: int = 100
"""Maximum number of connections in the pool."""

DEFAULT_MAX_KEEPALIVE: int = 20
"""Maximum number of keepalive connections."""

DEFAULT_RETRY_COUNT: int = 1
"""Connection-level retries (failed connects only, never replayed requests)."""

USER_AGENT = "assistant-gateway/1.0"


# =============================================================================
# HTTP Client Factory
# =============================================================================


def create_http_client(
    base_url: Optional[str] = None,
    timeout_seconds: Optional[float] = None,
    max_connections: Optional[int] = None,
    max_keepalive: Optional[int] = None,
    retries: Optional[int] = None,
    headers: Optional[dict[str, str]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """
    Create a configured HTTP client with connection pooling and timeouts.

    Args:
        base_url: Base URL for all requests (e.g., "https://www.googleapis.com")
        timeout_seconds: Request timeout in seconds (default: 30.0)
        max_connections: Maximum connections in pool (default: 100)
        max_keepalive: Maximum keepalive connections (default: 20)
        retries: Number of connection retries (default: 1)
        headers: Additional headers to include in all requests
        transport: Explicit transport, replacing the pooled default
            (e.g. httpx.MockTransport in tests)

    Returns:
        httpx.AsyncClient: Configured async HTTP client

    Example:
        >>> client = create_http_client(
        ...     base_url="https://www.googleapis.com",
        ...     headers={"Authorization": "Bearer ..."},
        ... )
        >>> async with client:
        ...     response = await client.get("/calendar/v3/calendars/primary/events")
    """
    timeout = timeout_seconds if timeout_seconds is not None else DEFAULT_TIMEOUT_SECONDS
    max_conn = max_connections if max_connections is not None else DEFAULT_MAX_CONNECTIONS
    max_keep = max_keepalive if max_keepalive is not None else DEFAULT_MAX_KEEPALIVE
    retry_count = retries if retries is not None else DEFAULT_RETRY_COUNT

    default_headers = {
        "User-Agent": USER_AGENT,
        "Accept": "application/json",
    }
    if headers:
        default_headers.update(headers)

    if transport is None:
        # httpx transport retries cover connection failures only
        transport = httpx.AsyncHTTPTransport(
            retries=retry_count,
            limits=httpx.Limits(
                max_connections=max_conn,
                max_keepalive_connections=max_keep,
            ),
        )

    return httpx.AsyncClient(
        base_url=base_url or "",
        timeout=httpx.Timeout(timeout),
        headers=default_headers,
        transport=transport,
    )

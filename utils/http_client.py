"""
HTTP client factory for standardized AsyncClient configuration
"""
from typing import Optional

import httpx


def get_async_client(
    timeout: Optional[float] = 10.0,
    max_connections: int = 100,
    max_keepalive: int = 10
) -> httpx.AsyncClient:
    """
    Return an AsyncClient with HTTP/2 support, connection limits, and default timeout.

    Args:
        timeout: request timeout in seconds, None disables it (media transfers)
        max_connections: maximum number of connections
        max_keepalive: maximum number of keep-alive connections
    """
    limits = httpx.Limits(max_keepalive_connections=max_keepalive, max_connections=max_connections)
    return httpx.AsyncClient(http2=True, limits=limits, timeout=timeout)

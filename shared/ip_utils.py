"""
Client IP resolution for FastAPI requests.

Used to key the global request rate limit. The proxy headers are only
meaningful behind a trusted reverse proxy, which is how the service is
deployed.
"""

from __future__ import annotations

from typing import Sequence

from fastapi import Request

DEFAULT_PROXY_HEADERS: tuple[str, ...] = (
    "CF-Connecting-IP",
    "True-Client-IP",
    "X-Forwarded-For",
    "X-Real-IP",
)


def get_client_ip(
    request: Request, proxy_headers: Sequence[str] = DEFAULT_PROXY_HEADERS
) -> str:
    """Extract the real client IP from a FastAPI ``Request``.

    Proxy headers are checked in priority order (first entry of a
    comma-separated ``X-Forwarded-For`` chain wins) before falling back to
    the direct connection address.

    Returns:
        The resolved client IP string, or ``""`` if none can be found.
    """
    for header in proxy_headers:
        ip_value: str | None = request.headers.get(header)
        if ip_value:
            client_ip: str = ip_value.split(",")[0].strip()
            if client_ip:
                return client_ip

    return request.client.host if request.client else ""

"""Shared async HTTP client for outbound calls (mail API)."""

from typing import Any, Optional

import httpx


class HttpClient:
    """Thin async wrapper around httpx.AsyncClient with a configurable timeout.

    Created once in the app lifespan and closed on shutdown.
    """

    def __init__(
        self, timeout: float = 5.0, headers: Optional[dict[str, str]] = None
    ) -> None:
        self._client = httpx.AsyncClient(timeout=timeout, headers=headers)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self._client.post(url, **kwargs)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

"""Shared async HTTP client with configurable timeout."""

from typing import Any, Optional

import httpx


class HttpClient:
    """Thin async wrapper around httpx.AsyncClient with a configurable timeout.

    One instance per external service keeps timeouts independently configurable.
    """

    def __init__(self, timeout: float = 5.0) -> None:
        self._client = httpx.AsyncClient(timeout=timeout)

    async def get_json(self, url: str, **kwargs: Any) -> Optional[Any]:
        """GET *url* and decode the body; ``None`` for any non-200 status.

        Transport errors and undecodable bodies propagate to the caller.
        """
        response = await self._client.get(url, **kwargs)
        if response.status_code != 200:
            return None
        return response.json()

    async def aclose(self) -> None:
        await self._client.aclose()

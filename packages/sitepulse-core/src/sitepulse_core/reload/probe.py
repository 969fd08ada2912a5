"""HTTP probe against the dev server's ping endpoint."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

import httpx

from sitepulse_core.reload.models import ProbeError

logger = logging.getLogger(__name__)

# A probe resolves to the current content token or raises.
Probe = Callable[[], Awaitable[str]]


class HttpProbe:
    """GETs ``base_url + path`` and returns the response body as the token.

    Any 2xx response counts as success. Transport errors and other status
    codes are raised as ProbeError.
    """

    def __init__(
        self,
        base_url: str,
        path: str = "/ping",
        timeout: float = 0.8,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not path.startswith("/"):
            path = "/" + path
        self.url = base_url.rstrip("/") + path
        self._timeout = timeout
        self._client = client
        self._owns_client = client is None

    async def __call__(self) -> str:
        if self._client is None:
            self._client = httpx.AsyncClient()
        try:
            resp = await self._client.get(self.url, timeout=self._timeout)
        except httpx.HTTPError as e:
            raise ProbeError(self.url, f"{type(e).__name__}: {e}") from e

        if not resp.is_success:
            raise ProbeError(self.url, f"HTTP {resp.status_code}", status_code=resp.status_code)
        return resp.text.strip()

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

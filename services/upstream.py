"""HTTP fetching utilities for upstream playlists and segments."""

from collections.abc import AsyncIterator

import httpx

from core.exceptions import UpstreamConnectionError, UpstreamError, UpstreamTimeoutError
from core.headers import HeaderSet


class UpstreamClient:
    """Fetch upstream resources over a shared connection pool."""

    def __init__(self, client: httpx.AsyncClient, timeout: float = 30.0) -> None:
        self._client = client
        self._timeout = httpx.Timeout(timeout)

    async def fetch_text(self, url: str, headers: HeaderSet) -> str:
        """GET a small text document (a playlist) into memory."""
        try:
            response = await self._client.get(url, headers=dict(headers), timeout=self._timeout)
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError(f"Upstream timeout: {e}") from e
        except httpx.RequestError as e:
            raise UpstreamConnectionError(f"Upstream connection error: {e}") from e

        if not response.is_success:
            raise UpstreamError.from_status(response.status_code, response.reason_phrase)
        return response.text

    async def open_stream(self, url: str, headers: HeaderSet) -> httpx.Response:
        """GET a segment without reading its body; caller must close it."""
        req = self._client.build_request("GET", url, headers=dict(headers), timeout=self._timeout)
        try:
            response = await self._client.send(req, stream=True)
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError(f"Upstream timeout: {e}") from e
        except httpx.RequestError as e:
            raise UpstreamConnectionError(f"Upstream connection error: {e}") from e

        if not response.is_success:
            await response.aclose()
            raise UpstreamError.from_status(response.status_code, response.reason_phrase)
        return response

    async def iter_raw(self, response: httpx.Response) -> AsyncIterator[bytes]:
        """Yield the undecoded body, closing the response however iteration ends."""
        try:
            async for chunk in response.aiter_raw():
                yield chunk
        finally:
            await response.aclose()

    async def close_stream(self, response: httpx.Response) -> None:
        """Clean up streaming resources."""
        await response.aclose()

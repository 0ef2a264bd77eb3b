"""Test configuration: fake logger and an app wired to a mock upstream."""

from collections.abc import Callable

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from app import create_app
from core.config import Config


class _UnreadStream(httpx.AsyncByteStream):
    """Raw body handed out unread, as a real transport would."""

    def __init__(self, raw: bytes):
        self._raw = raw

    async def __aiter__(self):
        yield self._raw


def _as_unread(response: httpx.Response) -> httpx.Response:
    """Undo httpx reading a ``content=bytes`` body inside ``Response.__init__``."""
    if not (response.is_stream_consumed and isinstance(response.stream, httpx.ByteStream)):
        return response
    raw = b"".join(response.stream)
    return httpx.Response(
        response.status_code,
        headers=response.headers,
        stream=_UnreadStream(raw),
        extensions=response.extensions,
    )


class RecordingLogger:
    """RequestLogger that keeps every event in memory."""

    def __init__(self):
        self.manifests: list[tuple[str, int, dict[str, str]]] = []
        self.segments: list[tuple[str, str | None, int]] = []
        self.errors: list[tuple[str, int, str]] = []

    def log_manifest(self, url, segments, headers):
        self.manifests.append((url, segments, dict(headers)))

    def log_segment(self, url, range_header, status):
        self.segments.append((url, range_header, status))

    def log_error(self, route, status, message):
        self.errors.append((route, status, message))


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def request_logger():
    return RecordingLogger()


@pytest.fixture
def upstream_requests():
    """Requests seen by the mock upstream, in order."""
    return []


@pytest.fixture
def make_client(request_logger, upstream_requests):
    """Build a relay client whose upstream is answered by ``handler``."""

    def factory(
        handler: Callable[[httpx.Request], httpx.Response],
        raise_app_exceptions: bool = True,
    ):
        def recording_handler(request: httpx.Request) -> httpx.Response:
            upstream_requests.append(request)
            return _as_unread(handler(request))

        app = create_app(Config(), request_logger, transport=httpx.MockTransport(recording_handler))
        return _RelayClient(app, raise_app_exceptions)

    return factory


class _RelayClient:
    def __init__(self, app, raise_app_exceptions: bool = True):
        self.app = app
        self.raise_app_exceptions = raise_app_exceptions

    async def __aenter__(self) -> AsyncClient:
        self._lifespan = self.app.router.lifespan_context(self.app)
        await self._lifespan.__aenter__()
        self._client = AsyncClient(
            transport=ASGITransport(app=self.app, raise_app_exceptions=self.raise_app_exceptions),
            base_url="http://test",
        )
        return await self._client.__aenter__()

    async def __aexit__(self, *exc_info):
        await self._client.__aexit__(*exc_info)
        await self._lifespan.__aexit__(*exc_info)

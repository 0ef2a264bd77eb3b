"""Playlist and segment relays."""

from collections.abc import AsyncIterator
from dataclasses import dataclass

import httpx

from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from core.request_types import ProxyRequest, RewriteContext
from core.transform import ManifestTransformer
from services.upstream import UpstreamClient

DEFAULT_SEGMENT_TYPE = "video/mp2t"

# Upstream response headers mirrored onto the segment response when present.
_MIRRORED_HEADERS = ("content-length", "content-encoding", "content-range")


@dataclass
class SegmentStream:
    """An opened upstream segment ready to be streamed to the client."""

    status_code: int
    media_type: str
    headers: dict[str, str]
    body: AsyncIterator[bytes]
    response: httpx.Response


class ManifestRelay:
    """Fetch a playlist and rewrite its segment lines."""

    def __init__(
        self,
        upstream: UpstreamClient,
        logger: RequestLogger,
        header_builder: HeaderBuilder,
        transformer: ManifestTransformer | None = None,
    ) -> None:
        self._upstream = upstream
        self._logger = logger
        self._headers = header_builder
        self._transformer = transformer or ManifestTransformer()

    async def relay_manifest(
        self,
        target_url: str,
        raw_header_param: str | None,
        relay_origin: str,
    ) -> str:
        """Return the upstream playlist with segments routed through ``relay_origin``."""
        request = ProxyRequest.from_query(target_url, raw_header_param)
        headers = self._headers.build_manifest_headers(request.raw_headers)

        content = await self._upstream.fetch_text(request.target_url, headers)

        context = RewriteContext.for_target(request.target_url, request.raw_headers, relay_origin)
        rewritten, segments = self._transformer.rewrite(content, context)
        self._logger.log_manifest(request.target_url, segments, headers)
        return rewritten


class SegmentRelay:
    """Open a media segment upstream and describe how to stream it back."""

    def __init__(
        self,
        upstream: UpstreamClient,
        logger: RequestLogger,
        header_builder: HeaderBuilder,
    ) -> None:
        self._upstream = upstream
        self._logger = logger
        self._headers = header_builder

    async def relay_segment(
        self,
        target_url: str,
        raw_header_param: str | None,
        inbound_range: str | None,
    ) -> SegmentStream:
        request = ProxyRequest.from_query(target_url, raw_header_param)
        headers = self._headers.build_segment_headers(request.raw_headers, inbound_range)

        response = await self._upstream.open_stream(request.target_url, headers)

        out_headers = {"Accept-Ranges": "bytes"}
        for key in _MIRRORED_HEADERS:
            if key in response.headers:
                out_headers[key.title()] = response.headers[key]
        status_code = 206 if "content-range" in response.headers else 200

        self._logger.log_segment(request.target_url, inbound_range, status_code)
        return SegmentStream(
            status_code=status_code,
            media_type=response.headers.get("content-type") or DEFAULT_SEGMENT_TYPE,
            headers=out_headers,
            body=self._upstream.iter_raw(response),
            response=response,
        )

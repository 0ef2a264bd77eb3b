"""FastAPI application factory."""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request

from api.handlers import (
    handle_health,
    handle_manifest,
    handle_preflight,
    handle_root,
    handle_segment,
)
from core.config import Config
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from core.transform import ManifestTransformer
from services.relays import ManifestRelay, SegmentRelay
from services.upstream import UpstreamClient


def create_app(
    config: Config,
    logger: RequestLogger,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        limits = httpx.Limits(max_connections=100, max_keepalive_connections=20)
        client = httpx.AsyncClient(
            timeout=config.upstream.timeout,
            limits=limits,
            follow_redirects=True,
            transport=transport,
        )
        upstream = UpstreamClient(client, timeout=config.upstream.timeout)
        header_builder = HeaderBuilder()
        app.state.upstream_client = upstream
        app.state.manifest_relay = ManifestRelay(
            upstream, logger, header_builder, ManifestTransformer()
        )
        app.state.segment_relay = SegmentRelay(upstream, logger, header_builder)
        try:
            yield
        finally:
            await client.aclose()

    app = FastAPI(title="HLS Relay", version="0.1.0", lifespan=lifespan)

    @app.get("/")
    async def root(request: Request):
        return await handle_root(request)

    @app.get("/m3u8-proxy")
    async def proxy_manifest(request: Request):
        return await handle_manifest(request, logger)

    @app.get("/ts-proxy")
    async def proxy_segment(request: Request):
        return await handle_segment(request, logger)

    @app.get("/health")
    async def health(request: Request):
        return await handle_health(request)

    @app.options("/{path:path}")
    async def preflight(request: Request, path: str):
        return await handle_preflight(request)

    return app

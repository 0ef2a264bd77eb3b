"""FastAPI route handlers."""

from datetime import UTC, datetime

from fastapi import Request, Response
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.background import BackgroundTask

from core.exceptions import MissingParameter
from core.protocols import RequestLogger

PLAYLIST_MEDIA_TYPE = "application/vnd.apple.mpegurl"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, Referer, User-Agent, Range",
}

USAGE = {
    "m3u8": "/m3u8-proxy?url=<encoded_m3u8_url>&headers=<encoded_headers_json>",
    "ts": "/ts-proxy?url=<encoded_ts_url>&headers=<encoded_headers_json>",
}


def _error_response(status_code: int, error: str, details: str | None = None) -> JSONResponse:
    content = {"error": error}
    if details is not None:
        content["details"] = details
    return JSONResponse(content, status_code=status_code, headers=CORS_HEADERS)


def _require_url(request: Request) -> str:
    url = request.query_params.get("url")
    if not url:
        raise MissingParameter("url")
    return url


def _relay_origin(request: Request) -> str:
    return f"{request.url.scheme}://{request.url.netloc}"


async def handle_root(_request: Request) -> JSONResponse:
    """Describe the two relay endpoints."""
    return JSONResponse({"message": "M3U8 Proxy Server", "usage": USAGE}, headers=CORS_HEADERS)


async def handle_health(_request: Request) -> JSONResponse:
    return JSONResponse(
        {"status": "OK", "timestamp": datetime.now(UTC).isoformat()},
        headers=CORS_HEADERS,
    )


async def handle_preflight(_request: Request) -> Response:
    return Response(status_code=200, headers=CORS_HEADERS)


async def handle_manifest(request: Request, logger: RequestLogger) -> Response:
    """Handle /m3u8-proxy: fetch the playlist and rewrite its segment lines."""
    try:
        url = _require_url(request)
        relay = request.app.state.manifest_relay
        content = await relay.relay_manifest(
            url,
            request.query_params.get("headers"),
            _relay_origin(request),
        )
    except MissingParameter as e:
        return _error_response(400, str(e))
    except Exception as e:
        logger.log_error("m3u8", 500, str(e))
        return _error_response(500, "Failed to fetch M3U8", str(e))

    headers = {**CORS_HEADERS, "Cache-Control": "no-cache"}
    return Response(content=content, media_type=PLAYLIST_MEDIA_TYPE, headers=headers)


async def handle_segment(request: Request, logger: RequestLogger) -> Response | StreamingResponse:
    """Handle /ts-proxy: stream a segment, preserving range semantics."""
    try:
        url = _require_url(request)
        relay = request.app.state.segment_relay
        stream = await relay.relay_segment(
            url,
            request.query_params.get("headers"),
            request.headers.get("range"),
        )
    except MissingParameter as e:
        return _error_response(400, str(e))
    except Exception as e:
        logger.log_error("ts", 500, str(e))
        return _error_response(500, "Failed to fetch TS file", str(e))

    headers = {
        **CORS_HEADERS,
        **stream.headers,
        "Cache-Control": "public, max-age=3600",
    }
    return StreamingResponse(
        stream.body,
        status_code=stream.status_code,
        media_type=stream.media_type,
        headers=headers,
        background=BackgroundTask(request.app.state.upstream_client.close_stream, stream.response),
    )

"""Header construction for upstream requests."""

import json
import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any
from urllib.parse import quote, unquote

from core.exceptions import HeaderDecodeError

logger = logging.getLogger(__name__)

HeaderSet = Mapping[str, str]

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)

_BASE_HEADERS: dict[str, str] = {
    "User-Agent": BROWSER_USER_AGENT,
    "Accept": "*/*",
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate, br",
    "Connection": "keep-alive",
}


def decode_header_param(raw: str) -> dict[str, str]:
    """Decode a percent-encoded JSON object of header overrides."""
    try:
        data: Any = json.loads(unquote(raw, errors="strict"))
    except (UnicodeDecodeError, ValueError) as e:
        raise HeaderDecodeError(f"Invalid headers JSON: {e}") from e
    if not isinstance(data, dict):
        raise HeaderDecodeError(f"Invalid headers JSON: expected object, got {type(data).__name__}")
    return {str(key): str(value) for key, value in data.items() if value is not None}


def encode_header_param(overrides: Mapping[str, str]) -> str:
    """Client-side encoder for the ``headers`` query parameter.

    Produces the value a player or page embeds in ``/m3u8-proxy`` and
    ``/ts-proxy`` links; ``decode_header_param`` is its inverse.
    """
    return quote(json.dumps(dict(overrides), separators=(",", ":")), safe="")


def merge_headers(defaults: Mapping[str, str], overrides: Mapping[str, str]) -> HeaderSet:
    """Layer overrides on top of defaults; keys collide case-insensitively."""
    merged = dict(defaults)
    for key, value in overrides.items():
        for existing in [k for k in merged if k.lower() == key.lower()]:
            del merged[existing]
        merged[key] = value
    return MappingProxyType(merged)


class HeaderBuilder:
    """Build upstream headers for playlist and segment fetches."""

    def build_manifest_headers(self, raw: str | None) -> HeaderSet:
        """Browser-like defaults plus caller overrides."""
        defaults = {**_BASE_HEADERS, "Upgrade-Insecure-Requests": "1"}
        return merge_headers(defaults, self._overrides(raw))

    def build_segment_headers(self, raw: str | None, range_header: str | None = None) -> HeaderSet:
        """Browser-like defaults, the client's Range, then caller overrides."""
        defaults = dict(_BASE_HEADERS)
        if range_header:
            defaults["Range"] = range_header
        return merge_headers(defaults, self._overrides(raw))

    def _overrides(self, raw: str | None) -> dict[str, str]:
        if not raw:
            return {}
        try:
            return decode_header_param(raw)
        except HeaderDecodeError as e:
            logger.warning("%s", e)
            return {}

"""Shared request data types."""

from dataclasses import dataclass
from urllib.parse import unquote, urlsplit

from core.exceptions import InvalidTargetUrl

_ALLOWED_SCHEMES = ("http", "https")


@dataclass(frozen=True)
class ProxyRequest:
    """A decoded relay request."""

    target_url: str
    raw_headers: str | None = None

    @classmethod
    def from_query(cls, url: str, headers: str | None = None) -> "ProxyRequest":
        """Percent-decode and validate the ``url`` query value."""
        try:
            decoded = unquote(url, errors="strict")
        except UnicodeDecodeError as e:
            raise InvalidTargetUrl(f"Invalid target URL: {e}") from e

        try:
            parts = urlsplit(decoded)
        except ValueError as e:
            raise InvalidTargetUrl(f"Invalid target URL: {e}") from e
        if parts.scheme.lower() not in _ALLOWED_SCHEMES or not parts.netloc:
            raise InvalidTargetUrl(f"Invalid target URL: {decoded!r} is not an absolute http(s) URI")

        return cls(target_url=decoded, raw_headers=headers or None)


@dataclass(frozen=True)
class RewriteContext:
    """Everything needed to turn a segment line into a relay link."""

    base_url: str
    headers_param: str | None
    relay_origin: str

    @classmethod
    def for_target(
        cls,
        target_url: str,
        headers_param: str | None,
        relay_origin: str,
    ) -> "RewriteContext":
        base_url = target_url[: target_url.rfind("/") + 1]
        return cls(base_url=base_url, headers_param=headers_param, relay_origin=relay_origin.rstrip("/"))

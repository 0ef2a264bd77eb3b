"""Shared protocol definitions."""

from collections.abc import Mapping
from typing import Protocol


class RequestLogger(Protocol):
    """Protocol for request logging (Dashboard)."""

    def log_manifest(self, url: str, segments: int, headers: Mapping[str, str]) -> None: ...
    def log_segment(self, url: str, range_header: str | None, status: int) -> None: ...
    def log_error(self, route: str, status: int, message: str) -> None: ...

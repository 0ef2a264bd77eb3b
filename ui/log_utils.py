"""Shared logging utilities."""

import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

from rich.console import Console
from rich.logging import RichHandler

LOG_ROOT = Path.cwd() / "logs"
CLI_LOG_FILE = LOG_ROOT / "proxy.log"

_SENSITIVE_MARKERS = ("authorization", "cookie", "key", "token")


def write_cli_log(
    level: str,
    message: str,
    **extra: Any,
) -> None:
    """Append a line to the rolling CLI log file."""
    CLI_LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S")
    extra_str = " ".join(f"{k}={v}" for k, v in extra.items()) if extra else ""
    line = f"[{timestamp}] {level}: {message}"
    if extra_str:
        line += f" {extra_str}"
    line += "\n"
    with CLI_LOG_FILE.open("a") as f:
        f.write(line)


class CliLogHandler(logging.Handler):
    """Mirror library log records into the rolling CLI log file."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            write_cli_log(record.levelname, record.getMessage(), logger=record.name)
        except OSError:
            self.handleError(record)


def configure_logging(console: Console, level: int = logging.WARNING) -> list[logging.Handler]:
    """Send stdlib logging through the rich console and the CLI log file.

    Sharing the dashboard's console keeps records above the live view.
    """
    handlers: list[logging.Handler] = [
        RichHandler(console=console, show_path=False),
        CliLogHandler(),
    ]
    root = logging.getLogger()
    root.setLevel(level)
    for handler in handlers:
        root.addHandler(handler)
    return handlers


def clear_logs(log_file: Path = CLI_LOG_FILE) -> None:
    """Truncate the CLI log file from a previous run."""
    if log_file.exists():
        log_file.write_text("")


def short_url(url: str, width: int = 60) -> str:
    """Host plus the tail of the path, for display."""
    parts = urlsplit(url)
    text = f"{parts.netloc}{parts.path}"
    if len(text) > width:
        return "..." + text[-(width - 3):]
    return text


def redact_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Redact sensitive headers."""
    redacted = {}
    for key, value in headers.items():
        if any(marker in key.lower() for marker in _SENSITIVE_MARKERS):
            redacted[key] = _mask(value)
        else:
            redacted[key] = value
    return redacted


def _mask(value: str) -> str:
    if len(value) <= 10:
        return "***"
    return value[:6] + "..." + value[-4:]

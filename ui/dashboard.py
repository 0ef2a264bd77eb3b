"""Real-time CLI dashboard for relay monitoring."""

from collections.abc import Mapping
from datetime import datetime
from threading import Lock

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import Config
from ui.log_utils import redact_headers, short_url, write_cli_log

console = Console()


class RelayEvent:
    """One relayed playlist or segment."""

    def __init__(self, url: str, detail: str, timestamp: datetime):
        self.url = short_url(url)
        self.detail = detail
        self.timestamp = timestamp


class Dashboard:
    """Real-time dashboard showing recent playlists and segments."""

    def __init__(self, config: Config):
        self.config = config
        self._lock = Lock()
        self._manifests: list[RelayEvent] = []
        self._segments: list[RelayEvent] = []
        self._max_rows = 8
        self._request_count = {"m3u8": 0, "ts": 0, "errors": 0}
        self._errors: list[str] = []
        self._live: Live | None = None

    def start(self) -> "Dashboard":
        """Start the live dashboard."""
        self._live = Live(
            self._build_layout(),
            console=console,
            refresh_per_second=4,
            screen=False,
        )
        self._live.start()
        return self

    def stop(self) -> None:
        """Stop the live dashboard."""
        if self._live:
            self._live.stop()

    def log_manifest(self, url: str, segments: int, headers: Mapping[str, str]) -> None:
        """Log a rewritten playlist."""
        with self._lock:
            self._request_count["m3u8"] += 1
            event = RelayEvent(url, f"{segments} segments", datetime.now())
            self._manifests.insert(0, event)
            self._manifests = self._manifests[: self._max_rows]
            write_cli_log("M3U8", url, segments=segments, headers=redact_headers(headers))
            self._refresh()

    def log_segment(self, url: str, range_header: str | None, status: int) -> None:
        """Log a relayed segment."""
        with self._lock:
            self._request_count["ts"] += 1
            detail = f"{status} {range_header}" if range_header else str(status)
            self._segments.insert(0, RelayEvent(url, detail, datetime.now()))
            self._segments = self._segments[: self._max_rows]
            write_cli_log("TS", url, status=status, range=range_header or "-")
            self._refresh()

    def log_error(self, route: str, status: int, message: str) -> None:
        """Log an error."""
        with self._lock:
            self._request_count["errors"] += 1
            truncated = message[:50] + "..." if len(message) > 50 else message
            self._errors.insert(0, f"{route} {status}: {truncated}")
            self._errors = self._errors[:3]
            self._refresh()
            write_cli_log("ERROR", message[:200], route=route, status=status)

    def _refresh(self) -> None:
        if self._live:
            self._live.update(self._build_layout())

    def _build_layout(self) -> Layout:
        layout = Layout()

        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="body"),
            Layout(name="footer", size=5),
        )
        layout["body"].split_row(
            Layout(name="manifests", ratio=1),
            Layout(name="segments", ratio=1),
        )

        layout["header"].update(self._build_header())
        layout["manifests"].update(
            self._build_events_panel(self._manifests, "Playlists", "blue", "Segments")
        )
        layout["segments"].update(
            self._build_events_panel(self._segments, "Segments", "magenta", "Status")
        )
        layout["footer"].update(self._build_footer())

        return layout

    def _build_header(self) -> Panel:
        """Build header with stats."""
        stats = Text()
        stats.append("HLS Relay", style="bold cyan")
        stats.append("  |  ")
        stats.append(f"Playlists: {self._request_count['m3u8']}", style="blue")
        stats.append("  |  ")
        stats.append(f"Segments: {self._request_count['ts']}", style="magenta")
        stats.append("  |  ")
        stats.append(f"Errors: {self._request_count['errors']}", style="red")
        stats.append("  |  ")
        stats.append(f"Port: {self.config.server.port}", style="dim")

        return Panel(stats, style="cyan")

    def _build_events_panel(
        self,
        events: list[RelayEvent],
        title: str,
        color: str,
        detail_header: str,
    ) -> Panel:
        if events:
            table = Table(show_header=True, header_style="bold", expand=True, box=None)
            table.add_column("Time", style="dim", width=8)
            table.add_column("URL", ratio=3)
            table.add_column(detail_header, ratio=1)
            for event in events:
                table.add_row(event.timestamp.strftime("%H:%M:%S"), event.url, event.detail)
            content = table
        else:
            content = Text("Waiting for requests...", style="dim")

        return Panel(content, title=f"[{color}]{title}[/{color}]", border_style=color)

    def _build_footer(self) -> Panel:
        """Build footer with errors and usage."""
        if self._errors:
            error_text = Text()
            for err in self._errors:
                error_text.append("! ", style="red bold")
                error_text.append(err + "\n", style="red")
            content = error_text
        else:
            port = self.config.server.port
            content = Text(
                f"Health check: http://localhost:{port}/health\n"
                f"Usage: http://localhost:{port}/m3u8-proxy?url=<encoded_m3u8_url>",
                style="dim",
            )

        return Panel(content, title="[dim]Status[/dim]", border_style="dim")


class ConsoleLogger:
    """Line-per-event logger used when the live dashboard is disabled."""

    def log_manifest(self, url: str, segments: int, headers: Mapping[str, str]) -> None:
        console.print(f"[blue]M3U8[/blue] {url} [dim]({segments} segments)[/dim]")
        write_cli_log("M3U8", url, segments=segments, headers=redact_headers(headers))

    def log_segment(self, url: str, range_header: str | None, status: int) -> None:
        console.print(f"[magenta]TS[/magenta] {status} {url}")
        write_cli_log("TS", url, status=status, range=range_header or "-")

    def log_error(self, route: str, status: int, message: str) -> None:
        console.print(f"[red]{route} {status}:[/red] {message}")
        write_cli_log("ERROR", message[:200], route=route, status=status)

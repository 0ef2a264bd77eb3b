"""CLI entry point for hls-relay."""

import sys
from datetime import datetime

from rich.console import Console

from app import create_app
from core.config import load_config
from core.exceptions import ConfigurationError
from ui.dashboard import ConsoleLogger, Dashboard
from ui.dashboard import console as dashboard_console
from ui.log_utils import CLI_LOG_FILE, clear_logs, configure_logging, write_cli_log

console = Console()


def main():
    """Main CLI entry point."""
    try:
        config = load_config()
    except ConfigurationError as e:
        console.print(f"[red][ERROR][/red] {e}")
        sys.exit(1)

    # Handle CLI arguments
    if len(sys.argv) > 1:
        arg = sys.argv[1]

        if arg == "--config":
            console.print_json(config.model_dump_json())
            console.print(f"[bold]Log file:[/bold] {CLI_LOG_FILE}")
            return

        if arg in ("--help", "-h"):
            _print_help()
            return

    clear_logs()
    configure_logging(dashboard_console)
    import uvicorn

    dashboard = Dashboard(config) if config.server.dashboard else None
    app = create_app(config, dashboard or ConsoleLogger())

    uvicorn_config = uvicorn.Config(
        app,
        host=config.server.host,
        port=config.server.port,
        log_level="warning",
    )
    server = uvicorn.Server(uvicorn_config)

    if dashboard:
        dashboard.start()
    else:
        port = config.server.port
        console.print(f"[bold cyan]M3U8 Proxy Server[/bold cyan] running on port {port}")
        console.print(f"Health check: http://localhost:{port}/health")
        console.print(f"Usage: http://localhost:{port}/m3u8-proxy?url=<encoded_m3u8_url>")

    start_time = datetime.now()
    write_cli_log("STARTUP", "Relay started", port=config.server.port)
    try:
        server.run()
    finally:
        duration = datetime.now() - start_time
        write_cli_log("SHUTDOWN", "Relay stopped", duration=str(duration))
        if dashboard:
            dashboard.stop()


def _print_help():
    """Print help message."""
    help_text = """
[bold cyan]HLS Relay[/bold cyan]

Fetches HLS playlists and segments for a client, routing every segment
reference in a playlist back through this relay.

[bold]Usage:[/bold]
    hls-relay              Start with live dashboard
    hls-relay --config     Show resolved configuration
    hls-relay --help       Show this help

[bold]Environment:[/bold]
    PORT                   Listening port (default 3000)
    HOST                   Bind address (default 0.0.0.0)
    UPSTREAM_TIMEOUT       Upstream timeout in seconds (default 30)
    DASHBOARD              Set to 0 for plain line logging

[bold]Endpoints:[/bold]
    /m3u8-proxy?url=<encoded_m3u8_url>&headers=<encoded_headers_json>
    /ts-proxy?url=<encoded_ts_url>&headers=<encoded_headers_json>
    /health
"""
    console.print(help_text)


if __name__ == "__main__":
    main()

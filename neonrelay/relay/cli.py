"""Console entrypoint for the chat relay."""

from __future__ import annotations

import asyncio
import sys

import typer
from loguru import logger
from rich.console import Console

from neonrelay.relay.server import RelayServer, RelayServerConfig

app = typer.Typer(name="neon-relay", help="Real-time presence and chat relay")
console = Console()

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


def _configure_logging(level: str) -> None:
    level = level.upper()
    if level not in LOG_LEVELS:
        raise typer.BadParameter(f"log level must be one of: {', '.join(LOG_LEVELS)}")
    logger.remove()
    logger.add(sys.stderr, level=level)


@app.callback()
def main() -> None:
    """Real-time presence and chat relay."""


@app.command("run")
def run(
    host: str = typer.Option("0.0.0.0", "--host", help="Bind host"),
    port: int = typer.Option(3000, "--port", envvar="PORT", help="WebSocket bind port"),
    health_port: int = typer.Option(
        None, "--health-port", envvar="HEALTH_PORT", help="Also serve GET /health on this extra port"
    ),
    idle_interval: float = typer.Option(25.0, "--idle-interval", help="Seconds between bot idle prompts"),
    external_url: str = typer.Option(
        "", "--external-url", envvar="RENDER_EXTERNAL_URL", help="Public base URL for the keep-alive heartbeat"
    ),
    heartbeat_interval: float = typer.Option(600.0, "--heartbeat-interval", help="Seconds between heartbeat pings"),
    log_level: str = typer.Option("INFO", "--log-level", help="Log level"),
):
    """Run the relay server."""
    _configure_logging(log_level)
    server = RelayServer(
        cfg=RelayServerConfig(
            host=host,
            port=port,
            health_port=health_port,
            idle_prompt_interval_s=idle_interval,
            external_url=external_url,
            heartbeat_interval_s=heartbeat_interval,
        )
    )

    async def _main():
        await server.start()
        try:
            await asyncio.Future()
        finally:
            await server.stop()

    try:
        asyncio.run(_main())
    except KeyboardInterrupt:
        console.print("\nStopping relay...")


if __name__ == "__main__":
    app()

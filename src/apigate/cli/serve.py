"""
CLI: ``apigate serve`` — serve a dispatcher over HTTP.
"""

from __future__ import annotations

import typer
import uvicorn

from apigate.cli.utils import console, load_dispatcher


def serve(
    target: str = typer.Argument(..., help="Dispatcher as 'module:attribute'"),
    host: str | None = typer.Option(None, "--host", "-h", help="Bind address (default: APIGATE_HOST)"),
    port: int | None = typer.Option(None, "--port", "-p", help="Bind port (default: APIGATE_PORT)"),
    log_level: str | None = typer.Option(None, "--log-level", help="Log level (default: APIGATE_LOG_LEVEL)"),
) -> None:
    """Start the HTTP transport for a dispatcher."""
    from apigate.api.app import create_app
    from apigate.api.settings import ApigateAPISettings

    dispatcher = load_dispatcher(target)

    overrides = {"host": host, "port": port, "log_level": log_level.upper() if log_level else None}
    settings = ApigateAPISettings(**{k: v for k, v in overrides.items() if v is not None})

    console.print(
        f"[bold green]Starting apigate[/bold green] for [cyan]{dispatcher.name}[/cyan] "
        f"on {settings.host}:{settings.port}"
    )
    uvicorn.run(
        create_app(dispatcher, settings=settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )

from __future__ import annotations

from typing import Annotated

import structlog
import typer
import uvicorn

from daprox.cli.commands._shared import get_resolved_config
from daprox.core.exceptions import ConfigError
from daprox.core.logging import setup_logging
from daprox.core.monitoring import setup_sentry
from daprox.server.app import create_app


def serve_command(
    ctx: typer.Context,
    host: Annotated[
        str | None,
        typer.Option("--host", "-H", help="Address to listen on"),
    ] = None,
    port: Annotated[
        int | None,
        typer.Option("--port", "-p", help="Port to listen on"),
    ] = None,
) -> None:
    """Run the HTTP query gateway."""
    try:
        resolved = get_resolved_config(ctx, host=host, port=port)
    except ConfigError as exc:
        typer.echo(f"Error: {exc.message}", err=True)
        raise typer.Exit(exc.exit_code) from exc

    setup_logging(ctx.obj.get("verbose", False), json_logs=resolved.json_logs)
    sentry_enabled = setup_sentry(resolved.sentry_dsn, resolved.environment)

    log = structlog.get_logger()
    log.info(
        "starting server",
        host=resolved.host,
        port=resolved.port,
        sentry=sentry_enabled,
    )
    uvicorn.run(create_app(resolved), host=resolved.host, port=resolved.port)

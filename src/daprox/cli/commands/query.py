from __future__ import annotations

import sys
from typing import Annotated

import sentry_sdk
import typer

from daprox.cli.commands._shared import get_resolved_config
from daprox.core.dispatcher import dispatch_stream
from daprox.core.exceptions import DaproxError
from daprox.core.models import OutputFormat
from daprox.core.monitoring import setup_sentry
from daprox.core.query_source import build_query


def query_command(
    ctx: typer.Context,
    file: Annotated[
        str | None,
        typer.Argument(help="SQL file to execute"),
    ] = None,
    execute: Annotated[
        str | None,
        typer.Option("--execute", "-e", help="Execute inline SQL query"),
    ] = None,
    db: Annotated[
        str | None,
        typer.Option("--db", "-d", envvar="DAPROX_DB", help="Database URI"),
    ] = None,
    format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format"),
    ] = OutputFormat.JSON,
    args: Annotated[
        str | None,
        typer.Option("--args", help="Positional parameters as a JSON array"),
    ] = None,
    kw_args: Annotated[
        str | None,
        typer.Option("--kw-args", help="Named parameters as a JSON object"),
    ] = None,
) -> None:
    """Execute a SQL query and write the encoded result to stdout."""
    try:
        is_tty = sys.stdin.isatty()
    except (ValueError, AttributeError):
        is_tty = False
    if execute is None and file is None and is_tty:
        typer.echo(ctx.get_help())
        raise typer.Exit()

    try:
        resolved = get_resolved_config(ctx)
        setup_sentry(resolved.sentry_dsn, resolved.environment)
        sql_query = build_query(
            inline=execute, file_path=file, db=db, args=args, kw_args=kw_args
        )
        result = dispatch_stream(sql_query, format, settings=resolved.connection)
        for chunk in result.chunks:
            sys.stdout.write(chunk.decode("utf-8"))
    except DaproxError as exc:
        sentry_sdk.capture_exception(exc)
        typer.echo(f"Error: {exc.message}", err=True)
        raise typer.Exit(exc.exit_code) from exc

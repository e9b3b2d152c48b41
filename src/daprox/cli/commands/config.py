"""Configuration inspection CLI commands."""

from __future__ import annotations

import typer

from daprox.cli.commands._shared import get_resolved_config
from daprox.core.config import DEFAULT_CONFIG_PATH

config_app = typer.Typer(help="Configuration inspection commands")


@config_app.callback(invoke_without_command=True)
def config_callback(ctx: typer.Context) -> None:
    if not ctx.invoked_subcommand:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def _mask_dsn(value: str | None) -> str:
    if value is None:
        return "not set"
    return "***"


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Display resolved configuration with source attribution."""
    resolved = get_resolved_config(ctx)
    sources = resolved.sources

    typer.echo("Server (resolved):")
    server_fields = [
        ("host", resolved.host),
        ("port", str(resolved.port)),
        ("sentry_dsn", _mask_dsn(resolved.sentry_dsn)),
        ("environment", resolved.environment),
        ("json_logs", str(resolved.json_logs).lower()),
    ]
    for field_name, value in server_fields:
        source = sources.get(field_name, "default")
        typer.echo(f"  {field_name}: {value} ({source})")

    typer.echo("")
    conn = resolved.connection
    typer.echo(f"Connections ({sources.get('connection', 'default')}):")
    typer.echo(f"  connect_timeout: {conn.connect_timeout}")
    typer.echo(f"  application_name: {conn.application_name}")
    typer.echo(f"  tls_root_cert: {conn.tls_root_cert or 'not set'}")
    if conn.tls_insecure_skip_verify:
        typer.echo("  tls_insecure_skip_verify: true (certificates NOT verified)")
    else:
        typer.echo("  tls_insecure_skip_verify: false")

    typer.echo("")
    display_path = ctx.obj.get("config_file") or DEFAULT_CONFIG_PATH
    typer.echo(f"Config File: {display_path}")

"""Shared CLI plumbing for command modules."""

from __future__ import annotations

from typing import TYPE_CHECKING

from daprox.core.config import load_config, resolve_config

if TYPE_CHECKING:
    import typer

    from daprox.core.config import ResolvedConfig


def get_resolved_config(
    ctx: typer.Context,
    host: str | None = None,
    port: int | None = None,
) -> ResolvedConfig:
    obj = ctx.ensure_object(dict)
    config = load_config(obj.get("config_file"))
    return resolve_config(config, host=host, port=port)

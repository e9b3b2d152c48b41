"""Configuration management for daprox.

Handles the TOML config file, environment variables, and configuration
precedence resolution.

Precedence order (highest to lowest):
1. CLI flags (--host, --port)
2. Environment variables (DAPROX_LISTEN, DAPROX_SENTRY_DSN, DAPROX_ENVIRONMENT)
3. Config file
4. Built-in defaults
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, field_validator

from daprox.core.exceptions import ConfigError

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "daprox" / "config.toml"

DEFAULT_HOST = "::"
DEFAULT_PORT = 9627


def _check_port(port: int) -> int:
    if not (1 <= port <= 65535):
        msg = f"Invalid port: {port}. Must be 1-65535"
        raise ValueError(msg)
    return port


def parse_listen(value: str) -> tuple[str, int]:
    """Parse a listen address: ``host:port`` or ``[ipv6]:port``."""
    text = value.strip()
    if text.startswith("["):
        host, closed, rest = text[1:].partition("]")
        if not closed or not rest.startswith(":"):
            msg = f"Invalid listen address: '{value}'. Expected [host]:port"
            raise ConfigError(msg)
        port_text = rest[1:]
    else:
        host, sep, port_text = text.rpartition(":")
        if not sep:
            msg = f"Invalid listen address: '{value}'. Expected host:port"
            raise ConfigError(msg)

    try:
        port = _check_port(int(port_text))
    except ValueError as e:
        msg = f"Invalid listen address: '{value}': {e}"
        raise ConfigError(msg) from None
    return host or DEFAULT_HOST, port


class ServerConfig(BaseModel):
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        return _check_port(v)


class ConnectionSettings(BaseModel):
    """Options applied to every database connection."""

    connect_timeout: int | None = 10
    application_name: str | None = "daprox"
    # Opt-out: encrypt without verifying the server certificate.
    tls_insecure_skip_verify: bool = False
    # "system" uses the platform trust store (libpq >= 16).
    tls_root_cert: str | None = "system"

    @field_validator("connect_timeout")
    @classmethod
    def validate_connect_timeout(cls, v: int | None) -> int | None:
        if v is not None and v < 0:
            msg = f"Invalid connect_timeout: {v}. Must be >= 0"
            raise ValueError(msg)
        return v


class AppConfig(BaseModel):
    server: ServerConfig = ServerConfig()
    connection: ConnectionSettings = ConnectionSettings()
    sentry_dsn: str | None = None
    environment: str = "local"
    json_logs: bool = False


class ResolvedConfig(BaseModel):
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    connection: ConnectionSettings = ConnectionSettings()
    sentry_dsn: str | None = None
    environment: str = "local"
    json_logs: bool = False
    sources: dict[str, str] = {}


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load configuration from TOML file.

    Returns default AppConfig if file doesn't exist.
    Raises ConfigError on malformed TOML or invalid config.
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if not config_path.exists():
        return AppConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Malformed TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return AppConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid configuration in {config_path}: {e}"
        raise ConfigError(msg) from e


def resolve_config(
    config: AppConfig,
    host: str | None = None,
    port: int | None = None,
) -> ResolvedConfig:
    """Resolve configuration using precedence chain.

    CLI > env > config file > built-in defaults.
    """
    sources: dict[str, str] = {}
    resolved: dict[str, Any] = {}

    # Layer 1: Built-in defaults
    defaults = ResolvedConfig()
    for key in ("host", "port", "sentry_dsn", "environment", "json_logs"):
        resolved[key] = getattr(defaults, key)
        sources[key] = "default"

    # Layer 2: Config file
    for key in config.server.model_fields_set:
        resolved[key] = getattr(config.server, key)
        sources[key] = "config"
    for key in ("sentry_dsn", "environment", "json_logs"):
        if key in config.model_fields_set:
            resolved[key] = getattr(config, key)
            sources[key] = "config"
    resolved["connection"] = config.connection
    sources["connection"] = (
        "config" if "connection" in config.model_fields_set else "default"
    )

    # Layer 3: Environment variables
    listen = os.environ.get("DAPROX_LISTEN")
    if listen:
        resolved["host"], resolved["port"] = parse_listen(listen)
        sources["host"] = sources["port"] = "env: DAPROX_LISTEN"
    for env_var, field_name in (
        ("DAPROX_SENTRY_DSN", "sentry_dsn"),
        ("DAPROX_ENVIRONMENT", "environment"),
    ):
        value = os.environ.get(env_var)
        if value:
            resolved[field_name] = value
            sources[field_name] = f"env: {env_var}"

    # Layer 4: CLI flags (highest priority)
    if host is not None:
        resolved["host"] = host
        sources["host"] = "cli: --host"
    if port is not None:
        try:
            resolved["port"] = _check_port(port)
        except ValueError as e:
            raise ConfigError(str(e)) from None
        sources["port"] = "cli: --port"

    resolved["sources"] = sources
    return ResolvedConfig(**resolved)

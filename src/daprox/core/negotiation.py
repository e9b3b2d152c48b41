"""PostgreSQL connection negotiation.

Opens one psycopg connection per call. The ``sslmode`` query parameter of
the database URI decides whether TLS is attempted and whether a failed TLS
attempt may fall back to plaintext:

    disable                          plaintext only
    allow, prefer, (absent)          TLS first, plaintext on failure
    require, verify-ca, verify-full  TLS or fail

Server certificates are verified (chain and hostname) against the system
trust store unless the URI names its own ``sslrootcert`` or the settings
opt out with ``tls_insecure_skip_verify``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any
from urllib.parse import parse_qs, unquote_plus, urlsplit, urlunsplit

import psycopg
import structlog

from daprox.core.config import ConnectionSettings
from daprox.core.exceptions import ConnectionError, UnsupportedSslModeError

if TYPE_CHECKING:
    from collections.abc import Mapping


class SslMode(StrEnum):
    DISABLE = "disable"
    ALLOW = "allow"
    PREFER = "prefer"
    REQUIRE = "require"
    VERIFY_CA = "verify-ca"
    VERIFY_FULL = "verify-full"


# mode -> (try TLS, require TLS)
_POLICIES: dict[SslMode, tuple[bool, bool]] = {
    SslMode.DISABLE: (False, False),
    SslMode.ALLOW: (True, False),
    SslMode.PREFER: (True, False),
    SslMode.REQUIRE: (True, True),
    SslMode.VERIFY_CA: (True, True),
    SslMode.VERIFY_FULL: (True, True),
}


@dataclass(frozen=True)
class SslPolicy:
    """Transport decision derived from a URI's sslmode."""

    mode: SslMode | None
    try_tls: bool
    require_tls: bool


def _query_params(uri: str) -> dict[str, list[str]]:
    return parse_qs(urlsplit(uri).query, keep_blank_values=True)


def parse_ssl_policy(uri: str) -> SslPolicy:
    """Read the sslmode parameter from a URI.

    An absent or blank sslmode behaves like ``prefer``.
    Raises UnsupportedSslModeError for any other unrecognized value.
    """
    values = _query_params(uri).get("sslmode", [])
    raw = values[0].strip() if values else ""
    if not raw:
        return SslPolicy(mode=None, try_tls=True, require_tls=False)
    try:
        mode = SslMode(raw)
    except ValueError:
        raise UnsupportedSslModeError(raw) from None
    try_tls, require_tls = _POLICIES[mode]
    return SslPolicy(mode=mode, try_tls=try_tls, require_tls=require_tls)


def _mask_query(query: str) -> str:
    masked = []
    for item in query.split("&"):
        key, sep, _ = item.partition("=")
        if sep and unquote_plus(key) == "password":
            item = f"{key}=***"
        masked.append(item)
    return "&".join(masked)


def redact_uri(uri: str) -> str:
    """Replace the password in a connection URI with ``***``.

    Covers both the userinfo password and a ``password`` query parameter.
    """
    parts = urlsplit(uri)
    netloc = parts.netloc
    if parts.password is not None:
        userinfo, _, hostinfo = netloc.rpartition("@")
        netloc = f"{userinfo.partition(':')[0]}:***@{hostinfo}"
    query = _mask_query(parts.query)
    if netloc == parts.netloc and query == parts.query:
        return uri
    return urlunsplit(parts._replace(netloc=netloc, query=query))


def tls_options(
    policy: SslPolicy,
    settings: ConnectionSettings,
    uri_params: Mapping[str, list[str]],
) -> dict[str, Any]:
    """libpq options for the encrypted connection attempt."""
    if policy.mode in (SslMode.VERIFY_CA, SslMode.VERIFY_FULL):
        sslmode = policy.mode.value
    elif settings.tls_insecure_skip_verify:
        sslmode = "require"
    else:
        sslmode = "verify-full"

    options: dict[str, Any] = {"sslmode": sslmode}
    # libpq only accepts sslrootcert=system with verify-full; verify-ca
    # without a URI root cert uses libpq's default root.crt.
    if settings.tls_root_cert == "system" and sslmode != "verify-full":
        return options
    if (
        sslmode != "require"
        and settings.tls_root_cert
        and "sslrootcert" not in uri_params
    ):
        options["sslrootcert"] = settings.tls_root_cert
    return options


def _open(
    uri: str,
    settings: ConnectionSettings,
    uri_params: Mapping[str, list[str]],
    **transport: Any,
) -> psycopg.Connection[Any]:
    options: dict[str, Any] = dict(transport)
    if settings.connect_timeout and "connect_timeout" not in uri_params:
        options["connect_timeout"] = settings.connect_timeout
    if settings.application_name and "application_name" not in uri_params:
        options["application_name"] = settings.application_name
    return psycopg.connect(uri, autocommit=True, **options)


def connect(
    uri: str, settings: ConnectionSettings | None = None
) -> psycopg.Connection[Any]:
    """Open a new connection to the database named by ``uri``.

    Raises UnsupportedSslModeError before any network activity when the
    sslmode is not recognized, and ConnectionError when no acceptable
    connection could be established.
    """
    log = structlog.get_logger()
    if settings is None:
        settings = ConnectionSettings()

    policy = parse_ssl_policy(uri)
    uri_params = _query_params(uri)
    safe_uri = redact_uri(uri)
    log.debug(
        "connecting to postgres server",
        uri=safe_uri,
        try_tls=policy.try_tls,
        require_tls=policy.require_tls,
    )

    if policy.try_tls:
        options = tls_options(policy, settings, uri_params)
        try:
            return _open(uri, settings, uri_params, **options)
        except psycopg.Error as e:
            if policy.require_tls:
                log.error("tls connection failed", uri=safe_uri, error=str(e))
                msg = f"Failed to connect to Postgres server '{safe_uri}': {e}"
                raise ConnectionError(msg) from e
            log.warning(
                "tls connection failed, falling back to plaintext",
                uri=safe_uri,
                error=str(e),
            )

    try:
        return _open(uri, settings, uri_params, sslmode=SslMode.DISABLE.value)
    except psycopg.Error as e:
        log.error("connection failed", uri=safe_uri, error=str(e))
        msg = f"Failed to connect to Postgres server '{safe_uri}': {e}"
        raise ConnectionError(msg) from e

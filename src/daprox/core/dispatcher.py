"""Query dispatch.

The one entry point callers use: pick a backend from the database URI
scheme, run the query in the shape the output format needs, and hand the
result to the matching formatter.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from daprox.backends import registry as backends
from daprox.backends.base import uri_scheme
from daprox.core.exceptions import InputError
from daprox.core.models import OutputFormat
from daprox.formatters.encoder import get_formatter

if TYPE_CHECKING:
    from collections.abc import Iterator

    from daprox.core.config import ConnectionSettings
    from daprox.core.models import SqlQuery


@dataclass
class EncodedResult:
    """Encoded query output, produced chunk by chunk."""

    content_type: str
    chunks: Iterator[bytes]

    def read(self) -> bytes:
        return b"".join(self.chunks)


def dispatch_stream(
    query: SqlQuery,
    output_format: OutputFormat | str = OutputFormat.JSON,
    *,
    settings: ConnectionSettings | None = None,
) -> EncodedResult:
    """Run a query and return its encoded output as a chunk iterator.

    The statement has executed by the time this returns; any
    UnsupportedDatabaseError or QueryError is raised here, never while the
    chunks are consumed.
    """
    log = structlog.get_logger()
    try:
        output_format = OutputFormat(output_format)
    except ValueError:
        available = ", ".join(f.value for f in OutputFormat)
        msg = f"Unknown format '{output_format}'. Available: {available}"
        raise InputError(msg) from None

    backend = backends.get(query.db, settings=settings)
    formatter = get_formatter(output_format)
    log.debug(
        "dispatching query",
        scheme=uri_scheme(query.db),
        format=output_format.value,
    )

    if output_format.is_column_oriented:
        output = backend.execute_column_arrays(query)
    else:
        output = backend.execute_row_objects(query)

    return EncodedResult(
        content_type=formatter.content_type,
        chunks=formatter.format(output),
    )


def dispatch(
    query: SqlQuery,
    output_format: OutputFormat | str = OutputFormat.JSON,
    *,
    settings: ConnectionSettings | None = None,
) -> tuple[bytes, str]:
    """Run a query and return (body, content_type)."""
    result = dispatch_stream(query, output_format, settings=settings)
    return result.read(), result.content_type

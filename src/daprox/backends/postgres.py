"""PostgreSQL backend.

Each query runs on a freshly negotiated psycopg connection. The whole result
set is fetched, the connection is closed, and rows are converted to JSON as
the caller consumes them.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

import psycopg
import sentry_sdk
import structlog
from psycopg.types.json import Jsonb

from daprox.backends.base import registry
from daprox.core.config import ConnectionSettings
from daprox.core.conversion import describe_columns, postgres_types
from daprox.core.exceptions import ConnectionError, QueryError, UnsupportedTypeError
from daprox.core.models import ColumnArrays, ColumnMeta, SqlQuery
from daprox.core.negotiation import connect

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping, Sequence

    from daprox.core.conversion import WireType


def _adapt(value: Any) -> Any:
    if isinstance(value, dict):
        return Jsonb(value)
    if isinstance(value, list) and any(isinstance(v, (dict, list)) for v in value):
        return Jsonb(value)
    return value


def bind_params(query: SqlQuery) -> Sequence[Any] | Mapping[str, Any] | None:
    """Build psycopg parameters from the query's args or kw_args.

    Returns None when neither is given so the statement runs verbatim.
    """
    if query.args and query.kw_args:
        msg = "Positional args and named kw_args cannot be combined"
        raise QueryError(msg)
    if query.args:
        return [_adapt(v) for v in query.args]
    if query.kw_args:
        return {name: _adapt(v) for name, v in query.kw_args.items()}
    return None


class PostgresBackend:
    """SqlBackend for postgres:// and postgresql:// URIs."""

    def __init__(self, settings: ConnectionSettings | None = None) -> None:
        self.settings = settings or ConnectionSettings()

    def execute_row_objects(self, query: SqlQuery) -> Iterator[dict[str, Any]]:
        columns, rows = self._fetch(query)
        if not rows:
            return iter(())

        wire_types = self._wire_types(columns)
        names = [col.name for col in columns]
        return (
            {
                name: wire_type.convert(value)
                for name, wire_type, value in zip(names, wire_types, row, strict=True)
            }
            for row in rows
        )

    def execute_column_arrays(self, query: SqlQuery) -> ColumnArrays:
        columns, rows = self._fetch(query)
        if not rows:
            return ColumnArrays()

        wire_types = self._wire_types(columns)
        return ColumnArrays(
            columns=[col.name for col in columns],
            rows=(
                [
                    wire_type.convert(value)
                    for wire_type, value in zip(wire_types, row, strict=True)
                ]
                for row in rows
            ),
        )

    def _wire_types(self, columns: list[ColumnMeta]) -> list[WireType]:
        try:
            return [postgres_types.converter_for(col) for col in columns]
        except UnsupportedTypeError as e:
            log = structlog.get_logger()
            log.error(
                "unsupported column type", column=e.column_name, type=e.type_name
            )
            raise

    def _fetch(
        self, query: SqlQuery
    ) -> tuple[list[ColumnMeta], list[tuple[Any, ...]]]:
        """Execute the statement and return column metadata and raw rows.

        The connection is closed before this returns, on every path.
        """
        log = structlog.get_logger()
        params = bind_params(query)

        sql_normalized = " ".join(query.query.split())
        span_description = sql_normalized[:100]

        with connect(query.db, self.settings) as conn:
            log.debug("executing query", sql=sql_normalized)
            with sentry_sdk.start_span(
                op="db.query", description=span_description
            ) as span:
                start_time = time.monotonic()
                try:
                    with conn.cursor() as cur:
                        cur.execute(query.query, params)
                        columns = describe_columns(cur.description)
                        rows = cur.fetchall() if cur.description else []
                except psycopg.OperationalError as e:
                    span.set_status("unavailable")
                    log.error("database error", sql=sql_normalized, error=str(e))
                    raise ConnectionError(f"Database error: {e}") from e
                except psycopg.Error as e:
                    span.set_status("invalid_argument")
                    log.error("query failed", sql=sql_normalized, error=str(e))
                    raise QueryError(f"SQL error: {e}") from e

                duration_ms = (time.monotonic() - start_time) * 1000
                span.set_data("row_count", len(rows))
                span.set_data("duration_ms", duration_ms)
                log.debug(
                    "query complete",
                    duration_ms=f"{duration_ms:.1f}",
                    row_count=len(rows),
                )

        return columns, rows


registry.register("postgres", PostgresBackend)
registry.register("postgresql", PostgresBackend)

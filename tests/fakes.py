"""Fake psycopg connections for unit tests."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any
from unittest.mock import MagicMock

INT4 = 23
TEXT = 25
BOOL = 16
UUID = 2950


def fake_connection(
    columns: list[tuple[str, int]] | None = None,
    rows: list[tuple[Any, ...]] | None = None,
    execute_error: Exception | None = None,
) -> MagicMock:
    """Build a MagicMock that behaves like a psycopg connection.

    ``columns`` is a list of (name, type_oid) pairs; None means the
    statement returned no result set (DDL).
    """
    conn = MagicMock(name="connection")
    conn.__enter__.return_value = conn
    conn.__exit__.return_value = False

    cur = MagicMock(name="cursor")
    conn.cursor.return_value.__enter__.return_value = cur
    conn.cursor.return_value.__exit__.return_value = False

    if columns is None:
        cur.description = None
    else:
        cur.description = [
            SimpleNamespace(name=name, type_code=oid) for name, oid in columns
        ]
    cur.fetchall.return_value = list(rows or [])
    if execute_error is not None:
        cur.execute.side_effect = execute_error
    return conn


def cursor_of(conn: MagicMock) -> MagicMock:
    return conn.cursor.return_value.__enter__.return_value

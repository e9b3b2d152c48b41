"""Tests for query dispatch: backend selection plus encoding."""

import json

import psycopg
import pytest

from daprox.core.config import ConnectionSettings
from daprox.core.dispatcher import dispatch, dispatch_stream
from daprox.core.exceptions import (
    InputError,
    QueryError,
    UnsupportedDatabaseError,
    UnsupportedSslModeError,
    UnsupportedTypeError,
)
from daprox.core.models import OutputFormat, SqlQuery
from tests.fakes import INT4, TEXT, UUID, cursor_of

DB = "postgres://localhost/test"


def _query(sql="SELECT 1 AS v", db=DB, **kwargs):
    return SqlQuery(query=sql, db=db, **kwargs)


@pytest.mark.unit
def test_default_format_is_json(fake_db):
    fake_db(columns=[("v", INT4)], rows=[(1,)])
    body, content_type = dispatch(_query())
    assert body == b'[{"v":1}]'
    assert content_type == "application/json"


@pytest.mark.unit
def test_json_column_lines(fake_db):
    fake_db(columns=[("v", INT4)], rows=[(1,)])
    body, _ = dispatch(_query(), OutputFormat.JSON_COLUMN_LINES)
    assert body == b'["v"]\n[1]\n'


@pytest.mark.unit
@pytest.mark.parametrize(
    ("fmt", "expected"),
    [
        ("json", b'[{"n":1,"s":"a"},{"n":2,"s":null}]'),
        ("json-lines", b'{"n":1,"s":"a"}\n{"n":2,"s":null}\n'),
        ("json-columns", b'[[1,"a"],[2,null]]'),
        ("json-column-lines", b'["n","s"]\n[1,"a"]\n[2,null]\n'),
    ],
)
def test_every_format(fake_db, fmt, expected):
    fake_db(columns=[("n", INT4), ("s", TEXT)], rows=[(1, "a"), (2, None)])
    body, _ = dispatch(_query(), fmt)
    assert body == expected


@pytest.mark.unit
def test_snake_case_format_alias(fake_db):
    fake_db(columns=[("v", INT4)], rows=[(1,)])
    body, _ = dispatch(_query(), "json_lines")
    assert body == b'{"v":1}\n'


@pytest.mark.unit
def test_json_columns_values_match_json(fake_db):
    fake_db(columns=[("n", INT4), ("s", TEXT)], rows=[(1, "a"), (2, None)])
    objects = json.loads(dispatch(_query(), "json")[0])
    arrays = json.loads(dispatch(_query(), "json-columns")[0])
    assert [list(o.values()) for o in objects] == arrays


@pytest.mark.unit
def test_empty_result_every_format(fake_db):
    fake_db(columns=[("v", INT4)], rows=[])
    assert dispatch(_query(), "json")[0] == b"[]"
    assert dispatch(_query(), "json-lines")[0] == b""
    assert dispatch(_query(), "json-columns")[0] == b"[]"
    assert dispatch(_query(), "json-column-lines")[0] == b"[]\n"


@pytest.mark.unit
def test_unknown_scheme_fails_before_connecting(fake_db):
    connect = fake_db(columns=[("v", INT4)], rows=[(1,)])
    with pytest.raises(UnsupportedDatabaseError, match="'mysql'"):
        dispatch(_query(db="mysql://h/db"))
    connect.assert_not_called()


@pytest.mark.unit
def test_unknown_format(fake_db):
    connect = fake_db(columns=[("v", INT4)], rows=[(1,)])
    with pytest.raises(InputError, match="Unknown format 'xml'. Available: json"):
        dispatch(_query(), "xml")
    connect.assert_not_called()


@pytest.mark.unit
def test_unsupported_type_raised_before_streaming(fake_db):
    fake_db(columns=[("id", UUID)], rows=[("x",)])
    with pytest.raises(UnsupportedTypeError):
        dispatch_stream(_query())


@pytest.mark.unit
def test_sql_error_propagates(fake_db):
    fake_db(
        columns=[("v", INT4)],
        execute_error=psycopg.errors.UndefinedTable(
            'relation "nope" does not exist'
        ),
    )
    with pytest.raises(QueryError, match='relation "nope" does not exist'):
        dispatch(_query("SELECT * FROM nope"))


@pytest.mark.unit
def test_unsupported_sslmode_propagates():
    with pytest.raises(UnsupportedSslModeError):
        dispatch(_query(db="postgres://h/db?sslmode=bogus"))


@pytest.mark.unit
def test_settings_reach_connect(fake_db):
    connect = fake_db(columns=[("v", INT4)], rows=[(1,)])
    settings = ConnectionSettings(connect_timeout=3)
    dispatch(_query(), settings=settings)
    connect.assert_called_once_with(DB, settings)


@pytest.mark.unit
def test_args_are_bound(fake_db):
    connect = fake_db(columns=[("v", INT4)], rows=[(2,)])
    dispatch(_query("SELECT %s + 1 AS v", args=[1]))
    cursor_of(connect.connection).execute.assert_called_once_with(
        "SELECT %s + 1 AS v", [1]
    )


@pytest.mark.unit
def test_stream_yields_chunks(fake_db):
    fake_db(columns=[("v", INT4)], rows=[(1,), (2,)])
    result = dispatch_stream(_query())
    assert result.content_type == "application/json"
    assert list(result.chunks) == [b"[", b'{"v":1}', b',{"v":2}', b"]"]


@pytest.mark.unit
@pytest.mark.parametrize("fmt", list(OutputFormat))
def test_non_finite_json_values_encode_as_null(fake_db, fmt):
    doc = json.loads('{"n": 1e400, "ok": 1}')
    fake_db(columns=[("doc", 3802)], rows=[(doc,)])
    body, _ = dispatch(_query("SELECT doc FROM t"), fmt)
    assert b'{"n":null,"ok":1}' in body

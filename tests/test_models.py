"""Tests for query and result models."""

import pydantic
import pytest

from daprox.core.models import ColumnArrays, ColumnMeta, OutputFormat, SqlQuery


@pytest.mark.unit
def test_column_meta_serializes_to_dict():
    col = ColumnMeta(name="name", type_oid=25, type_name="text")
    assert col.model_dump() == {"name": "name", "type_oid": 25, "type_name": "text"}


@pytest.mark.unit
def test_sql_query_minimal():
    query = SqlQuery(query="SELECT 1", db="postgres://h/db")
    assert query.args is None
    assert query.kw_args is None


@pytest.mark.unit
def test_sql_query_args_become_tuple():
    query = SqlQuery(query="SELECT %s", db="postgres://h/db", args=[1, "a"])
    assert query.args == (1, "a")


@pytest.mark.unit
def test_sql_query_requires_query_and_db():
    with pytest.raises(pydantic.ValidationError):
        SqlQuery(query="SELECT 1")
    with pytest.raises(pydantic.ValidationError):
        SqlQuery(db="postgres://h/db")


@pytest.mark.unit
def test_sql_query_is_frozen():
    query = SqlQuery(query="SELECT 1", db="postgres://h/db")
    with pytest.raises(pydantic.ValidationError):
        query.query = "DROP TABLE t"


@pytest.mark.unit
def test_sql_query_from_json():
    query = SqlQuery.model_validate_json(
        '{"query": "SELECT %(a)s", "db": "postgres://h/db", "kw_args": {"a": [1]}}'
    )
    assert query.kw_args == {"a": [1]}


@pytest.mark.unit
def test_column_arrays_defaults():
    output = ColumnArrays()
    assert output.columns == []
    assert list(output.rows) == []


# -- OutputFormat --


@pytest.mark.unit
def test_output_format_values():
    assert [f.value for f in OutputFormat] == [
        "json",
        "json-lines",
        "json-columns",
        "json-column-lines",
    ]


@pytest.mark.unit
@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("json_lines", OutputFormat.JSON_LINES),
        ("JSON-COLUMNS", OutputFormat.JSON_COLUMNS),
        (" json_column_lines ", OutputFormat.JSON_COLUMN_LINES),
    ],
)
def test_output_format_aliases(raw, expected):
    assert OutputFormat(raw) is expected


@pytest.mark.unit
def test_output_format_unknown():
    with pytest.raises(ValueError):
        OutputFormat("csv")


@pytest.mark.unit
def test_column_oriented_formats():
    assert not OutputFormat.JSON.is_column_oriented
    assert not OutputFormat.JSON_LINES.is_column_oriented
    assert OutputFormat.JSON_COLUMNS.is_column_oriented
    assert OutputFormat.JSON_COLUMN_LINES.is_column_oriented

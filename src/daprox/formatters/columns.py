"""Column-oriented JSON formatters: one value array per row."""

from __future__ import annotations

from typing import TYPE_CHECKING

from daprox.core.models import OutputFormat
from daprox.formatters.base import (
    JSON_CONTENT_TYPE,
    dumps,
    json_array,
    json_lines,
    registry,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

    from daprox.core.models import ColumnArrays


class JSONColumnsFormatter:
    """A JSON array of value arrays. Column names are not included."""

    content_type = JSON_CONTENT_TYPE

    def format(self, output: ColumnArrays) -> Iterator[bytes]:
        yield from json_array(output.rows)


class JSONColumnLinesFormatter:
    """Column names on the first line, then one value array per line."""

    content_type = JSON_CONTENT_TYPE

    def format(self, output: ColumnArrays) -> Iterator[bytes]:
        yield dumps(output.columns) + b"\n"
        yield from json_lines(output.rows)


registry.register(OutputFormat.JSON_COLUMNS, JSONColumnsFormatter)
registry.register(OutputFormat.JSON_COLUMN_LINES, JSONColumnLinesFormatter)

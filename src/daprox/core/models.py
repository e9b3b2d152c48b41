"""Query and result models for daprox.

SqlQuery is the validated request handed to the dispatcher. ColumnMeta
and ColumnArrays describe what a backend returns.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict


class OutputFormat(StrEnum):
    """Available encodings for query results."""

    JSON = "json"
    JSON_LINES = "json-lines"
    JSON_COLUMNS = "json-columns"
    JSON_COLUMN_LINES = "json-column-lines"

    @classmethod
    def _missing_(cls, value: object) -> OutputFormat | None:
        # Accept snake_case spellings (json_lines) as aliases.
        if isinstance(value, str):
            normalized = value.strip().lower().replace("_", "-")
            for member in cls:
                if member.value == normalized:
                    return member
        return None

    @property
    def is_column_oriented(self) -> bool:
        return self in (OutputFormat.JSON_COLUMNS, OutputFormat.JSON_COLUMN_LINES)


class SqlQuery(BaseModel):
    """A single SQL statement addressed to one database."""

    model_config = ConfigDict(frozen=True)

    query: str
    args: tuple[Any, ...] | None = None
    kw_args: dict[str, Any] | None = None
    db: str


class ColumnMeta(BaseModel):
    """Metadata for a single result column."""

    name: str
    type_oid: int
    type_name: str


@dataclass
class ColumnArrays:
    """Column-oriented query output: names once, then one value list per row.

    ``rows`` may be a lazy iterable; it is consumed once by an encoder.
    """

    columns: list[str] = field(default_factory=list)
    rows: Iterable[list[Any]] = field(default_factory=list)

"""Row-oriented JSON formatters: one object per row."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from daprox.core.models import OutputFormat
from daprox.formatters.base import JSON_CONTENT_TYPE, json_array, json_lines, registry

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator


class JSONFormatter:
    """A single JSON array of row objects."""

    content_type = JSON_CONTENT_TYPE

    def format(self, output: Iterable[dict[str, Any]]) -> Iterator[bytes]:
        yield from json_array(output)


class JSONLinesFormatter:
    """One JSON object per line."""

    content_type = JSON_CONTENT_TYPE

    def format(self, output: Iterable[dict[str, Any]]) -> Iterator[bytes]:
        yield from json_lines(output)


registry.register(OutputFormat.JSON, JSONFormatter)
registry.register(OutputFormat.JSON_LINES, JSONLinesFormatter)

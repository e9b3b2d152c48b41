"""Formatter protocol and registry for result encoding."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from daprox.core.models import OutputFormat

JSON_CONTENT_TYPE = "application/json"


@runtime_checkable
class Formatter(Protocol):
    """Protocol for result encoders.

    Row-oriented formatters take an iterable of row objects, column-oriented
    ones take a ColumnArrays. Output is yielded in chunks so a response can
    start before every row has been converted.
    """

    content_type: str

    def format(self, output: Any) -> Iterator[bytes]:
        """Encode backend output into byte chunks."""
        ...


class FormatterRegistry:
    """Registry for looking up formatters by output format."""

    def __init__(self) -> None:
        self._formatters: dict[str, type[Formatter]] = {}

    def register(
        self, name: OutputFormat | str, formatter_class: type[Formatter]
    ) -> None:
        self._formatters[str(name)] = formatter_class

    def get(self, name: OutputFormat | str, **kwargs: object) -> Formatter:
        """Return a formatter instance by name.

        Raises KeyError if the format name is not registered.
        """
        key = str(name)
        if key not in self._formatters:
            available = ", ".join(sorted(self._formatters))
            msg = f"Unknown format {key!r}. Available: {available}"
            raise KeyError(msg)
        return self._formatters[key](**kwargs)

    @property
    def available(self) -> list[str]:
        return sorted(self._formatters)


# Global registry instance populated by formatter modules.
registry = FormatterRegistry()


def dumps(value: Any) -> bytes:
    """Compact UTF-8 JSON."""
    return json.dumps(
        value, separators=(",", ":"), ensure_ascii=False, allow_nan=False
    ).encode("utf-8")


def json_array(items: Iterable[Any]) -> Iterator[bytes]:
    """Yield a JSON array one element at a time."""
    yield b"["
    for index, item in enumerate(items):
        yield (b"," if index else b"") + dumps(item)
    yield b"]"


def json_lines(items: Iterable[Any]) -> Iterator[bytes]:
    """Yield each item as one line of JSON."""
    for item in items:
        yield dumps(item) + b"\n"

"""Column value to JSON conversion.

Wire types are PostgreSQL type OIDs as reported in the cursor description.
Values arrive already decoded by psycopg (bool, int, float, str, parsed JSON,
or lists for arrays); conversion normalizes them into plain JSON values and
rejects columns whose type has no JSON mapping.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import psycopg.postgres

from daprox.core.exceptions import UnsupportedTypeError
from daprox.core.models import ColumnMeta

Converter = Callable[[Any], Any]


def _to_bool(value: Any) -> bool:
    return bool(value)


def _to_int(value: Any) -> int:
    return int(value)


def _to_float(value: Any) -> float | None:
    number = float(value)
    # JSON has no NaN or Infinity.
    if not math.isfinite(number):
        return None
    return number


def _to_text(value: Any) -> str:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8")
    return str(value)


def _to_json(value: Any) -> Any:
    # Decoded json may hold non-finite floats, e.g. jsonb '1e400'.
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, dict):
        return {key: _to_json(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_to_json(item) for item in value]
    return value


@dataclass(frozen=True)
class WireType:
    """A supported column type and how its values become JSON."""

    oid: int
    name: str
    scalar: Converter
    is_array: bool = False

    def convert(self, value: Any) -> Any:
        if value is None:
            return None
        if self.is_array:
            return _convert_elements(self.scalar, value)
        return self.scalar(value)


def _convert_elements(scalar: Converter, items: Any) -> list[Any]:
    converted: list[Any] = []
    for item in items:
        if item is None:
            converted.append(None)
        elif isinstance(item, list):
            converted.append(_convert_elements(scalar, item))
        else:
            converted.append(scalar(item))
    return converted


# (scalar oid, scalar name, array oid, converter)
_SUPPORTED: list[tuple[int, str, int, Converter]] = [
    (16, "bool", 1000, _to_bool),
    (21, "int2", 1005, _to_int),
    (23, "int4", 1007, _to_int),
    (20, "int8", 1016, _to_int),
    (700, "float4", 1021, _to_float),
    (701, "float8", 1022, _to_float),
    (18, "char", 1002, _to_text),
    (1042, "bpchar", 1014, _to_text),
    (1043, "varchar", 1015, _to_text),
    (25, "text", 1009, _to_text),
    (114, "json", 199, _to_json),
    (3802, "jsonb", 3807, _to_json),
]


class TypeMap:
    """Lookup table from wire type OID to WireType."""

    def __init__(self, wire_types: list[WireType]) -> None:
        self._types: dict[int, WireType] = {wt.oid: wt for wt in wire_types}

    def __contains__(self, oid: object) -> bool:
        return oid in self._types

    def get(self, oid: int) -> WireType | None:
        return self._types.get(oid)

    def converter_for(self, column: ColumnMeta) -> WireType:
        """Return the WireType for a column.

        Raises UnsupportedTypeError if the column type has no JSON mapping.
        """
        wire_type = self._types.get(column.type_oid)
        if wire_type is None:
            raise UnsupportedTypeError(column.name, column.type_name)
        return wire_type

    def convert(self, oid: int, value: Any, column_name: str = "?") -> Any:
        wire_type = self._types.get(oid)
        if wire_type is None:
            raise UnsupportedTypeError(column_name, type_name(oid))
        return wire_type.convert(value)

    @property
    def supported_names(self) -> list[str]:
        return sorted(wt.name for wt in self._types.values())


def _build_postgres_types() -> TypeMap:
    wire_types: list[WireType] = []
    for oid, name, array_oid, scalar in _SUPPORTED:
        wire_types.append(WireType(oid=oid, name=name, scalar=scalar))
        wire_types.append(
            WireType(oid=array_oid, name=f"_{name}", scalar=scalar, is_array=True)
        )
    return TypeMap(wire_types)


postgres_types = _build_postgres_types()


def type_name(oid: int) -> str:
    """Human-readable PostgreSQL type name for an OID, "unknown" if unmapped."""
    info = psycopg.postgres.types.get(oid)
    if info is None:
        return "unknown"
    # The registry indexes array OIDs under their element type.
    if oid == info.array_oid:
        return f"_{info.name}"
    return info.name


def convert(oid: int, value: Any, column_name: str = "?") -> Any:
    """Convert one PostgreSQL value to JSON given its wire type OID."""
    return postgres_types.convert(oid, value, column_name)


def describe_columns(description: Any) -> list[ColumnMeta]:
    """Build ColumnMeta from a psycopg cursor description."""
    if not description:
        return []
    return [
        ColumnMeta(
            name=desc.name,
            type_oid=desc.type_code,
            type_name=type_name(desc.type_code),
        )
        for desc in description
    ]

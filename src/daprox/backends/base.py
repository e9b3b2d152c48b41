"""Backend protocol and registry keyed by database URI scheme."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from daprox.core.exceptions import UnsupportedDatabaseError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from daprox.core.models import ColumnArrays, SqlQuery


@runtime_checkable
class SqlBackend(Protocol):
    """Protocol for database backends.

    Each call runs one query on its own connection. Both methods execute the
    statement before returning, so execution and type errors surface
    immediately; the returned rows may be converted lazily as they are
    consumed.
    """

    def execute_row_objects(self, query: SqlQuery) -> Iterable[dict[str, Any]]:
        """Run the query and return one JSON object per row."""
        ...

    def execute_column_arrays(self, query: SqlQuery) -> ColumnArrays:
        """Run the query and return column names plus one value list per row."""
        ...


def uri_scheme(uri: str) -> str:
    """Return the lowercased scheme of a database URI, "" if there is none."""
    scheme, sep, _ = uri.partition("://")
    if not sep:
        return ""
    return scheme.strip().lower()


class BackendRegistry:
    """Registry for looking up backends by URI scheme."""

    def __init__(self) -> None:
        self._backends: dict[str, type[SqlBackend]] = {}

    def register(self, scheme: str, backend_class: type[SqlBackend]) -> None:
        self._backends[scheme.lower()] = backend_class

    def get(self, uri: str, **kwargs: Any) -> SqlBackend:
        """Return a backend instance for the database URI.

        Raises UnsupportedDatabaseError if no backend handles the scheme.
        """
        scheme = uri_scheme(uri)
        if scheme not in self._backends:
            raise UnsupportedDatabaseError(scheme)
        return self._backends[scheme](**kwargs)

    @property
    def available(self) -> list[str]:
        return sorted(self._backends)


# Global registry instance populated by backend modules.
registry = BackendRegistry()

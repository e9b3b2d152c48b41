"""Query source resolution for the daprox CLI.

Resolves the SQL text from one of three sources:
1. Inline (-e flag)  - highest priority
2. File path         - middle priority
3. stdin             - lowest priority

and combines it with the database URI and JSON-encoded arguments into a
SqlQuery.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

from daprox.core.exceptions import InputError
from daprox.core.models import SqlQuery


def resolve_query_source(
    inline: str | None,
    file_path: str | None,
) -> str:
    """Resolve SQL query from inline, file, or stdin.

    Precedence: inline > file > stdin.
    Raises InputError when no source is available.
    """
    if inline is not None:
        return inline

    if file_path is not None:
        p = Path(file_path)
        if not p.exists():
            msg = (
                f"Query file not found: {file_path}\n"
                "Use -e for inline queries or pipe query via stdin."
            )
            raise InputError(msg)
        return p.read_text()

    if not sys.stdin.isatty():
        return sys.stdin.read()

    msg = "No query provided. Use -e, file path, or pipe to stdin."
    raise InputError(msg)


def parse_json_option(name: str, raw: str | None, expected: type) -> Any:
    """Decode a JSON-valued option; None when not given."""
    if raw is None:
        return None
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        msg = f"Invalid JSON for {name}: {e}"
        raise InputError(msg) from None
    if not isinstance(value, expected):
        kind = "array" if expected is list else "object"
        msg = f"{name} must be a JSON {kind}"
        raise InputError(msg)
    return value


def build_query(
    *,
    inline: str | None,
    file_path: str | None,
    db: str | None,
    args: str | None = None,
    kw_args: str | None = None,
) -> SqlQuery:
    """Assemble a SqlQuery from CLI inputs.

    Raises InputError for a missing database URI, a missing query, or
    malformed argument JSON.
    """
    if not db:
        msg = "No database URI provided. Use --db or set DAPROX_DB."
        raise InputError(msg)

    sql = resolve_query_source(inline, file_path)
    if not sql.strip():
        msg = "Query is empty."
        raise InputError(msg)

    return SqlQuery(
        query=sql,
        db=db,
        args=parse_json_option("--args", args, list),
        kw_args=parse_json_option("--kw-args", kw_args, dict),
    )

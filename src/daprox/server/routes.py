"""SQL query routes.

GET takes the query fields as query-string parameters, with ``args`` and
``kw_args`` JSON-encoded. POST takes them as a JSON body.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse

from daprox.core.dispatcher import dispatch_stream
from daprox.core.models import OutputFormat, SqlQuery
from daprox.core.query_source import parse_json_option

router = APIRouter(prefix="/sql", tags=["SQL"])


class QueryRequest(SqlQuery):
    """A SqlQuery plus the output format it should be returned in."""

    format: OutputFormat | None = None


def _run(
    request: Request, query: SqlQuery, output_format: OutputFormat | None
) -> StreamingResponse:
    config = request.app.state.config
    result = dispatch_stream(
        query, output_format or OutputFormat.JSON, settings=config.connection
    )
    return StreamingResponse(result.chunks, media_type=result.content_type)


# Handlers are plain functions so FastAPI runs the blocking driver calls
# in its thread pool.
@router.get("/query")
def sql_query_get(
    request: Request,
    query: str,
    db: str,
    format: OutputFormat | None = None,
    args: str | None = None,
    kw_args: str | None = None,
) -> StreamingResponse:
    """Run a SQL query given as query-string parameters."""
    sql_query = SqlQuery(
        query=query,
        db=db,
        args=parse_json_option("args", args, list),
        kw_args=parse_json_option("kw_args", kw_args, dict),
    )
    return _run(request, sql_query, format)


@router.post("/query")
def sql_query_post(request: Request, body: QueryRequest) -> StreamingResponse:
    """Run a SQL query given as a JSON body."""
    return _run(request, body, body.format)

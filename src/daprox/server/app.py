"""FastAPI application factory."""

from __future__ import annotations

import sentry_sdk
import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from daprox.__about__ import __version__
from daprox.core.config import ResolvedConfig
from daprox.core.exceptions import DaproxError, InputError
from daprox.server.routes import router


async def _handle_daprox_error(request: Request, exc: DaproxError) -> JSONResponse:
    log = structlog.get_logger()
    log.warning(
        "request failed",
        path=request.url.path,
        kind=exc.kind,
        status=int(exc.status_code),
        error=exc.message,
    )
    return JSONResponse(status_code=int(exc.status_code), content=exc.to_dict())


async def _handle_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    problems = []
    for error in exc.errors():
        # loc starts with the request part ("query", "body"); drop it
        loc = error.get("loc", ())
        field = ".".join(str(part) for part in loc[1:]) or ".".join(map(str, loc))
        problems.append(f"{field}: {error['msg']}" if field else error["msg"])
    return await _handle_daprox_error(request, InputError("; ".join(problems)))


async def _handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    sentry_sdk.capture_exception(exc)
    log = structlog.get_logger()
    log.error("unhandled error", path=request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500, content={"kind": DaproxError.kind, "message": str(exc)}
    )


def create_app(config: ResolvedConfig | None = None) -> FastAPI:
    """Build the daprox HTTP application."""
    app = FastAPI(title="daprox", version=__version__)
    app.state.config = config or ResolvedConfig()
    app.add_exception_handler(DaproxError, _handle_daprox_error)
    app.add_exception_handler(RequestValidationError, _handle_validation_error)
    app.add_exception_handler(Exception, _handle_unexpected_error)
    app.include_router(router)
    return app

"""
Exception handlers for the FastAPI application.

Domain errors answer with their own status code and ``{"detail": message}``.
Anything else becomes a 500 carrying an error id that is also logged, so a
client report can be matched to the traceback.
"""

from __future__ import annotations

import uuid

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.core.errors import SimlakError
from app.core.logging import get_logger

logger = get_logger(__name__)


async def simlak_error_handler(request: Request, exc: SimlakError) -> JSONResponse:
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "Request failed",
        method=request.method,
        path=request.url.path,
        status_code=exc.status_code,
        error_type=type(exc).__name__,
        error=exc.message,
        details=exc.details,
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    error_id = uuid.uuid4().hex
    logger.error(
        "Unhandled exception",
        error_id=error_id,
        method=request.method,
        path=request.url.path,
        client=request.client.host if request.client else "unknown",
        error_type=type(exc).__name__,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "error_id": error_id},
    )


def setup_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SimlakError, simlak_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)

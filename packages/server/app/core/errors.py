"""
Exception handlers for failures that escape the service layer.
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

log = structlog.get_logger()


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """A unique or foreign-key constraint lost a race with another request."""
    log.warning("db.integrity_error", path=request.url.path, error=str(exc.orig))
    return JSONResponse(status_code=409, content={"detail": "Conflict"})


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("request.unhandled_exception", path=request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

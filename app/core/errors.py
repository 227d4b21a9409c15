"""
API error types and the handlers that render them.

Every error body has the shape `{"success": false, "message": ..., "error": ...}`.
`error` carries the underlying exception text and is only included outside
production, so infrastructure detail never reaches production clients.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.config import get_settings
from app.schemas.transaction import ErrorResponse

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base error carrying the HTTP status and a stable client-facing message."""
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class RecordNotFoundError(ApiError):
    status_code = 404


class StoreError(ApiError):
    """The record store failed; raise `from` the original exception."""
    status_code = 500


def error_body(message: str, exc: Optional[BaseException] = None) -> dict:
    settings = get_settings()
    detail = None
    if exc is not None and not settings.is_production:
        detail = str(exc)
    return ErrorResponse(message=message, error=detail).model_dump(
        by_alias=True, exclude_none=True
    )


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    cause = exc.__cause__
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}", exc_info=cause or exc)
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, cause))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content=error_body("Invalid request parameters", exc),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content=error_body("Something went wrong", exc))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

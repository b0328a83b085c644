"""
Exception handlers registered by create_app().

Every error leaves the API in the same envelope:
    {"error": ..., "message": ..., "status_code": ..., "details": ...}

Scope denials (401/403) and server-side AppExceptions are logged with the
route; unexpected exceptions are logged with their traceback and answered
with a fixed message.
"""

import logging
from typing import Any, Optional

from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from backoffice.core.exceptions import AppException


logger = logging.getLogger(__name__)


def _envelope(error: str, message: Any, status_code: int, details: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "message": message,
            "status_code": status_code,
            "details": details,
        },
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Domain errors carry their own status code and filtered context."""
    route = f"{request.method} {request.url.path}"
    if exc.status_code >= 500:
        logger.error(
            f"{exc.__class__.__name__} on {route}: {exc.message}",
            extra={"details": exc.context},
        )
    elif exc.status_code in (401, 403):
        logger.warning(f"{exc.__class__.__name__} on {route}")

    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Schema failures in bodies or query strings.

    Reported as 400 with one entry per field, the same status services use
    for ValidationError.
    """
    errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    return _envelope("ValidationError", "Request validation failed", 400, {"errors": errors})


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Unknown routes, wrong methods and a missing bearer header
    return _envelope("HTTPException", exc.detail, exc.status_code)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        f"Unhandled error on {request.method} {request.url.path}",
        exc_info=exc,
    )
    return _envelope("InternalServerError", "An unexpected error occurred", 500)

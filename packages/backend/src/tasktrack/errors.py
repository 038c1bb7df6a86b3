"""Uniform JSON error responses.

Learn: Every error leaves the API in one shape:

    {"status": "error", "statusCode": 404, "message": "Task not found or unauthorized"}

- HTTPException: raised by routes and the auth gate, passed through as-is
- RequestValidationError: malformed/missing body fields, mapped to 400
- StoreError and anything unexpected: 500 with a generic message. The
  traceback is logged, never sent to the client.
"""

from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from tasktrack.store.base import StoreError

logger = structlog.get_logger()

INTERNAL_ERROR_MESSAGE = "Internal Server Error"


def error_response(
    status_code: int, message: str, headers: Optional[dict] = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "statusCode": status_code, "message": message},
        headers=headers,
    )


def _describe_validation(exc: RequestValidationError) -> str:
    """Summarize validation errors as 'Missing fields: a, b' / 'Invalid fields: c'."""
    missing, invalid = [], []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        field = ".".join(loc) or "body"
        (missing if err.get("type") == "missing" else invalid).append(field)

    parts = []
    if missing:
        parts.append("Missing fields: " + ", ".join(dict.fromkeys(missing)))
    if invalid:
        parts.append("Invalid fields: " + ", ".join(dict.fromkeys(invalid)))
    return "; ".join(parts) or "Invalid request"


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = _describe_validation(exc)
    logger.info("request.invalid", path=request.url.path, message=message)
    return error_response(400, message)


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    logger.error("store.error", path=request.url.path, error=str(exc))
    return error_response(500, INTERNAL_ERROR_MESSAGE)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("request.unhandled_error", path=request.url.path)
    return error_response(500, INTERNAL_ERROR_MESSAGE)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StoreError, store_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

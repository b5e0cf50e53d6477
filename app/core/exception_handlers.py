"""Centralized exception handlers for the FastAPI app.

Register with register_exception_handlers(app). Domain exceptions carry
an error_code that picks the HTTP status; database errors that escape the
repositories untranslated get a generic 409 (constraint) or 503 (server
unreachable). Every error body has the same shape: error, message and
optional details.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.domain.exceptions import EShopException

logger = logging.getLogger(__name__)

# Domain error_code -> HTTP status. Unlisted codes are client errors (400).
_ERROR_CODE_STATUS: dict[str, int] = {
    "RESOURCE_NOT_FOUND": 404,
    "DUPLICATE_RESOURCE": 409,
    "RESOURCE_IN_USE": 409,
    "VALIDATION_ERROR": 400,
    "RELATED_RESOURCE_MISSING": 422,
    # Malformed cache key: a bug in key construction, never the client's fault
    "INVALID_CACHE_KEY": 500,
}


def _error_body(error: str, message: Any, details: Any = None) -> dict[str, Any]:
    body: dict[str, Any] = {"error": error, "message": message}
    if details is not None:
        body["details"] = jsonable_encoder(details)
    return body


def _domain_exception_handler(request: Request, exc: EShopException) -> JSONResponse:
    status = _ERROR_CODE_STATUS.get(exc.error_code, 400)
    if status >= 500:
        logger.error("%s on %s %s: %s", exc.error_code, request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status,
        content=_error_body(exc.error_code, exc.message, exc.details),
    )


def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """422 with pydantic's error list as details."""
    return JSONResponse(
        status_code=422,
        content=_error_body("VALIDATION_ERROR", "Request validation failed", exc.errors()),
    )


def _integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """A constraint the repositories do not translate; the write was rolled back."""
    logger.warning(
        "Untranslated integrity error on %s %s: %s",
        request.method,
        request.url.path,
        exc.orig,
    )
    return JSONResponse(
        status_code=409,
        content=_error_body("CONFLICT", "The write conflicts with existing data"),
    )


def _operational_error_handler(request: Request, exc: OperationalError) -> JSONResponse:
    logger.error("Database unavailable on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(
        status_code=503,
        content=_error_body("DATABASE_UNAVAILABLE", "Database temporarily unavailable"),
        headers={"Retry-After": "5"},
    )


def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body("HTTP_ERROR", exc.detail),
        headers=getattr(exc, "headers", None),
    )


def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """500; the exception text is exposed only in debug mode."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    message = str(exc) if get_settings().debug else "Internal server error"
    return JSONResponse(status_code=500, content=_error_body("INTERNAL_ERROR", message))


def register_exception_handlers(app: FastAPI) -> None:
    """Register every handler on app. Call once, right after creating it."""
    app.add_exception_handler(EShopException, _domain_exception_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(IntegrityError, _integrity_error_handler)
    app.add_exception_handler(OperationalError, _operational_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)

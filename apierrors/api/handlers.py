"""FastAPI exception handlers rendering failures in the structured error envelope."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI
from fastapi import Request
from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from apierrors.core.config import get_error_settings
from apierrors.core.errors import StructuredError
from apierrors.schemas.error import ErrorDetail
from apierrors.schemas.error import ErrorObject
from apierrors.schemas.error import ErrorResponse

logger = logging.getLogger(__name__)

INVALID_ARGUMENT_REASON = "invalid_argument"


def _http_status(code: int) -> int:
    if 400 <= code <= 599:
        return code
    return get_error_settings().default_status_code


def _build_error_response(error: StructuredError, status_code: int | None = None) -> JSONResponse:
    settings = get_error_settings()
    if status_code is None:
        status_code = _http_status(error.code)

    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("Responding with server error status=%s error=%s", status_code, error)
    else:
        logger.info("Responding with error status=%s error=%s", status_code, error)

    payload = ErrorResponse(error=ErrorObject.model_validate(error.to_dict()))
    exclude = None if settings.expose_details and error.details else {"error": {"details"}}
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(payload.model_dump(exclude=exclude)),
    )


def _validation_details(exc: RequestValidationError) -> list[ErrorDetail]:
    details: list[ErrorDetail] = []
    for issue in exc.errors():
        field = _format_location(issue.get("loc", ()))
        message = str(issue.get("msg", "Invalid value"))
        details.append(ErrorDetail(reason=INVALID_ARGUMENT_REASON, message=f"{field}: {message}"))
    return details


def _format_location(location: tuple[Any, ...] | list[Any] | Any) -> str:
    if not isinstance(location, (tuple, list)):
        return str(location)

    prefixes = {"body", "query", "path", "header", "cookie"}
    filtered = [str(part) for part in location if part not in prefixes]
    if filtered:
        return ".".join(filtered)

    if not location:
        return "request"

    return str(location[0])


async def structured_error_handler(_: Request, exc: StructuredError) -> JSONResponse:
    """Return raised structured errors as-is, with their code as HTTP status."""

    return _build_error_response(exc)


async def request_validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    """Normalize FastAPI validation errors to one detail record per issue."""

    return _build_error_response(
        StructuredError(
            status.HTTP_400_BAD_REQUEST,
            "Request validation failed",
            _validation_details(exc),
        )
    )


async def http_exception_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Normalize HTTP exceptions, honouring structured dict details when present."""

    detail = exc.detail
    if isinstance(detail, dict) and isinstance(detail.get("error"), dict):
        detail = detail["error"]

    if isinstance(detail, dict) and isinstance(detail.get("message"), str):
        try:
            error = StructuredError.from_dict({**detail, "code": exc.status_code})
        except ValidationError:
            error = StructuredError(exc.status_code, detail["message"])
        return _build_error_response(error, status_code=exc.status_code)

    message = str(detail) if isinstance(detail, str) and detail else "Request failed"
    return _build_error_response(StructuredError(exc.status_code, message), status_code=exc.status_code)


async def unhandled_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    """Avoid leaking internal exceptions while keeping response shape stable."""

    logger.exception("Unhandled exception while serving request")
    message = str(exc) if get_error_settings().expose_internal_messages else "Internal server error"
    return _build_error_response(StructuredError(status.HTTP_500_INTERNAL_SERVER_ERROR, message))


def register_error_handlers(app: FastAPI) -> None:
    """Attach all structured error handlers to a FastAPI app instance."""

    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(StructuredError, structured_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

"""
Translation of errors into HTTP responses.

Every error kind is mapped here, and only here, to a status code and the
ErrorResponse body. Domain code raises typed errors; endpoints let them
propagate.
"""

import logging
from datetime import datetime, UTC
from http import HTTPStatus
from typing import Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from bookstore.domain.exceptions import (
    DuplicateIsbnError,
    MalformedRequestError,
    NotFoundError,
    UnexpectedError,
    ValidationError,
)
from bookstore.api.security import security_headers
from bookstore.api.v1.schemas import ErrorResponse

logger = logging.getLogger(__name__)


def error_response(
    request: Request,
    status_code: int,
    error: str,
    message: str,
    validation_errors: Optional[List[str]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """Build the JSON error body shared by all handlers."""
    body = ErrorResponse(
        timestamp=datetime.now(UTC),
        status=status_code,
        error=error,
        message=message,
        path=request.url.path,
        validation_errors=validation_errors,
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", by_alias=True, exclude_none=True),
        headers=headers,
    )


def _field_name(loc: tuple) -> str:
    return ".".join(str(part) for part in loc[1:]) or str(loc[0])


def translate_request_validation(exc: RequestValidationError) -> Exception:
    """
    Map FastAPI's parsing errors onto the bookstore error taxonomy.

    - an unparseable or non-object body becomes MalformedRequestError
    - a path or query value of the wrong type becomes a ValidationError
      carrying "Invalid parameter type: <name>"
    - a body field of the wrong type becomes a ValidationError entry
    """
    errors = exc.errors()

    for error in errors:
        loc = tuple(error.get("loc", ()))
        if error.get("type") == "json_invalid" or loc == ("body",):
            return MalformedRequestError(error.get("msg"))

    parameter_errors = [e for e in errors if e.get("loc", ("",))[0] in ("path", "query")]
    if parameter_errors:
        name = _field_name(tuple(parameter_errors[0]["loc"]))
        return ValidationError(
            [f"{_field_name(tuple(e['loc']))}: {e['msg']}" for e in parameter_errors],
            message=f"Invalid parameter type: {name}",
        )

    return ValidationError(
        [f"{_field_name(tuple(e.get('loc', ('body',))))}: {e['msg']}" for e in errors]
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install handlers for every error kind on ``app``."""

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        logger.info(f"Not found: {exc.message}")
        return error_response(request, status.HTTP_404_NOT_FOUND, "Not Found", exc.message)

    @app.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError):
        logger.info(f"Validation failed: {exc.errors}")
        return error_response(
            request,
            status.HTTP_400_BAD_REQUEST,
            "Validation Failed",
            exc.message,
            validation_errors=exc.errors,
        )

    @app.exception_handler(DuplicateIsbnError)
    async def duplicate_isbn_handler(request: Request, exc: DuplicateIsbnError):
        logger.info(f"Duplicate ISBN: {exc.isbn}")
        return error_response(request, status.HTTP_400_BAD_REQUEST, "Bad Request", exc.message)

    @app.exception_handler(MalformedRequestError)
    async def malformed_request_handler(request: Request, exc: MalformedRequestError):
        logger.info(f"Malformed request: {exc.details.get('reason')}")
        return error_response(request, status.HTTP_400_BAD_REQUEST, "Bad Request", exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        translated = translate_request_validation(exc)
        if isinstance(translated, MalformedRequestError):
            return await malformed_request_handler(request, translated)
        return await validation_handler(request, translated)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return error_response(
            request,
            exc.status_code,
            HTTPStatus(exc.status_code).phrase,
            str(exc.detail),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(UnexpectedError)
    async def unexpected_error_handler(request: Request, exc: UnexpectedError):
        logger.error(f"Unexpected error: {exc.details.get('reason')}")
        return error_response(
            request,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal Server Error",
            exc.message,
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle all unhandled exceptions without leaking their details."""
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}")
        return error_response(
            request,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal Server Error",
            UnexpectedError().message,
            headers=security_headers(request.app.state.settings, request.url.path),
        )

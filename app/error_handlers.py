"""
Centralized error handlers for the API.

Every failure ends up here and is serialized as {"error": ..., "message": ...}.
Unhandled exceptions are logged with their stack trace before responding.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .errors import ApiError, ValidationFailed, failure_response, internal_from_exception

logger = logging.getLogger(__name__)

NOT_FOUND_BODY = {"error": "Not found"}


def register_error_handlers(app: FastAPI) -> None:
    """Register all error handlers on the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """

    @app.exception_handler(ApiError)
    async def handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
        """Classified failures raised by pipeline stages."""
        logger.warning("%s on %s %s: %s", exc.failure.name, request.method, request.url.path, exc.failure.message)
        return failure_response(exc.failure)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Unmatched routes and methods fall through to a plain 404."""
        if exc.status_code in (404, 405):
            return JSONResponse(status_code=404, content=NOT_FOUND_BODY)
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": "HTTPException", "message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Framework-level parameter errors use the validation variant."""
        errors = exc.errors()
        message = errors[0].get("msg", "Validation failed") if errors else "Validation failed"
        logger.warning("Request validation error on %s: %s", request.url.path, errors)
        return failure_response(ValidationFailed(message))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all: 500 with the exception's own name and message."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return failure_response(internal_from_exception(exc))

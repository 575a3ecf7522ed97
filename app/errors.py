# app/errors.py
"""Failure variants shared by the store, the validation stage and the error handlers.

Store operations return these as values; the route boundary turns them into
responses. Stages that can only short-circuit by raising (FastAPI
dependencies) wrap one in ApiError.
"""
from dataclasses import dataclass
from typing import Any, Dict, Union

from fastapi.responses import JSONResponse


@dataclass(frozen=True)
class NotFound:
    message: str = "Resource not found"
    status_code: int = 404
    name: str = "NotFoundError"


@dataclass(frozen=True)
class ValidationFailed:
    message: str = "Validation failed"
    status_code: int = 400
    name: str = "ValidationError"


@dataclass(frozen=True)
class Unauthorized:
    message: str = "Unauthorized"
    status_code: int = 401
    name: str = "UnauthorizedError"


@dataclass(frozen=True)
class Internal:
    message: str = "Internal server error"
    status_code: int = 500
    name: str = "Error"


Failure = Union[NotFound, ValidationFailed, Unauthorized, Internal]
FAILURE_TYPES = (NotFound, ValidationFailed, Unauthorized, Internal)


class ApiError(Exception):
    """Raised to hand a classified failure to the error handlers."""

    def __init__(self, failure: Failure):
        super().__init__(failure.message)
        self.failure = failure


def is_failure(value: Any) -> bool:
    return isinstance(value, FAILURE_TYPES)


def internal_from_exception(exc: BaseException) -> Internal:
    return Internal(message=str(exc), name=type(exc).__name__ or "Error")


def failure_body(failure: Any) -> Dict[str, Any]:
    if isinstance(failure, FAILURE_TYPES):
        return {"error": failure.name or "Error", "message": failure.message}
    # anything unclassified is reported as a generic internal failure
    return {"error": "Error", "message": str(failure)}


def failure_status(failure: Any) -> int:
    if isinstance(failure, FAILURE_TYPES):
        return failure.status_code
    return 500


def failure_response(failure: Any) -> JSONResponse:
    return JSONResponse(status_code=failure_status(failure), content=failure_body(failure))

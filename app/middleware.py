"""
Request pipeline stages that sit in front of the route handlers.

- RequestLoggingMiddleware: one log line per request, before dispatch.
- read_json_body: JSON body parsing as a dependency.
- validated_product_body: read_json_body followed by validate_product.
- require_api_key: x-api-key check, attached only when auth is enabled.
"""

import json
import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, Header, Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from .config import Settings
from .core import validate_product
from .database import ProductStore
from .errors import ApiError, Unauthorized, ValidationFailed

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs method, path and timestamp of every request.

    Never blocks or rejects a request.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        timestamp = datetime.now(timezone.utc).isoformat()
        url = request.url.path
        if request.url.query:
            url = f"{url}?{request.url.query}"
        logger.info("[%s] %s %s", timestamp, request.method, url)

        started = time.perf_counter()
        response = await call_next(request)
        logger.debug(
            "%s %s -> %d (%.1f ms)",
            request.method, url, response.status_code, (time.perf_counter() - started) * 1000,
        )
        return response


def get_store(request: Request) -> ProductStore:
    return request.app.state.store


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def _reject_constant(token: str) -> Any:
    # NaN and Infinity are not JSON
    raise ValueError(f"Invalid JSON constant {token}")


async def read_json_body(request: Request) -> Any:
    """Parse the request body as JSON; an empty body parses to {}."""
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        return json.loads(raw, parse_constant=_reject_constant)
    except (ValueError, UnicodeDecodeError) as exc:
        raise ApiError(ValidationFailed(f"Malformed JSON body: {exc}"))


async def validated_product_body(payload: Any = Depends(read_json_body)) -> Dict[str, Any]:
    """Parsed body that passed validate_product, handed over unchanged."""
    failure = validate_product(payload)
    if failure is not None:
        raise ApiError(failure)
    return payload


async def require_api_key(request: Request, x_api_key: Optional[str] = Header(None)) -> None:
    settings: Settings = request.app.state.settings
    if not x_api_key:
        raise ApiError(Unauthorized("API key missing"))
    if x_api_key != settings.api_key:
        logger.warning("Rejected request to %s: invalid API key", request.url.path)
        raise ApiError(Unauthorized("Invalid API key"))

# app/main.py
import asyncio
import logging
from typing import Optional, Dict, Any

from fastapi import APIRouter, Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from .config import Settings, get_settings
from .database import ProductStore
from .error_handlers import register_error_handlers
from .errors import failure_response, is_failure
from .logging_setup import configure_logging
from .middleware import (
    RequestLoggingMiddleware, get_app_settings, get_store,
    require_api_key, validated_product_body,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def parse_positive_int(raw: Optional[str], default: int) -> int:
    """Lenient query parsing: anything that is not an integer >= 1 gives the default."""
    if raw is None:
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return value if value >= 1 else default


def _respond(result: Any) -> Any:
    if is_failure(result):
        logger.warning("%s: %s", result.name, result.message)
        return failure_response(result)
    return result


# ---------------------------
# Root
# ---------------------------
@router.get("/", response_class=PlainTextResponse)
async def root():
    return "Hello World"


# ---------------------------
# Product endpoints
# ---------------------------
@router.get("/api/products")
async def list_products(
    category: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    store: ProductStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
):
    page_no = parse_positive_int(page, 1)
    size = min(parse_positive_int(limit, settings.default_page_size), settings.max_page_size)
    return store.list(category=category, page=page_no, limit=size)


@router.get("/api/products/search")
async def search_products(name: Optional[str] = None, store: ProductStore = Depends(get_store)):
    return _respond(store.search(name))


@router.get("/api/products/stats")
async def product_stats(store: ProductStore = Depends(get_store)):
    return store.stats()


@router.get("/api/products/{product_id}")
async def get_product(product_id: str, store: ProductStore = Depends(get_store)):
    return _respond(store.get(product_id))


@router.post("/api/products", status_code=201)
async def create_product(
    payload: Dict[str, Any] = Depends(validated_product_body),
    store: ProductStore = Depends(get_store),
):
    return store.create(payload)


@router.put("/api/products/{product_id}")
async def update_product(
    product_id: str,
    payload: Dict[str, Any] = Depends(validated_product_body),
    store: ProductStore = Depends(get_store),
):
    return _respond(store.update(product_id, payload))


@router.delete("/api/products/{product_id}")
async def delete_product(product_id: str, store: ProductStore = Depends(get_store)):
    return _respond(store.delete(product_id))


# ---------------------------
# Error simulation (exercise the error handlers)
# ---------------------------
async def _fail_after(delay: float):
    await asyncio.sleep(delay)
    raise RuntimeError("Asynchronous error occurred!")


@router.get("/error-sync")
async def error_sync():
    raise RuntimeError("Synchronous error occurred!")


@router.get("/error-async")
async def error_async(settings: Settings = Depends(get_app_settings)):
    # the task's exception surfaces here and goes to the error handlers
    task = asyncio.create_task(_fail_after(settings.async_error_delay_seconds))
    await task


# ---------------------------
# App factory
# ---------------------------
def create_app(settings: Optional[Settings] = None, store: Optional[ProductStore] = None) -> FastAPI:
    """Build an app that owns its own store.

    Passing a store makes it the one handlers see; otherwise a fresh one is
    created, seeded with the sample products when settings.seed_defaults is set.
    """
    settings = settings or get_settings()
    configure_logging(level=settings.log_level)

    if store is None:
        store = ProductStore.with_defaults() if settings.seed_defaults else ProductStore()

    dependencies = [Depends(require_api_key)] if settings.auth_enabled else None
    app = FastAPI(title=settings.project_name, version=settings.version, dependencies=dependencies)
    app.state.settings = settings
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    register_error_handlers(app)
    app.include_router(router)

    if settings.auth_enabled:
        logger.info("API key authentication enabled")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(app, host=_settings.host, port=_settings.port)

# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.database import ProductStore
from app.main import create_app


@pytest.fixture
def settings():
    return Settings(_env_file=None, async_error_delay_seconds=0.1)


@pytest.fixture
def store():
    return ProductStore.with_defaults()


@pytest.fixture
def app(settings, store):
    return create_app(settings=settings, store=store)


@pytest.fixture
def client(app):
    # let the 500 handler's response through instead of re-raising in the test
    return TestClient(app, raise_server_exceptions=False)

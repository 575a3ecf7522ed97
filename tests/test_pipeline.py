# tests/test_pipeline.py
import logging
import time

from fastapi.testclient import TestClient

from app.config import Settings
from app.errors import (
    Internal, NotFound, Unauthorized, ValidationFailed,
    failure_body, failure_status, internal_from_exception,
)
from app.main import create_app, parse_positive_int


def test_failure_variants_carry_status():
    assert [f.status_code for f in (NotFound(), ValidationFailed(), Unauthorized(), Internal())] == [404, 400, 401, 500]


def test_failure_body_shapes():
    assert failure_body(NotFound("gone")) == {"error": "NotFoundError", "message": "gone"}
    assert failure_body(Unauthorized("API key missing")) == {"error": "UnauthorizedError", "message": "API key missing"}
    assert failure_body(internal_from_exception(KeyError("x"))) == {"error": "KeyError", "message": "'x'"}


def test_unclassified_defaults_to_500():
    assert failure_status("boom") == 500
    assert failure_body("boom") == {"error": "Error", "message": "boom"}


def test_parse_positive_int():
    assert parse_positive_int(None, 10) == 10
    assert parse_positive_int("3", 10) == 3
    assert parse_positive_int("0", 10) == 10
    assert parse_positive_int("2.5", 10) == 10


def test_unmatched_route_falls_through(client):
    r = client.get("/nope")
    assert r.status_code == 404
    assert r.json() == {"error": "Not found"}


def test_unmatched_method_falls_through(client):
    r = client.patch("/api/products/1", json={"name": "x"})
    assert r.status_code == 404
    assert r.json() == {"error": "Not found"}


def test_error_sync(client):
    r = client.get("/error-sync")
    assert r.status_code == 500
    assert r.json() == {"error": "RuntimeError", "message": "Synchronous error occurred!"}


def test_error_async_is_delayed(client, settings):
    started = time.perf_counter()
    r = client.get("/error-async")
    elapsed = time.perf_counter() - started
    assert r.status_code == 500
    assert r.json() == {"error": "RuntimeError", "message": "Asynchronous error occurred!"}
    assert elapsed >= settings.async_error_delay_seconds * 0.9


def test_requests_are_logged(client, caplog):
    caplog.set_level(logging.INFO)
    client.get("/api/products/stats?x=1")
    lines = [rec.getMessage() for rec in caplog.records if rec.name == "app.middleware"]
    assert any("GET /api/products/stats?x=1" in line for line in lines)


def test_unhandled_error_logged_with_traceback(client, caplog):
    caplog.set_level(logging.ERROR)
    client.get("/error-sync")
    errors = [rec for rec in caplog.records if rec.name == "app.error_handlers"]
    assert errors and errors[0].exc_info is not None


def test_auth_disabled_by_default(client):
    assert client.get("/api/products").status_code == 200


def _auth_client():
    settings = Settings(_env_file=None, auth_enabled=True, api_key="s3cret")
    return TestClient(create_app(settings=settings), raise_server_exceptions=False)


def test_auth_missing_key():
    r = _auth_client().get("/api/products")
    assert r.status_code == 401
    assert r.json() == {"error": "UnauthorizedError", "message": "API key missing"}


def test_auth_wrong_key():
    r = _auth_client().get("/api/products", headers={"x-api-key": "nope"})
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid API key"


def test_auth_right_key():
    c = _auth_client()
    assert c.get("/api/products/1", headers={"x-api-key": "s3cret"}).status_code == 200
    r = c.post("/api/products", json={"name": "Kettle", "price": 25}, headers={"x-api-key": "s3cret"})
    assert r.status_code == 201


def test_route_failures_are_logged(client, caplog):
    caplog.set_level(logging.WARNING)
    client.get("/api/products/99")
    client.get("/api/products/search")
    lines = [rec.getMessage() for rec in caplog.records if rec.name == "app.main" and rec.levelno == logging.WARNING]
    assert any("NotFoundError" in line and "99" in line for line in lines)
    assert any("ValidationError" in line for line in lines)

"""Tests for the application wiring in ``petshop.main``."""

from __future__ import annotations

import json

import pytest
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.testclient import TestClient
from starlette.datastructures import Headers

import petshop.main as petshop_main
from petshop.services.errors import (
    FavoriteNotPresentError,
    StorageFailureError,
    UserExistsError,
)
from petshop.utils.request_context import clear_request_id, set_request_id


def _build_request(path: str = "/resource") -> Request:
    """Create a minimal ``Request`` suitable for invoking handlers."""

    scope = {
        "type": "http",
        "method": "GET",
        "path": path,
        "headers": Headers().raw,
    }
    return Request(scope)


@pytest.mark.asyncio
async def test_validation_exception_handler_lists_fields():
    token = set_request_id("req-1")
    exc = RequestValidationError(
        [{"loc": ["body", "quantity"], "msg": "Input should be a valid integer", "input": "2"}]
    )

    try:
        response = await petshop_main.validation_exception_handler(
            _build_request("/api/v1/product/cart"), exc
        )
    finally:
        clear_request_id(token)

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    body = json.loads(response.body.decode())
    assert body["errors"] == [
        {"field": "body.quantity", "message": "Input should be a valid integer", "value": "2"}
    ]
    assert body["request_id"] == "req-1"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("exc", "expected_status", "expected_type"),
    [
        (FavoriteNotPresentError(1, 2), 400, "not_present"),
        (UserExistsError("User 1 already exists"), 409, "conflict"),
        (StorageFailureError(), 500, "storage_error"),
    ],
)
async def test_shop_exception_handler_maps_error(exc, expected_status, expected_type):
    token = set_request_id("req-2")
    try:
        response = await petshop_main.shop_exception_handler(
            _build_request("/api/v1/favorites"), exc
        )
    finally:
        clear_request_id(token)

    assert response.status_code == expected_status
    body = json.loads(response.body.decode())
    assert body["error_type"] == expected_type
    assert body["message"] == exc.message
    assert body["detail"] == exc.detail
    assert body["path"] == "/api/v1/favorites"


@pytest.mark.asyncio
async def test_generic_exception_handler_hides_details():
    response = await petshop_main.generic_exception_handler(
        _build_request(), KeyError("secret")
    )

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    body = json.loads(response.body.decode())
    assert body["error_type"] == "internal_error"
    assert "secret" not in body["detail"]


def test_sanitize_database_url_masks_password():
    assert (
        petshop_main._sanitize_database_url("postgresql+psycopg://shop:hunter2@db:5432/shop")
        == "postgresql+psycopg://shop:***@db:5432/shop"
    )
    assert petshop_main._sanitize_database_url("sqlite+aiosqlite:///./data/petshop.db") == (
        "sqlite+aiosqlite:///./data/petshop.db"
    )


def test_cors_origins_keep_local_defaults_and_deduplicate():
    origins = petshop_main._cors_origins(
        ["http://localhost:3000/", "https://shop.example.com", "https://shop.example.com"]
    )

    assert origins[0] == "http://localhost:3000"
    assert origins.count("http://localhost:3000") == 1
    assert origins[-1] == "https://shop.example.com"
    assert origins.count("https://shop.example.com") == 1
    assert "http://127.0.0.1:5173" in origins


def test_health_endpoint():
    response = TestClient(petshop_main.app).get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_lifespan_warms_up_and_disposes(monkeypatch: pytest.MonkeyPatch):
    calls: list[str] = []

    async def fake_warmup_all(resolve_engine=None):
        calls.append("warmup")

    async def fake_close_redis():
        calls.append("close_redis")

    async def fake_dispose_engine():
        calls.append("dispose_engine")

    monkeypatch.setattr(petshop_main, "warmup_all", fake_warmup_all)
    monkeypatch.setattr(petshop_main, "close_redis", fake_close_redis)
    monkeypatch.setattr(petshop_main, "dispose_engine", fake_dispose_engine)

    with TestClient(petshop_main.app) as client:
        assert client.get("/health").status_code == 200

    assert calls == ["warmup", "close_redis", "dispose_engine"]

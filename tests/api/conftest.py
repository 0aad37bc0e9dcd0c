"""HTTP-level fixtures wiring the app to the in-memory store and catalog."""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from petshop.main import app
from petshop.services.catalog import ProductEnricher
from petshop.services.dependencies import get_product_enricher, get_user_state_store
from petshop.services.user_state import InMemoryUserStateStore


@pytest.fixture
def client(
    memory_store: InMemoryUserStateStore,
    enricher: ProductEnricher,
) -> Iterator[TestClient]:
    """Client without the lifespan hook so no database or Redis is contacted."""

    app.dependency_overrides[get_user_state_store] = lambda: memory_store
    app.dependency_overrides[get_product_enricher] = lambda: enricher
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_user_state_store, None)
        app.dependency_overrides.pop(get_product_enricher, None)


def auth(user_id: int | str) -> dict[str, str]:
    return {"X-User-ID": str(user_id)}

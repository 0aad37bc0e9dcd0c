"""Tests for the FastAPI dependency factories."""

from __future__ import annotations

import pytest

import petshop.services.dependencies as dependencies
from petshop.cache import CacheClient
from petshop.services.catalog import CachedProductCatalog, SQLAlchemyProductCatalog
from petshop.settings import AppSettings


@pytest.fixture
def wired(monkeypatch: pytest.MonkeyPatch):
    def configure(session_factory=None, **overrides):
        monkeypatch.setattr(
            dependencies, "get_session_factory", lambda: session_factory or object()
        )
        settings = AppSettings(**overrides)
        monkeypatch.setattr(dependencies, "get_settings", lambda: settings)

    return configure


def test_enricher_uses_database_catalog_without_redis(wired):
    wired(enrichment_enabled=True)

    enricher = dependencies.get_product_enricher(cache=CacheClient(None))

    assert isinstance(enricher._catalog, SQLAlchemyProductCatalog)


def test_enricher_fronts_catalog_with_cache_when_redis_is_up(wired):
    wired(enrichment_enabled=True, catalog_cache_ttl_seconds=42)

    enricher = dependencies.get_product_enricher(cache=CacheClient(object()))

    assert isinstance(enricher._catalog, CachedProductCatalog)
    assert enricher._catalog._ttl == 42


def test_enricher_is_inert_when_disabled(wired):
    wired(enrichment_enabled=False)

    enricher = dependencies.get_product_enricher(cache=CacheClient(object()))

    assert enricher._catalog is None


@pytest.mark.asyncio
async def test_services_share_the_sql_store(wired, session_factory):
    wired(session_factory)
    store = dependencies.get_user_state_store()
    await store.create(1)

    cart_service = dependencies.get_cart_service(
        store=store, enricher=dependencies.get_product_enricher(cache=CacheClient(None))
    )
    favorites_service = dependencies.get_favorites_service(
        store=store, enricher=dependencies.get_product_enricher(cache=CacheClient(None))
    )

    await cart_service.add_to_cart(user_id=1, product_id=3, quantity=2)
    await favorites_service.add_favorite(user_id=1, product_id=3)

    record = await store.get(1)
    assert record.cart == {3: 2}
    assert record.favorites == [3]

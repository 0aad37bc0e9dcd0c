"""Dependency factories that assemble the services for each request.

Tests replace ``get_user_state_store`` and ``get_product_enricher`` through
``app.dependency_overrides``; the services themselves never import FastAPI.
"""

from __future__ import annotations

from fastapi import Depends

from petshop.cache import CacheClient, get_cache_client
from petshop.db.connection import get_session_factory
from petshop.services.cart_service import CartService
from petshop.services.catalog import (
    CachedProductCatalog,
    ProductCatalog,
    ProductEnricher,
    SQLAlchemyProductCatalog,
)
from petshop.services.favorites_service import FavoritesService
from petshop.services.user_state import SQLAlchemyUserStateStore, UserStateStore
from petshop.settings import get_settings


def get_user_state_store() -> UserStateStore:
    """Provide the database-backed user state store."""

    return SQLAlchemyUserStateStore(get_session_factory())


def get_product_enricher(
    cache: CacheClient = Depends(get_cache_client),
) -> ProductEnricher:
    """Wire the catalog, fronted by Redis when a connection is available."""

    settings = get_settings()
    if not settings.enrichment_enabled:
        return ProductEnricher(None)

    catalog: ProductCatalog = SQLAlchemyProductCatalog(get_session_factory())
    if cache.enabled:
        catalog = CachedProductCatalog(
            catalog, cache, ttl=settings.catalog_cache_ttl_seconds
        )
    return ProductEnricher(catalog)


def get_cart_service(
    store: UserStateStore = Depends(get_user_state_store),
    enricher: ProductEnricher = Depends(get_product_enricher),
) -> CartService:
    return CartService(store=store, enricher=enricher)


def get_favorites_service(
    store: UserStateStore = Depends(get_user_state_store),
    enricher: ProductEnricher = Depends(get_product_enricher),
) -> FavoritesService:
    return FavoritesService(store=store, enricher=enricher)


__all__ = [
    "get_cart_service",
    "get_favorites_service",
    "get_product_enricher",
    "get_user_state_store",
]

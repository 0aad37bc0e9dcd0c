"""Set-oriented favorites operations on top of :class:`UserStateStore`.

Favorites keep insertion order and never contain the same product twice.
Adding a present product or removing an absent one is reported as an error
and leaves the stored list untouched.
"""

from __future__ import annotations

import logging

from petshop.schemas.product import FavoriteProduct
from petshop.services.catalog import ProductEnricher
from petshop.services.errors import (
    FavoriteConflictError,
    FavoriteNotPresentError,
    require_positive_ids,
)
from petshop.services.user_state import UserStateStore

logger = logging.getLogger(__name__)


class FavoritesService:
    """Coordinates favorites mutations with the store and response enrichment."""

    def __init__(self, *, store: UserStateStore, enricher: ProductEnricher) -> None:
        self._store = store
        self._enricher = enricher

    async def add_favorite(self, *, user_id: int, product_id: int) -> list[int]:
        require_positive_ids(user_id=user_id, product_id=product_id)

        def append(favorites: list[int]) -> list[int]:
            if product_id in favorites:
                raise FavoriteConflictError(user_id, product_id)
            return [*favorites, product_id]

        favorites = await self._store.load_and_mutate_favorites(user_id, append)
        logger.debug("Added product %s to favorites of user %s", product_id, user_id)
        return favorites

    async def remove_favorite(self, *, user_id: int, product_id: int) -> list[int]:
        require_positive_ids(user_id=user_id, product_id=product_id)

        def remove(favorites: list[int]) -> list[int]:
            if product_id not in favorites:
                raise FavoriteNotPresentError(user_id, product_id)
            return [favorite for favorite in favorites if favorite != product_id]

        favorites = await self._store.load_and_mutate_favorites(user_id, remove)
        logger.debug("Removed product %s from favorites of user %s", product_id, user_id)
        return favorites

    async def get_favorites(self, *, user_id: int) -> list[FavoriteProduct]:
        require_positive_ids(user_id=user_id)
        record = await self._store.get(user_id)
        summaries = await self._enricher.lookup(record.favorites)
        return [
            FavoriteProduct.from_lookup(product_id, summaries.get(product_id))
            for product_id in record.favorites
        ]


__all__ = ["FavoritesService"]

"""Quantity-oriented cart operations on top of :class:`UserStateStore`.

Quantities sent by clients are signed deltas.  Applying a delta that brings a
line to zero or below removes the line; a stored cart never contains a
non-positive quantity.
"""

from __future__ import annotations

import logging
from functools import partial

from petshop.schemas.cart import CartItem
from petshop.services.catalog import ProductEnricher
from petshop.services.errors import InvalidArgumentError, require_positive_ids
from petshop.services.reconciler import Cart
from petshop.services.user_state import UserStateStore

logger = logging.getLogger(__name__)


def apply_delta(cart: Cart, *, product_id: int, delta: int) -> Cart:
    """Return a copy of ``cart`` with ``delta`` added to ``product_id``."""

    updated = dict(cart)
    new_quantity = updated.get(product_id, 0) + delta
    if new_quantity <= 0:
        updated.pop(product_id, None)
    else:
        updated[product_id] = new_quantity
    return updated


def _empty_cart(_: Cart) -> Cart:
    return {}


class CartService:
    """Coordinates cart mutations with the store and response enrichment."""

    def __init__(self, *, store: UserStateStore, enricher: ProductEnricher) -> None:
        self._store = store
        self._enricher = enricher

    async def add_to_cart(
        self, *, user_id: int, product_id: int, quantity: int
    ) -> list[CartItem]:
        require_positive_ids(user_id=user_id, product_id=product_id)
        if not isinstance(quantity, int) or isinstance(quantity, bool):
            raise InvalidArgumentError(f"quantity must be an integer, got {quantity!r}")

        if quantity == 0:
            cart = (await self._store.get(user_id)).cart
        else:
            cart = await self._store.load_and_mutate_cart(
                user_id, partial(apply_delta, product_id=product_id, delta=quantity)
            )
            logger.debug(
                "Applied delta %+d to product %s for user %s", quantity, product_id, user_id
            )
        return await self._to_items(cart)

    async def get_cart(self, *, user_id: int) -> list[CartItem]:
        require_positive_ids(user_id=user_id)
        record = await self._store.get(user_id)
        return await self._to_items(record.cart)

    async def clear_cart(self, *, user_id: int) -> None:
        require_positive_ids(user_id=user_id)
        await self._store.load_and_mutate_cart(user_id, _empty_cart)
        logger.debug("Cleared cart for user %s", user_id)

    async def _to_items(self, cart: Cart) -> list[CartItem]:
        product_ids = sorted(cart)
        summaries = await self._enricher.lookup(product_ids)
        return [
            CartItem.from_lookup(product_id, cart[product_id], summaries.get(product_id))
            for product_id in product_ids
        ]


__all__ = ["CartService", "apply_delta"]

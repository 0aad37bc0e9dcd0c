"""Product catalog lookups used to decorate cart and favorites responses.

The catalog is an external collaborator: the services only ask it for display
metadata of a batch of ids.  :class:`ProductEnricher` wraps every lookup so a
failing catalog degrades responses to bare product ids instead of failing the
request.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Protocol, runtime_checkable

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from petshop.cache import CacheClient, product_summary_key
from petshop.db.models import Product
from petshop.schemas.product import ProductSummary

logger = logging.getLogger(__name__)


@runtime_checkable
class ProductCatalog(Protocol):
    """Batch lookup of display metadata by product id."""

    async def list_by_ids(self, product_ids: Sequence[int]) -> list[ProductSummary]:
        """Return summaries for the ids that exist; unknown ids are omitted."""


class SQLAlchemyProductCatalog:
    """Reads summaries from the ``products`` table in a single query."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def list_by_ids(self, product_ids: Sequence[int]) -> list[ProductSummary]:
        if not product_ids:
            return []
        async with self._session_factory() as session:
            result = await session.execute(
                select(Product).where(Product.id.in_(list(product_ids)))
            )
            rows = list(result.scalars())

        summaries: list[ProductSummary] = []
        for row in rows:
            try:
                summaries.append(_summary_from_row(row))
            except ValidationError as exc:
                logger.warning(
                    "Skipping product %s with unreadable catalog data: %s",
                    row.id,
                    exc.errors(include_url=False),
                )
        return summaries


def _summary_from_row(row: Product) -> ProductSummary:
    return ProductSummary(
        product_id=row.id,
        name=row.name,
        name_th=row.name_th,
        description=row.description,
        description_th=row.description_th,
        price=row.price,
        image=row.image,
        score=row.score,
    )


class InMemoryProductCatalog:
    """Dictionary-backed catalog for tests and local runs."""

    def __init__(self, products: Iterable[ProductSummary] = ()) -> None:
        self._products = {product.product_id: product for product in products}
        self.calls: list[list[int]] = []

    async def list_by_ids(self, product_ids: Sequence[int]) -> list[ProductSummary]:
        self.calls.append(list(product_ids))
        return [
            self._products[product_id]
            for product_id in product_ids
            if product_id in self._products
        ]


class CachedProductCatalog:
    """Read-through cache in front of another catalog.

    Summaries are cached per id so overlapping carts share entries.  Misses are
    fetched from the wrapped catalog in one batch and written back.
    """

    def __init__(self, inner: ProductCatalog, cache: CacheClient, *, ttl: int) -> None:
        self._inner = inner
        self._cache = cache
        self._ttl = ttl

    async def list_by_ids(self, product_ids: Sequence[int]) -> list[ProductSummary]:
        ids = list(dict.fromkeys(product_ids))
        if not ids:
            return []

        cached = await self._cache.get_many_json(
            [product_summary_key(product_id) for product_id in ids]
        )
        found: dict[int, ProductSummary] = {}
        for product_id, payload in zip(ids, cached):
            if payload is None:
                continue
            try:
                found[product_id] = ProductSummary.model_validate(payload)
            except ValidationError:
                logger.debug("Discarding unreadable cached summary for %s", product_id)

        missing = [product_id for product_id in ids if product_id not in found]
        if missing:
            for summary in await self._inner.list_by_ids(missing):
                found[summary.product_id] = summary
                await self._cache.set_json(
                    product_summary_key(summary.product_id),
                    summary.model_dump(by_alias=True),
                    ttl=self._ttl,
                )

        return [found[product_id] for product_id in ids if product_id in found]


class ProductEnricher:
    """Best-effort id → summary resolution.

    ``lookup`` never raises: catalog failures are logged and produce an empty
    mapping, and ids the catalog does not know are simply absent from it.
    """

    def __init__(self, catalog: ProductCatalog | None) -> None:
        self._catalog = catalog

    async def lookup(self, product_ids: Sequence[int]) -> dict[int, ProductSummary]:
        if self._catalog is None or not product_ids:
            return {}
        try:
            summaries = await self._catalog.list_by_ids(product_ids)
        except Exception as exc:
            logger.warning(
                "Product enrichment failed for %d ids; returning bare ids: %s",
                len(product_ids),
                exc,
            )
            return {}
        return {summary.product_id: summary for summary in summaries}


__all__ = [
    "CachedProductCatalog",
    "InMemoryProductCatalog",
    "ProductCatalog",
    "ProductEnricher",
    "SQLAlchemyProductCatalog",
]

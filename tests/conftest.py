"""Shared fixtures: a file-backed SQLite database and the in-memory doubles."""

from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from petshop.db.models import Base
from petshop.schemas.product import ProductSummary
from petshop.services.catalog import InMemoryProductCatalog, ProductEnricher
from petshop.services.user_state import (
    InMemoryUserStateStore,
    KeyedLocks,
    SQLAlchemyUserStateStore,
)


@pytest_asyncio.fixture
async def engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    """Provide a SQLite engine on a temporary file.

    A file is used instead of ``:memory:`` so every pooled connection sees the
    same database.
    """
    pytest.importorskip("aiosqlite")
    db_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'petshop.db'}", future=True
    )
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield db_engine
    await db_engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture
def sql_store(
    session_factory: async_sessionmaker[AsyncSession],
) -> SQLAlchemyUserStateStore:
    return SQLAlchemyUserStateStore(session_factory, locks=KeyedLocks())


@pytest.fixture
def memory_store() -> InMemoryUserStateStore:
    return InMemoryUserStateStore()


@pytest.fixture
def products() -> list[ProductSummary]:
    """Three catalog entries; product ids 4 and up are unknown to the catalog."""
    return [
        ProductSummary(
            product_id=1,
            name="Salmon Kibble",
            name_th="อาหารเม็ดแซลมอน",
            description="Dry food for adult cats",
            price=450,
            image="https://cdn.example.com/p/1.jpg",
            score=5,
        ),
        ProductSummary(product_id=2, name="Rope Toy", price=120, score=4),
        ProductSummary(product_id=3, name="Cat Tree", price=2390),
    ]


@pytest.fixture
def catalog(products: list[ProductSummary]) -> InMemoryProductCatalog:
    return InMemoryProductCatalog(products)


@pytest.fixture
def enricher(catalog: InMemoryProductCatalog) -> ProductEnricher:
    return ProductEnricher(catalog)

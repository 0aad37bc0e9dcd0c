"""SQLAlchemy ORM models for the user state and product catalog tables.

The table and column names follow the existing ``users`` and ``products``
tables.  Cart and favorites payloads are stored as JSON documents; older rows
may still hold the legacy encodings, which is why both columns stay nullable
and untyped beyond ``JSON``.

Databases created before the JSON layout keep ``"favoriteProductId"`` as a
PostgreSQL ``integer[]`` column.  That column has to be migrated to ``json``
or ``jsonb`` before this service writes favorites to it, for example with
``ALTER TABLE users ALTER COLUMN "favoriteProductId" TYPE jsonb USING
to_jsonb("favoriteProductId")``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, DateTime, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class User(Base):
    """Per-user record owning the cart and favorites documents."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column("userId", Integer, primary_key=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    cart: Mapped[Any] = mapped_column(
        JSON,
        nullable=True,
        doc=(
            "Product id to quantity map, e.g. ``{\"7\": 2}``.  Rows written"
            " before the map format may contain a flat list of product ids"
            " where repetition denotes quantity."
        ),
    )
    favorite_product_ids: Mapped[Any] = mapped_column(
        "favoriteProductId",
        JSON,
        nullable=True,
        doc=(
            "Ordered, duplicate-free list of product ids.  Legacy rows may hold"
            " a comma-delimited string instead.  Stored as JSON, not as a"
            " PostgreSQL integer array."
        ),
    )
    created_at: Mapped[datetime] = mapped_column(
        "createAt",
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        "updateAt",
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )


class Product(Base):
    """Catalog row consulted for display enrichment only."""

    __tablename__ = "products"

    id: Mapped[int] = mapped_column("productID", Integer, primary_key=True)
    name: Mapped[str | None] = mapped_column("productName", String(255))
    name_th: Mapped[str | None] = mapped_column("productNameTH", String(255))
    description: Mapped[str | None] = mapped_column("productDesc", String(2048))
    description_th: Mapped[str | None] = mapped_column("productDescTH", String(2048))
    price: Mapped[int | None] = mapped_column("productPrice", Integer)
    image: Mapped[str | None] = mapped_column("productImg", String(1024))
    score: Mapped[int | None] = mapped_column("score", Integer)


__all__ = ["Base", "Product", "User", "utcnow"]

"""Authoritative per-user state with atomic read-modify-write access.

Every mutation of a cart or favorites list goes through
``load_and_mutate_cart`` / ``load_and_mutate_favorites``.  Both hand the decoded
collection to a synchronous mutation callback and persist the callback's result
in canonical form.  Two mutations on the same user never interleave:

* :class:`SQLAlchemyUserStateStore` holds a process-wide per-user lock and
  ``SELECT ... FOR UPDATE`` locks the row, committing before the lock is
  released;
* :class:`InMemoryUserStateStore` serialises writers behind one table-wide lock.

If the callback raises, nothing is written.
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from collections.abc import AsyncIterator, Callable, Hashable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol, runtime_checkable

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from petshop.db.models import User, utcnow
from petshop.services.errors import (
    StorageFailureError,
    UserExistsError,
    UserNotFoundError,
)
from petshop.services.reconciler import (
    Cart,
    decode_cart,
    decode_favorites,
    encode_cart,
    encode_favorites,
    is_canonical_cart,
    is_canonical_favorites,
)

logger = logging.getLogger(__name__)

CartMutation = Callable[[Cart], Cart]
FavoritesMutation = Callable[[list[int]], list[int]]


@dataclass(frozen=True)
class UserRecord:
    """Decoded snapshot of a user's cart and favorites."""

    user_id: int
    cart: Cart = field(default_factory=dict)
    favorites: list[int] = field(default_factory=list)
    updated_at: datetime | None = None


@runtime_checkable
class UserStateStore(Protocol):
    """Storage surface required by the cart and favorites services."""

    async def create(self, user_id: int) -> UserRecord:
        """Create an empty record at registration time."""

    async def get(self, user_id: int) -> UserRecord:
        """Return the committed record or raise :class:`UserNotFoundError`."""

    async def load_and_mutate_cart(self, user_id: int, mutation: CartMutation) -> Cart:
        """Atomically apply ``mutation`` to the cart and return the stored result."""

    async def load_and_mutate_favorites(
        self, user_id: int, mutation: FavoritesMutation
    ) -> list[int]:
        """Atomically apply ``mutation`` to the favorites and return the stored result."""


class KeyedLocks:
    """Lazily created ``asyncio.Lock`` per key.

    Locks live in a weak mapping so that users without an in-flight mutation
    do not accumulate entries.
    """

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[Hashable, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        async with lock:
            yield

    def __len__(self) -> int:
        return len(self._locks)


# Shared by every SQLAlchemyUserStateStore built in this process.
_PROCESS_LOCKS = KeyedLocks()


class SQLAlchemyUserStateStore:
    """User state persisted in the ``users`` table.

    Each call runs in its own short transaction opened from the session
    factory, independent of any request-scoped session.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        locks: KeyedLocks | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._locks = locks if locks is not None else _PROCESS_LOCKS

    async def create(self, user_id: int) -> UserRecord:
        try:
            async with self._session_factory.begin() as session:
                if await session.get(User, user_id) is not None:
                    raise UserExistsError(f"User {user_id} already exists")
                row = User(id=user_id, cart={}, favorite_product_ids=[])
                session.add(row)
                await session.flush()
                return self._to_record(row)
        except IntegrityError as exc:
            raise UserExistsError(f"User {user_id} already exists") from exc
        except SQLAlchemyError as exc:
            raise self._storage_failure("create", user_id, exc) from exc

    async def get(self, user_id: int) -> UserRecord:
        try:
            async with self._session_factory() as session:
                row = await session.get(User, user_id)
                if row is None:
                    raise UserNotFoundError(user_id)
                return self._to_record(row)
        except SQLAlchemyError as exc:
            raise self._storage_failure("get", user_id, exc) from exc

    async def load_and_mutate_cart(self, user_id: int, mutation: CartMutation) -> Cart:
        async with self._locks.hold(user_id):
            try:
                async with self._session_factory.begin() as session:
                    row = await self._lock_row(session, user_id)
                    updated = encode_cart(mutation(decode_cart(row.cart)))
                    if not is_canonical_cart(row.cart):
                        logger.info("Upgrading legacy cart encoding for user %s", user_id)
                    row.cart = updated
                    row.updated_at = utcnow()
            except SQLAlchemyError as exc:
                raise self._storage_failure("cart update", user_id, exc) from exc
        return decode_cart(updated)

    async def load_and_mutate_favorites(
        self, user_id: int, mutation: FavoritesMutation
    ) -> list[int]:
        async with self._locks.hold(user_id):
            try:
                async with self._session_factory.begin() as session:
                    row = await self._lock_row(session, user_id)
                    updated = encode_favorites(
                        mutation(decode_favorites(row.favorite_product_ids))
                    )
                    if not is_canonical_favorites(row.favorite_product_ids):
                        logger.info(
                            "Upgrading legacy favorites encoding for user %s", user_id
                        )
                    row.favorite_product_ids = updated
                    row.updated_at = utcnow()
            except SQLAlchemyError as exc:
                raise self._storage_failure("favorites update", user_id, exc) from exc
        return list(updated)

    async def _lock_row(self, session: AsyncSession, user_id: int) -> User:
        result = await session.execute(
            select(User).where(User.id == user_id).with_for_update()
        )
        row = result.scalar_one_or_none()
        if row is None:
            raise UserNotFoundError(user_id)
        return row

    @staticmethod
    def _to_record(row: User) -> UserRecord:
        return UserRecord(
            user_id=row.id,
            cart=decode_cart(row.cart),
            favorites=decode_favorites(row.favorite_product_ids),
            updated_at=row.updated_at,
        )

    @staticmethod
    def _storage_failure(
        operation: str, user_id: int, exc: SQLAlchemyError
    ) -> StorageFailureError:
        logger.error("User state %s failed for user %s: %s", operation, user_id, exc)
        return StorageFailureError(f"User state {operation} failed for user {user_id}")


@dataclass
class _StoredRow:
    cart: Any
    favorites: Any
    updated_at: datetime


class InMemoryUserStateStore:
    """Process-local store used by tests and local scenarios.

    Rows keep the raw persisted payloads, so legacy encodings can be seeded and
    observed being upgraded on the next write.  Rows are replaced wholesale
    once a mutation succeeds; readers therefore see either the old or the new
    row, never a half-applied one.
    """

    def __init__(self) -> None:
        self._rows: dict[int, _StoredRow] = {}
        self._write_lock = asyncio.Lock()

    def seed(self, user_id: int, *, cart: Any = None, favorites: Any = None) -> None:
        """Insert or overwrite a row holding the given raw payloads."""

        self._rows[user_id] = _StoredRow(cart=cart, favorites=favorites, updated_at=utcnow())

    def raw_payloads(self, user_id: int) -> tuple[Any, Any]:
        """Return the stored ``(cart, favorites)`` payloads exactly as persisted."""

        row = self._rows[user_id]
        return row.cart, row.favorites

    async def create(self, user_id: int) -> UserRecord:
        async with self._write_lock:
            if user_id in self._rows:
                raise UserExistsError(f"User {user_id} already exists")
            self.seed(user_id, cart={}, favorites=[])
            return self._to_record(user_id, self._rows[user_id])

    async def get(self, user_id: int) -> UserRecord:
        row = self._rows.get(user_id)
        if row is None:
            raise UserNotFoundError(user_id)
        return self._to_record(user_id, row)

    async def load_and_mutate_cart(self, user_id: int, mutation: CartMutation) -> Cart:
        async with self._write_lock:
            row = self._require(user_id)
            updated = encode_cart(mutation(decode_cart(row.cart)))
            self._rows[user_id] = _StoredRow(
                cart=updated, favorites=row.favorites, updated_at=utcnow()
            )
        return decode_cart(updated)

    async def load_and_mutate_favorites(
        self, user_id: int, mutation: FavoritesMutation
    ) -> list[int]:
        async with self._write_lock:
            row = self._require(user_id)
            updated = encode_favorites(mutation(decode_favorites(row.favorites)))
            self._rows[user_id] = _StoredRow(
                cart=row.cart, favorites=updated, updated_at=utcnow()
            )
        return list(updated)

    def _require(self, user_id: int) -> _StoredRow:
        row = self._rows.get(user_id)
        if row is None:
            raise UserNotFoundError(user_id)
        return row

    @staticmethod
    def _to_record(user_id: int, row: _StoredRow) -> UserRecord:
        return UserRecord(
            user_id=user_id,
            cart=decode_cart(row.cart),
            favorites=decode_favorites(row.favorites),
            updated_at=row.updated_at,
        )


__all__ = [
    "CartMutation",
    "FavoritesMutation",
    "InMemoryUserStateStore",
    "KeyedLocks",
    "SQLAlchemyUserStateStore",
    "UserRecord",
    "UserStateStore",
]

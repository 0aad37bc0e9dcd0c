"""Translation between the stored encodings of cart and favorites payloads.

Two physical encodings coexist in the ``users`` table:

* canonical: the cart is ``{"<product id>": quantity}`` and favorites are a
  JSON list of unique product ids;
* legacy: the cart is a flat list of product ids where repetition denotes
  quantity, and favorites are a comma delimited string (older exports also
  contain the PostgreSQL array literal ``{1,2,3}``).

The decoders accept every historical shape through an ordered list of decode
attempts.  The encoders only ever produce the canonical shape, so every write
upgrades the row in place without a separate migration pass.

An absent or blank payload is a legitimately empty collection.  A payload that
matches none of the attempts raises :class:`PayloadDecodeError`; it is never
reported as empty.
"""

from __future__ import annotations

import json
from collections import Counter
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from petshop.services.errors import PayloadDecodeError

Cart = dict[int, int]

__all__ = [
    "Cart",
    "decode_cart",
    "decode_favorites",
    "encode_cart",
    "encode_favorites",
    "is_canonical_cart",
    "is_canonical_favorites",
]


class _ShapeMismatch(Exception):
    """Raised by a single decode attempt when the payload is not its shape."""


_EMPTY = object()


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_ascii_number(text: str) -> bool:
    return text.isascii() and text.isdigit()


def _parse_product_id(value: Any, *, allow_text: bool) -> int:
    """Return ``value`` as a positive product id or raise ``_ShapeMismatch``."""

    if _is_int(value):
        product_id = value
    elif allow_text and isinstance(value, str) and _is_ascii_number(value.strip()):
        product_id = int(value.strip())
    else:
        raise _ShapeMismatch(f"{value!r} is not a product id")

    if product_id <= 0:
        raise _ShapeMismatch(f"{value!r} is not a positive product id")
    return product_id


def _unwrap(raw: Any) -> Any:
    """Normalise bytes to text and map absent or blank payloads to ``_EMPTY``."""

    if raw is None:
        return _EMPTY
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise PayloadDecodeError(f"Stored payload is not UTF-8: {exc}") from exc
    if isinstance(raw, str) and not raw.strip():
        return _EMPTY
    return raw


def _run_attempts(
    payload: Any,
    attempts: tuple[tuple[str, Callable[[Any], Any]], ...],
    *,
    kind: str,
) -> Any:
    failures: list[str] = []
    for name, attempt in attempts:
        try:
            return attempt(payload)
        except _ShapeMismatch as exc:
            failures.append(f"{name}: {exc}")
    raise PayloadDecodeError(
        f"{kind} payload matches no accepted encoding ({'; '.join(failures)})"
    )


# -- Cart -----------------------------------------------------------------------


def _decode_cart_counts(payload: Any) -> Cart:
    if not isinstance(payload, Mapping):
        raise _ShapeMismatch("not an object of counts")

    cart: Cart = {}
    for key, quantity in payload.items():
        product_id = _parse_product_id(key, allow_text=True)
        if not _is_int(quantity):
            raise _ShapeMismatch(f"quantity {quantity!r} for {key!r} is not an integer")
        # A non-positive quantity is the same state as an absent entry.
        if quantity > 0:
            cart[product_id] = cart.get(product_id, 0) + quantity
    return cart


def _decode_cart_legacy_list(payload: Any) -> Cart:
    if not isinstance(payload, list):
        raise _ShapeMismatch("not a list of product ids")

    counts: Counter[int] = Counter(
        _parse_product_id(value, allow_text=False) for value in payload
    )
    return dict(counts)


_CART_ATTEMPTS: tuple[tuple[str, Callable[[Any], Cart]], ...] = (
    ("counts", _decode_cart_counts),
    ("legacy list", _decode_cart_legacy_list),
)


def decode_cart(raw: Any) -> Cart:
    """Decode a stored cart payload into ``{product_id: quantity}``.

    ``raw`` may be the JSON value loaded by the driver (dict or list) or the
    JSON text itself.  Legacy lists such as ``[1, 1, 3]`` decode to
    ``{1: 2, 3: 1}``.
    """

    payload = _unwrap(raw)
    if payload is _EMPTY:
        return {}

    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise PayloadDecodeError(f"Cart payload is not valid JSON: {exc}") from exc
        if payload is None:
            return {}

    return _run_attempts(payload, _CART_ATTEMPTS, kind="Cart")


def encode_cart(cart: Mapping[int, int]) -> dict[str, int]:
    """Return the canonical ``{"<id>": quantity}`` document ordered by id.

    Entries whose quantity is zero or negative are left out.
    """

    encoded: dict[str, int] = {}
    for product_id in sorted(cart):
        quantity = cart[product_id]
        if not _is_int(product_id) or product_id <= 0:
            raise ValueError(f"Invalid product id in cart: {product_id!r}")
        if not _is_int(quantity):
            raise ValueError(f"Invalid quantity for product {product_id}: {quantity!r}")
        if quantity > 0:
            encoded[str(product_id)] = quantity
    return encoded


def is_canonical_cart(raw: Any) -> bool:
    """Return ``True`` when ``raw`` is already stored in the map encoding."""

    return raw is None or (
        isinstance(raw, Mapping) and all(isinstance(key, str) for key in raw)
    )


# -- Favorites ------------------------------------------------------------------


def _decode_favorites_list(payload: Any) -> list[int]:
    if not isinstance(payload, list):
        raise _ShapeMismatch("not a list of product ids")
    return [_parse_product_id(value, allow_text=False) for value in payload]


def _decode_favorites_delimited(payload: Any) -> list[int]:
    if not isinstance(payload, str):
        raise _ShapeMismatch("not delimited text")

    text = payload.strip()
    if text.startswith("{") and text.endswith("}"):
        text = text[1:-1]
    return [
        _parse_product_id(part, allow_text=True)
        for part in text.split(",")
        if part.strip()
    ]


_FAVORITES_ATTEMPTS: tuple[tuple[str, Callable[[Any], list[int]]], ...] = (
    ("list", _decode_favorites_list),
    ("delimited", _decode_favorites_delimited),
)


def decode_favorites(raw: Any) -> list[int]:
    """Decode stored favorites into an ordered list without duplicates.

    The first occurrence of a repeated id wins.
    """

    payload = _unwrap(raw)
    if payload is _EMPTY:
        return []

    if isinstance(payload, str) and payload.lstrip().startswith(("[", "null")):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise PayloadDecodeError(
                f"Favorites payload is not valid JSON: {exc}"
            ) from exc
        if payload is None:
            return []

    ids = _run_attempts(payload, _FAVORITES_ATTEMPTS, kind="Favorites")
    return list(dict.fromkeys(ids))


def encode_favorites(product_ids: Iterable[int]) -> list[int]:
    """Return the canonical favorites list: unique ids in first-seen order."""

    encoded: list[int] = []
    for product_id in product_ids:
        if not _is_int(product_id) or product_id <= 0:
            raise ValueError(f"Invalid product id in favorites: {product_id!r}")
        encoded.append(product_id)
    return list(dict.fromkeys(encoded))


def is_canonical_favorites(raw: Any) -> bool:
    """Return ``True`` when ``raw`` is already stored in the list encoding."""

    return raw is None or isinstance(raw, list)

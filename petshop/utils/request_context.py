"""Per-request identifier visible to handlers and log calls of that request."""

from __future__ import annotations

from contextvars import ContextVar, Token

_current_request_id: ContextVar[str | None] = ContextVar("petshop_request_id", default=None)


def set_request_id(request_id: str) -> Token[str | None]:
    """Bind ``request_id`` to the current context; pass the token to ``clear_request_id``."""

    return _current_request_id.set(request_id)


def get_request_id() -> str | None:
    return _current_request_id.get()


def clear_request_id(token: Token[str | None]) -> None:
    _current_request_id.reset(token)

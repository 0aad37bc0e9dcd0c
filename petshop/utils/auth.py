"""Resolution of the authenticated user id for protected routes.

Token verification happens upstream: the API gateway validates the bearer
token and forwards the trusted user id in a header (``X-User-ID`` unless
``USER_ID_HEADER`` says otherwise).  This module only parses that header.
"""

from __future__ import annotations

from fastapi import Request

from petshop.services.errors import UnauthorizedError
from petshop.settings import get_settings


def parse_user_id(raw: str | None) -> int:
    """Return the positive user id encoded in ``raw`` or raise ``UnauthorizedError``."""

    if raw is None or not raw.strip():
        raise UnauthorizedError("Missing authenticated user id")
    try:
        user_id = int(raw.strip())
    except ValueError as exc:
        raise UnauthorizedError("Authenticated user id is not an integer") from exc
    if user_id <= 0:
        raise UnauthorizedError("Authenticated user id must be positive")
    return user_id


def get_current_user_id(request: Request) -> int:
    """FastAPI dependency yielding the caller's user id."""

    return parse_user_id(request.headers.get(get_settings().user_id_header))


__all__ = ["get_current_user_id", "parse_user_id"]

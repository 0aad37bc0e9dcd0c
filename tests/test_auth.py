"""Tests for resolving the authenticated user id."""

from __future__ import annotations

import pytest

from petshop.services.errors import UnauthorizedError
from petshop.utils.auth import parse_user_id


def test_parse_user_id_accepts_positive_integers():
    assert parse_user_id("42") == 42
    assert parse_user_id(" 7 ") == 7


@pytest.mark.parametrize("raw", [None, "", "   ", "abc", "0", "-4", "1.5"])
def test_parse_user_id_rejects_invalid_values(raw):
    with pytest.raises(UnauthorizedError):
        parse_user_id(raw)

"""Tests for slow query logging and engine construction."""

from __future__ import annotations

import logging

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine

from petshop.db.connection import create_engine
from petshop.monitoring import setup_query_monitoring


@pytest.mark.asyncio
async def test_slow_queries_are_logged(tmp_path, caplog: pytest.LogCaptureFixture):
    pytest.importorskip("aiosqlite")
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'slow.db'}")
    setup_query_monitoring(engine, slow_query_threshold=0.0)

    try:
        with caplog.at_level(logging.WARNING, logger="petshop.monitoring"):
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
    finally:
        await engine.dispose()

    assert "Slow query detected" in caplog.text


@pytest.mark.asyncio
async def test_fast_queries_are_not_logged(tmp_path, caplog: pytest.LogCaptureFixture):
    pytest.importorskip("aiosqlite")
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'fast.db'}")
    setup_query_monitoring(engine, slow_query_threshold=60.0)

    try:
        with caplog.at_level(logging.WARNING, logger="petshop.monitoring"):
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
    finally:
        await engine.dispose()

    assert "Slow query detected" not in caplog.text


@pytest.mark.asyncio
async def test_create_engine_accepts_sqlite_url(tmp_path):
    pytest.importorskip("aiosqlite")
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'engine.db'}")

    try:
        async with engine.connect() as conn:
            assert (await conn.execute(text("SELECT 1"))).scalar() == 1
    finally:
        await engine.dispose()

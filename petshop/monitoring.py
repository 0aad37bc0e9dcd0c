"""Slow SQL statement logging for the pet shop backend."""

import logging
import time
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)

_STARTED_KEY = "petshop_statement_started"
_MAX_LOGGED_STATEMENT = 500


def _shorten(statement: str) -> str:
    if len(statement) <= _MAX_LOGGED_STATEMENT:
        return statement
    return statement[:_MAX_LOGGED_STATEMENT] + "..."


def setup_query_monitoring(
    engine: AsyncEngine,
    slow_query_threshold: float = 0.1,
) -> None:
    """Warn about statements that take longer than ``slow_query_threshold`` seconds.

    The hooks are attached to ``engine.sync_engine``; start times are kept on a
    per-connection stack so nested cursor executions pair up correctly.
    """
    sync_engine = getattr(engine, "sync_engine", None)
    if sync_engine is None:
        logger.warning("Query monitoring skipped: %r has no sync_engine", engine)
        return

    def _mark_start(conn: Any, *_: Any) -> None:
        conn.info.setdefault(_STARTED_KEY, []).append(time.perf_counter())

    def _report(
        conn: Any,
        cursor: Any,
        statement: str,
        parameters: Any,
        context: Any,
        executemany: bool,
    ) -> None:
        started = conn.info.get(_STARTED_KEY)
        if not started:
            return
        elapsed = time.perf_counter() - started.pop()
        if elapsed > slow_query_threshold:
            logger.warning(
                "Slow query detected (%.3fs > %.3fs): %s",
                elapsed,
                slow_query_threshold,
                _shorten(statement),
                extra={"duration_seconds": elapsed, "executemany": executemany},
            )

    event.listen(sync_engine, "before_cursor_execute", _mark_start)
    event.listen(sync_engine, "after_cursor_execute", _report)

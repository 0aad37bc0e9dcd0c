"""Environment driven configuration for the pet shop backend.

Values come from the process environment and, for local runs, a ``.env`` file
loaded through python-dotenv.  Import :func:`get_settings` rather than
instantiating :class:`AppSettings` so every module shares one parsed copy.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()

DEFAULT_SQLITE_DATABASE_URL = "sqlite+aiosqlite:///./data/petshop.db"
SQLITE_ASYNC_PREFIX = "sqlite+aiosqlite://"
POSTGRES_ASYNC_PREFIX = "postgresql+psycopg://"
POSTGRES_SYNC_PREFIXES = ("postgres://", "postgresql://")
DEFAULT_REDIS_URL = "redis://localhost:6379/0"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_USER_ID_HEADER = "X-User-ID"
DEFAULT_CATALOG_CACHE_TTL_SECONDS = 300


def _to_async_url(url: str) -> str:
    """Map a configured database URL onto the async driver SQLAlchemy needs."""

    for prefix in POSTGRES_SYNC_PREFIXES:
        if url.startswith(prefix):
            return POSTGRES_ASYNC_PREFIX + url[len(prefix) :]
    if url.startswith((POSTGRES_ASYNC_PREFIX, SQLITE_ASYNC_PREFIX)):
        return url
    raise RuntimeError(
        "DATABASE_URL must be a PostgreSQL URL (postgres://, postgresql:// or "
        f"{POSTGRES_ASYNC_PREFIX}) or an aiosqlite URL, received: {url}"
    )


class AppSettings(BaseSettings):
    """Typed view of the service configuration.

    Field names are the Python spelling; the upper-case aliases are the
    environment variable names.  Both are accepted as keyword arguments.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    database_url: str | None = Field(default=None, alias="DATABASE_URL")
    use_sqlite: bool = Field(
        default=False,
        alias="USE_SQLITE",
        description="Use the local SQLite file even when DATABASE_URL is set.",
    )
    redis_url: str = Field(default=DEFAULT_REDIS_URL, alias="REDIS_URL")
    catalog_cache_ttl_seconds: int = Field(
        default=DEFAULT_CATALOG_CACHE_TTL_SECONDS,
        alias="CATALOG_CACHE_TTL_SECONDS",
        ge=1,
        description="Lifetime of cached product summaries.",
    )
    enrichment_enabled: bool = Field(
        default=True,
        alias="ENRICHMENT_ENABLED",
        description="Attach catalog display fields to cart and favorites responses.",
    )
    user_id_header: str = Field(
        default=DEFAULT_USER_ID_HEADER,
        alias="USER_ID_HEADER",
        description="Header in which the gateway forwards the verified user id.",
    )
    cors_allow_origins_raw: str | None = Field(
        default=None,
        alias="CORS_ALLOW_ORIGINS",
        description="Comma-separated extra origins for the CORS middleware.",
    )
    log_level: str = Field(default=DEFAULT_LOG_LEVEL, alias="LOG_LEVEL")
    slow_query_threshold: float = Field(
        default=0.1,
        alias="SLOW_QUERY_THRESHOLD",
        description="Seconds after which a SQL statement is logged as slow.",
    )

    @property
    def resolved_database_url(self) -> str:
        if self.use_sqlite or not self.database_url:
            return DEFAULT_SQLITE_DATABASE_URL
        return _to_async_url(self.database_url.strip())

    @property
    def database_type(self) -> str:
        """``sqlite`` or ``postgresql``."""

        if self.resolved_database_url.startswith("sqlite"):
            return "sqlite"
        return "postgresql"

    @property
    def cors_allow_origins(self) -> list[str]:
        if not self.cors_allow_origins_raw:
            return []
        origins = (part.strip().rstrip("/") for part in self.cors_allow_origins_raw.split(","))
        return [origin for origin in origins if origin]

    @property
    def log_level_numeric(self) -> int:
        level = logging.getLevelName(self.log_level.upper())
        return level if isinstance(level, int) else logging.INFO

    def optional_config_warnings(self) -> list[str]:
        """Describe optional settings left at their defaults."""

        configured = self.model_fields_set
        warnings: list[str] = []
        if not self.database_url and not self.use_sqlite:
            warnings.append(
                "DATABASE_URL is not set - falling back to the local SQLite file"
            )
        if "redis_url" not in configured:
            warnings.append(
                "REDIS_URL is not set - product summaries are cached only if "
                f"Redis answers on {DEFAULT_REDIS_URL}"
            )
        if not self.cors_allow_origins:
            warnings.append(
                "CORS_ALLOW_ORIGINS is not set - using default localhost origins only"
            )
        return warnings


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return AppSettings()


__all__ = [
    "AppSettings",
    "DEFAULT_CATALOG_CACHE_TTL_SECONDS",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_REDIS_URL",
    "DEFAULT_SQLITE_DATABASE_URL",
    "DEFAULT_USER_ID_HEADER",
    "POSTGRES_ASYNC_PREFIX",
    "POSTGRES_SYNC_PREFIXES",
    "SQLITE_ASYNC_PREFIX",
    "get_settings",
]

"""Centralized configuration management for the storefront wishlist service."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field, PrivateAttr
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables defined in a local .env file before instantiating the
# settings singleton so every consumer importing :mod:`storefront.settings`
# observes the same values as the FastAPI application and the CLI scripts.
load_dotenv()

# -- Application-wide constants -------------------------------------------------

DEFAULT_SQLITE_DATABASE_URL = "sqlite+aiosqlite:///./data/storefront.db"
POSTGRES_ASYNC_PREFIX = "postgresql+psycopg://"
POSTGRES_SYNC_PREFIXES = ("postgres://", "postgresql://")
DEFAULT_WISHLIST_CACHE_KEY = "wishlist"
DEFAULT_REMOTE_TIMEOUT_SECONDS = 10.0
DEFAULT_NOTIFICATION_BUFFER_SIZE = 50
DEFAULT_LOG_LEVEL = "INFO"

RemoteBackend = Literal["sql", "postgrest"]


class AppSettings(BaseSettings):
    """Typed configuration surface built on top of ``pydantic-settings``.

    Besides the raw environment values the class exposes derived helpers such
    as the async database URL and the numeric log level, so the FastAPI
    lifespan, the CLI scripts and the tests share one parsing implementation.
    """

    _explicit_cache_path: bool = PrivateAttr(default=False)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    def __init__(self, **values: object) -> None:  # noqa: D401 - short override explanation
        """Capture explicit overrides prior to delegating to ``BaseSettings``."""

        normalized_keys = {str(key).lower() for key in values}
        super().__init__(**values)
        self._explicit_cache_path = "wishlist_cache_path" in normalized_keys
        cache_env = os.getenv("WISHLIST_CACHE_PATH")
        if cache_env is not None and cache_env.strip():
            self._explicit_cache_path = True

    database_url: str | None = Field(
        default=None,
        alias="DATABASE_URL",
        description=(
            "SQLAlchemy-compatible database URL backing the remote wishlist"
            " table. Postgres URLs in sync format are coerced into the async"
            " psycopg driver string at runtime."
        ),
    )
    use_sqlite: bool = Field(
        default=False,
        alias="USE_SQLITE",
        description="Force the local SQLite database regardless of DATABASE_URL.",
    )
    wishlist_remote_backend: RemoteBackend = Field(
        default="sql",
        alias="WISHLIST_REMOTE_BACKEND",
        description=(
            "Which remote store adapter the wishlist uses: ``sql`` talks to the"
            " wishlist_items table through SQLAlchemy, ``postgrest`` talks to a"
            " hosted PostgREST endpoint over HTTP."
        ),
    )
    supabase_url: str | None = Field(
        default=None,
        alias="SUPABASE_URL",
        description="Base URL of the hosted backend exposing ``/rest/v1``.",
    )
    supabase_anon_key: str | None = Field(
        default=None,
        alias="SUPABASE_ANON_KEY",
        description="Public API key sent in the ``apikey`` header.",
    )
    supabase_access_token: str | None = Field(
        default=None,
        alias="SUPABASE_ACCESS_TOKEN",
        description=(
            "User access token used as the bearer credential so row-level"
            " security scopes rows to the signed-in identity. Falls back to"
            " the anon key when unset."
        ),
    )
    wishlist_cache_path: str | None = Field(
        default=None,
        alias="WISHLIST_CACHE_PATH",
        description=(
            "Path of the JSON file used as durable local storage. Leave empty"
            " to keep the local cache in memory for the process lifetime."
        ),
    )
    wishlist_cache_key: str = Field(
        default=DEFAULT_WISHLIST_CACHE_KEY,
        alias="WISHLIST_CACHE_KEY",
        min_length=1,
        description="Storage key under which the wishlist array is written.",
    )
    remote_timeout_seconds: float = Field(
        default=DEFAULT_REMOTE_TIMEOUT_SECONDS,
        alias="REMOTE_TIMEOUT_SECONDS",
        gt=0,
        description="Timeout applied to every HTTP call made to the remote store.",
    )
    notification_buffer_size: int = Field(
        default=DEFAULT_NOTIFICATION_BUFFER_SIZE,
        alias="NOTIFICATION_BUFFER_SIZE",
        ge=1,
        description="Maximum number of undelivered notifications kept in memory.",
    )
    log_level: str = Field(
        default=DEFAULT_LOG_LEVEL,
        alias="LOG_LEVEL",
        description="Root logging level (e.g. INFO, DEBUG, WARNING).",
    )

    @property
    def resolved_database_url(self) -> str:
        """Return the async-compatible database URL after applying fallbacks."""

        if self.use_sqlite or not self.database_url:
            return DEFAULT_SQLITE_DATABASE_URL

        url = self.database_url.strip()

        for prefix in POSTGRES_SYNC_PREFIXES:
            if url.startswith(prefix):
                return url.replace(prefix, POSTGRES_ASYNC_PREFIX, 1)

        if url.startswith(POSTGRES_ASYNC_PREFIX) or url.startswith("sqlite+aiosqlite"):
            return url

        raise RuntimeError(
            f"Expected a PostgreSQL or aiosqlite connection string, received: {url}"
        )

    @property
    def database_type(self) -> str:
        """Return ``sqlite`` when using SQLite otherwise ``postgresql``."""

        if self.resolved_database_url.startswith("sqlite"):
            return "sqlite"
        return "postgresql"

    @property
    def postgrest_bearer_token(self) -> str | None:
        """Return the credential used in the ``Authorization`` header."""

        return self.supabase_access_token or self.supabase_anon_key

    @property
    def log_level_numeric(self) -> int:
        """Translate ``log_level`` into the numeric constant expected by logging."""

        candidate = logging.getLevelName(self.log_level.upper())
        if isinstance(candidate, int):
            return candidate
        return logging.INFO

    def optional_config_warnings(self) -> list[str]:
        """Return human-readable warnings for unset optional configuration."""

        warnings: list[str] = []

        if not self._explicit_cache_path and not self.wishlist_cache_path:
            warnings.append(
                "WISHLIST_CACHE_PATH is not set - the local wishlist cache lives in "
                "memory and will not survive a restart"
            )

        if self.wishlist_remote_backend == "postgrest":
            if not self.supabase_url:
                warnings.append(
                    "SUPABASE_URL is not set - remote wishlist calls will fail"
                )
            if not self.supabase_anon_key:
                warnings.append(
                    "SUPABASE_ANON_KEY is not set - the hosted backend will reject requests"
                )

        return warnings


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Return a cached instance of :class:`AppSettings`."""

    return AppSettings()


# Module-level singleton; the getter remains available for tests that prefer
# dependency injection.
settings = get_settings()

__all__ = [
    "AppSettings",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_NOTIFICATION_BUFFER_SIZE",
    "DEFAULT_REMOTE_TIMEOUT_SECONDS",
    "DEFAULT_SQLITE_DATABASE_URL",
    "DEFAULT_WISHLIST_CACHE_KEY",
    "POSTGRES_ASYNC_PREFIX",
    "POSTGRES_SYNC_PREFIXES",
    "RemoteBackend",
    "get_settings",
    "settings",
]

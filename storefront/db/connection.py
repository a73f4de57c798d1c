from __future__ import annotations

import logging
from urllib.parse import urlsplit

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from storefront.settings import AppSettings, get_settings

logger = logging.getLogger(__name__)


def sanitize_database_url(url: str) -> str:
    """Hide the password portion of ``url`` so it can be logged safely."""

    if "://" not in url:
        return url

    scheme, rest = url.split("://", 1)
    if "@" in rest:
        auth, host_db = rest.split("@", 1)
        if ":" in auth:
            user, _ = auth.split(":", 1)
            return f"{scheme}://{user}:***@{host_db}"
        return f"{scheme}://{auth}@{host_db}"
    return url


def get_database_url(app_settings: AppSettings | None = None) -> str:
    """Return the async database URL for the remote wishlist table.

    PostgreSQL URLs are structurally validated so a malformed ``DATABASE_URL``
    fails at startup instead of on the first wishlist write.
    """

    resolved = (app_settings or get_settings()).resolved_database_url
    if resolved.startswith("postgresql"):
        parts = urlsplit(resolved)
        if not parts.hostname or not parts.path:
            raise RuntimeError(
                "DATABASE_URL appears malformed. Verify the host and database name are present."
            )
    return resolved


def create_engine(url: str | None = None) -> AsyncEngine:
    """Create the async SQLAlchemy engine for SQLite or PostgreSQL."""

    url = url or get_database_url()
    if url.startswith("sqlite"):
        return create_async_engine(url, future=True, echo=False)

    return create_async_engine(
        url,
        future=True,
        echo=False,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,  # Validate connections before use
        pool_recycle=1800,
        pool_timeout=30,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


async def create_tables(engine: AsyncEngine) -> None:
    """Create every table declared on :class:`storefront.db.models.Base`."""

    from storefront.db.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


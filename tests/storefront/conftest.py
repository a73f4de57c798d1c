"""Shared fixtures for wishlist store, persistence and API tests."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from storefront.cache import MemoryLocalStorage
from storefront.db.models import Base
from storefront.services.wishlist import (
    BufferedNotifier,
    RemoteStoreError,
    WishlistLocalCache,
)
from storefront.services.wishlist_service import WishlistStore


class FakeRemote:
    """In-memory remote store double with failure injection and call gates.

    ``calls`` records every operation in the order it started. ``fail`` holds
    operation names (``fetch``/``upsert``/``delete``) or ``(operation,
    product_id)`` pairs that should raise :class:`RemoteStoreError`. ``gates``
    maps ``(operation, identity)`` to an event the call waits on before it
    touches the rows, which lets tests interleave overlapping calls.
    """

    def __init__(self, rows: dict[str, list[str]] | None = None) -> None:
        self.rows: dict[str, list[str]] = {
            identity: list(products) for identity, products in (rows or {}).items()
        }
        self.calls: list[tuple[str, str, str | None]] = []
        self.fail: set[object] = set()
        self.gates: dict[tuple[str, str], asyncio.Event] = {}

    def gate(self, operation: str, identity: str) -> asyncio.Event:
        event = asyncio.Event()
        self.gates[(operation, identity)] = event
        return event

    async def _enter(self, operation: str, identity: str, product_id: str | None) -> None:
        self.calls.append((operation, identity, product_id))
        gate = self.gates.get((operation, identity))
        if gate is not None:
            await gate.wait()
        if operation in self.fail or (operation, product_id) in self.fail:
            raise RemoteStoreError(operation, "simulated outage")

    async def fetch_all_for_identity(self, identity: str) -> list[str]:
        await self._enter("fetch", identity, None)
        return list(self.rows.get(identity, []))

    async def upsert(self, identity: str, product_id: str) -> None:
        await self._enter("upsert", identity, product_id)
        products = self.rows.setdefault(identity, [])
        if product_id not in products:
            products.append(product_id)

    async def delete(self, identity: str, product_id: str) -> None:
        await self._enter("delete", identity, product_id)
        products = self.rows.get(identity, [])
        if product_id in products:
            products.remove(product_id)

    def operations(self, operation: str) -> list[tuple[str, str | None]]:
        return [(identity, product) for op, identity, product in self.calls if op == operation]


@pytest.fixture
def storage() -> MemoryLocalStorage:
    return MemoryLocalStorage()


@pytest.fixture
def local_cache(storage: MemoryLocalStorage) -> WishlistLocalCache:
    return WishlistLocalCache(storage)


@pytest.fixture
def remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture
def notifications() -> BufferedNotifier:
    return BufferedNotifier()


@pytest.fixture
def store(
    local_cache: WishlistLocalCache,
    remote: FakeRemote,
    notifications: BufferedNotifier,
) -> WishlistStore:
    """Store wired to in-memory collaborators; not yet bootstrapped."""

    return WishlistStore(local_cache=local_cache, remote=remote, notifier=notifications)


@pytest_asyncio.fixture
async def engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    """Provide a SQLite engine with freshly created tables."""
    pytest.importorskip("aiosqlite")
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'wishlist.db'}", future=True
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)

"""Wishlist state shared by every storefront view for one application session.

:class:`WishlistStore` is the single source of truth for "is product P liked".
It reconciles two stores that must converge:

* the durable local cache (:class:`WishlistLocalCache`), written through on
  every mutation whoever the owner is, and the only source before sign-in;
* the remote per-identity store (:class:`WishlistRemote`), authoritative once
  a shopper is authenticated.

Ordering rules:

* set mutations happen synchronously before the first ``await`` so two
  mutations never lose each other's update;
* every ``bootstrap`` takes a new generation number and drops its result if a
  newer bootstrap started while it was waiting on the remote store;
* on sign-in the anonymous entries are pushed to the remote store *before*
  the bootstrap fetch, so the fetched set is already the union;
* the cache remembers which identity it last mirrored, and sign-in as a
  different identity does not merge that account's likes into the new one.

Remote failures never escape the store. Failed optimistic writes stay applied
locally, raise an error notification and are queued in
:class:`PendingMutations` for replay at the next authenticated bootstrap.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine

from storefront.cache import create_local_storage
from storefront.db.connection import (
    create_engine,
    create_session_factory,
    create_tables,
    get_database_url,
    sanitize_database_url,
)
from storefront.schemas.wishlist import (
    ANONYMOUS,
    AuthenticatedOwner,
    MutationKind,
    Owner,
    SessionState,
    WishlistSnapshot,
    normalize_product_id,
)
from storefront.services.wishlist import (
    ADD_FAILED,
    ADDED,
    REMOVE_FAILED,
    REMOVED,
    BufferedNotifier,
    CompositeNotifier,
    LoggingNotifier,
    Notifier,
    PendingMutations,
    PostgrestWishlistRemote,
    RemoteStoreError,
    WishlistLocalCache,
    WishlistPersistence,
    WishlistRemote,
)
from storefront.settings import AppSettings

logger = logging.getLogger(__name__)


class WishlistStore:
    """Owns the in-memory wishlist and keeps the local and remote stores in step."""

    def __init__(
        self,
        *,
        local_cache: WishlistLocalCache,
        remote: WishlistRemote,
        notifier: Notifier,
        pending: PendingMutations | None = None,
    ) -> None:
        self._local = local_cache
        self._remote = remote
        self._notifier = notifier
        self._pending = pending if pending is not None else PendingMutations()
        self._entries: dict[str, None] = {}
        self._is_loading = True
        self._owner: Owner = ANONYMOUS
        self._session_state = SessionState.ANONYMOUS
        self._generation = 0
        self._transition = 0
        self._transition_settled: asyncio.Event | None = None

    @property
    def entries(self) -> tuple[str, ...]:
        return tuple(self._entries)

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def owner(self) -> Owner:
        return self._owner

    @property
    def session_state(self) -> SessionState:
        return self._session_state

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def pending(self) -> PendingMutations:
        return self._pending

    def is_member(self, product_id: str) -> bool:
        return product_id.strip() in self._entries

    def snapshot(self) -> WishlistSnapshot:
        identity = self._remote_identity()
        return WishlistSnapshot(
            entries=list(self._entries),
            is_loading=self._is_loading,
            owner=self._owner,
            session_state=self._session_state,
            pending_mutations=self._pending.count(identity) if identity else 0,
        )

    async def start(self) -> None:
        """Run the initial load for the current owner (anonymous at startup)."""

        await self.bootstrap(self._owner)

    async def refresh(self) -> None:
        await self.bootstrap(self._owner)

    async def bootstrap(self, owner: Owner) -> None:
        """Load the best currently obtainable wishlist for ``owner``."""

        self._generation += 1
        generation = self._generation
        self._is_loading = True
        try:
            if isinstance(owner, AuthenticatedOwner):
                await self._load_remote(owner.identity, generation)
            else:
                self._entries = dict.fromkeys(self._local.read())
        finally:
            if generation == self._generation:
                self._is_loading = False

    async def add_entry(self, product_id: str) -> None:
        product_id = normalize_product_id(product_id)
        if product_id in self._entries:
            return

        updated = {**self._entries, product_id: None}
        self._local.write(updated)
        self._entries = updated
        self._notifier.notify(ADDED)

        identity = self._remote_identity()
        if identity is None:
            return
        try:
            await self._remote.upsert(identity, product_id)
        except RemoteStoreError as exc:
            logger.warning(
                "Remote wishlist add of %s for %s failed: %s", product_id, identity, exc
            )
            self._notifier.notify(ADD_FAILED)
            if product_id in self._entries:
                self._pending.record(identity, product_id, MutationKind.ADD)
            return
        if product_id in self._entries:
            self._pending.settle(identity, product_id)

    async def remove_entry(self, product_id: str) -> None:
        product_id = normalize_product_id(product_id)
        remaining = {entry: None for entry in self._entries if entry != product_id}
        self._local.write(remaining)
        self._entries = remaining
        self._notifier.notify(REMOVED)

        identity = self._remote_identity()
        if identity is None:
            return
        try:
            await self._remote.delete(identity, product_id)
        except RemoteStoreError as exc:
            logger.warning(
                "Remote wishlist removal of %s for %s failed: %s",
                product_id,
                identity,
                exc,
            )
            self._notifier.notify(REMOVE_FAILED)
            if product_id not in self._entries:
                self._pending.record(identity, product_id, MutationKind.REMOVE)
            return
        if product_id not in self._entries:
            self._pending.settle(identity, product_id)

    async def merge_on_login(
        self, identity: str, local_snapshot: Iterable[str]
    ) -> list[str]:
        """Push the anonymous session's entries into ``identity``'s remote record.

        The merge only ever adds rows. Identifiers that fail to upload are
        returned, logged and queued as pending adds; they never abort the merge.
        """

        snapshot = list(dict.fromkeys(local_snapshot))
        failed: list[str] = []
        for product_id in snapshot:
            try:
                await self._remote.upsert(identity, product_id)
            except RemoteStoreError as exc:
                logger.warning(
                    "Login merge of %s for %s failed: %s", product_id, identity, exc
                )
                self._pending.record(identity, product_id, MutationKind.ADD)
                failed.append(product_id)

        if snapshot:
            logger.info(
                "Merged %d of %d locally liked products into wishlist of %s",
                len(snapshot) - len(failed),
                len(snapshot),
                identity,
            )
        return failed

    async def login(self, identity: str) -> None:
        """Switch the owner to ``identity``, merging anonymous entries first.

        Repeating a login for the current owner waits for that owner's
        transition to settle instead of starting another one. The local
        entries are merged only when the cache holds anonymous likes or
        already mirrors ``identity``; a cache mirroring another account's
        remote wishlist is not pushed into this one.
        """

        owner = AuthenticatedOwner(identity=identity)
        if owner == self._owner:
            if self._transition_settled is not None:
                await self._transition_settled.wait()
            return

        previous_state = self._session_state
        self._owner = owner
        self._transition += 1
        transition = self._transition
        settled = asyncio.Event()
        self._transition_settled = settled

        try:
            if previous_state is SessionState.ANONYMOUS:
                self._session_state = SessionState.TRANSITIONING
                self._is_loading = True
                mirrored = self._local.mirrored_identity()
                if mirrored is None or mirrored == owner.identity:
                    await self.merge_on_login(owner.identity, self._local.read())
                else:
                    logger.info(
                        "Local wishlist mirrors %s; not merging it into %s",
                        mirrored,
                        owner.identity,
                    )
                if transition != self._transition:
                    logger.debug(
                        "Login of %s superseded before bootstrap; skipping fetch",
                        owner.identity,
                    )
                    return

            self._session_state = SessionState.AUTHENTICATED
            await self.bootstrap(owner)
        finally:
            settled.set()
            if self._transition_settled is settled:
                self._transition_settled = None

    async def logout(self) -> None:
        """Return to the anonymous owner and reload from the local cache."""

        if self._session_state is SessionState.ANONYMOUS:
            return
        self._owner = ANONYMOUS
        self._session_state = SessionState.ANONYMOUS
        self._transition += 1
        self._transition_settled = None
        await self.bootstrap(ANONYMOUS)

    async def _load_remote(self, identity: str, generation: int) -> None:
        await self._replay_pending(identity)
        try:
            remote_entries = await self._remote.fetch_all_for_identity(identity)
        except RemoteStoreError as exc:
            logger.warning(
                "Wishlist fetch for %s failed; keeping %d in-memory entries: %s",
                identity,
                len(self._entries),
                exc,
            )
            return

        if generation != self._generation:
            logger.debug(
                "Discarding stale wishlist bootstrap (generation %d, current %d)",
                generation,
                self._generation,
            )
            return

        self._entries = dict.fromkeys(self._pending.overlay(identity, remote_entries))
        self._local.write(self._entries)
        self._local.mark_mirrored_identity(identity)

    async def _replay_pending(self, identity: str) -> None:
        for product_id, kind in self._pending.items(identity):
            try:
                if kind is MutationKind.ADD:
                    await self._remote.upsert(identity, product_id)
                else:
                    await self._remote.delete(identity, product_id)
            except RemoteStoreError as exc:
                logger.warning(
                    "Replay of pending %s of %s for %s failed: %s",
                    kind.value,
                    product_id,
                    identity,
                    exc,
                )
                continue
            if self._pending.get(identity, product_id) is kind:
                self._pending.settle(identity, product_id)

    def _remote_identity(self) -> str | None:
        if self._session_state is SessionState.ANONYMOUS:
            return None
        if isinstance(self._owner, AuthenticatedOwner):
            return self._owner.identity
        return None


@dataclass
class WishlistResources:
    """Everything the application builds once at startup around the store."""

    store: WishlistStore
    notifications: BufferedNotifier
    engine: AsyncEngine | None = None
    http_remote: PostgrestWishlistRemote | None = None
    closed: bool = field(default=False, init=False)

    async def aclose(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self.http_remote is not None:
            await self.http_remote.aclose()
        if self.engine is not None:
            await self.engine.dispose()


async def open_wishlist_resources(app_settings: AppSettings) -> WishlistResources:
    """Wire the store from configuration and run its initial bootstrap."""

    storage = create_local_storage(app_settings.wishlist_cache_path)
    local_cache = WishlistLocalCache(storage, key=app_settings.wishlist_cache_key)
    notifications = BufferedNotifier(max_size=app_settings.notification_buffer_size)
    notifier = CompositeNotifier([LoggingNotifier(), notifications])

    engine: AsyncEngine | None = None
    http_remote: PostgrestWishlistRemote | None = None
    remote: WishlistRemote
    if app_settings.wishlist_remote_backend == "postgrest":
        if not app_settings.supabase_url:
            raise RuntimeError(
                "WISHLIST_REMOTE_BACKEND=postgrest requires SUPABASE_URL to be set."
            )
        http_remote = PostgrestWishlistRemote.from_url(
            app_settings.supabase_url,
            api_key=app_settings.supabase_anon_key,
            access_token=app_settings.postgrest_bearer_token,
            timeout=app_settings.remote_timeout_seconds,
        )
        remote = http_remote
        logger.info("Wishlist remote store: PostgREST at %s", app_settings.supabase_url)
    else:
        database_url = get_database_url(app_settings)
        engine = create_engine(database_url)
        if app_settings.database_type == "sqlite":
            await create_tables(engine)
        remote = WishlistPersistence(create_session_factory(engine))
        logger.info(
            "Wishlist remote store: %s database at %s",
            app_settings.database_type,
            sanitize_database_url(database_url),
        )

    store = WishlistStore(local_cache=local_cache, remote=remote, notifier=notifier)
    await store.start()
    return WishlistResources(
        store=store,
        notifications=notifications,
        engine=engine,
        http_remote=http_remote,
    )


def get_wishlist_resources(request: Request) -> WishlistResources:
    """FastAPI dependency returning the resources built during the lifespan."""

    return request.app.state.wishlist


def get_wishlist_store(request: Request) -> WishlistStore:
    """FastAPI dependency handing the application's single store to a route."""

    return get_wishlist_resources(request).store

"""Database-oriented remote store backed by the ``wishlist_items`` table."""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.db.models import WishlistItem
from storefront.db.models.wishlist import new_item_id, utcnow
from storefront.services.wishlist.remote import RemoteStoreError


class WishlistPersistence:
    """Encapsulates SQLAlchemy operations required by the wishlist remote store.

    Each call runs in its own short-lived session and commits immediately, so
    one failed write never poisons the next one. Any ``SQLAlchemyError`` is
    re-raised as :class:`RemoteStoreError`.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def fetch_all_for_identity(self, identity: str) -> list[str]:
        """Return every product identifier stored for ``identity``, oldest first."""

        query = (
            select(WishlistItem.product_id)
            .where(WishlistItem.user_id == identity)
            .order_by(WishlistItem.created_at, WishlistItem.id)
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(query)
                return list(result.scalars().all())
        except SQLAlchemyError as exc:
            raise RemoteStoreError("fetch", str(exc)) from exc

    async def upsert(self, identity: str, product_id: str) -> None:
        """Insert the pair unless it already exists."""

        try:
            async with self._session_factory() as session:
                statement = self._insert_ignoring_duplicates(session, identity, product_id)
                await session.execute(statement)
                await session.commit()
        except SQLAlchemyError as exc:
            raise RemoteStoreError("upsert", str(exc)) from exc

    async def delete(self, identity: str, product_id: str) -> None:
        """Delete the pair; deleting a missing row is not an error."""

        statement = delete(WishlistItem).where(
            WishlistItem.user_id == identity,
            WishlistItem.product_id == product_id,
        )
        try:
            async with self._session_factory() as session:
                await session.execute(statement)
                await session.commit()
        except SQLAlchemyError as exc:
            raise RemoteStoreError("delete", str(exc)) from exc

    @staticmethod
    def _insert_ignoring_duplicates(
        session: AsyncSession, identity: str, product_id: str
    ):
        dialect = session.get_bind().dialect.name
        if dialect == "postgresql":
            insert = postgresql.insert
        elif dialect == "sqlite":
            insert = sqlite.insert
        else:
            raise RemoteStoreError("upsert", f"unsupported database dialect {dialect!r}")

        return (
            insert(WishlistItem)
            .values(
                id=new_item_id(),
                user_id=identity,
                product_id=product_id,
                created_at=utcnow(),
            )
            .on_conflict_do_nothing(index_elements=["user_id", "product_id"])
        )

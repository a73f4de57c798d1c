"""SQLAlchemy ORM model for the remote per-user wishlist table.

Rows pair an owner identity with a liked product. The table mirrors the
``wishlist_items`` relation exposed by the hosted backend, where row-level
security restricts every query to the caller's own ``user_id``.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from . import Base


def utcnow():
    """Return current UTC datetime."""
    return datetime.now(timezone.utc)


def new_item_id() -> str:
    return str(uuid.uuid4())


class WishlistItem(Base):
    """A single liked product for one owner identity."""

    __tablename__ = "wishlist_items"
    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "product_id",
            name="uq_wishlist_items_user_product",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_item_id)
    user_id: Mapped[str] = mapped_column(
        String(128),
        index=True,
        nullable=False,
        doc=(
            "Opaque identity issued by the auth provider. Stored as a string so"
            " UUIDs, emails and OAuth subjects all fit without schema churn."
        ),
    )
    product_id: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

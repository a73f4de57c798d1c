from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


# Imported late so the model module can subclass ``Base``.
from .wishlist import WishlistItem  # noqa: E402

__all__ = [
    "Base",
    "WishlistItem",
]

"""Wishlist collaborators split by responsibility.

The store in :mod:`storefront.services.wishlist_service` composes these pieces:
the local cache wrapper, the remote store adapters, the notification channel
and the queue of remote writes awaiting replay.
"""

from .local import WishlistLocalCache
from .notifications import (
    ADD_FAILED,
    ADDED,
    REMOVE_FAILED,
    REMOVED,
    BufferedNotifier,
    CompositeNotifier,
    LoggingNotifier,
    Notifier,
)
from .pending import PendingMutations
from .persistence import WishlistPersistence
from .remote import PostgrestWishlistRemote, RemoteStoreError, WishlistRemote

__all__ = [
    "ADDED",
    "ADD_FAILED",
    "BufferedNotifier",
    "CompositeNotifier",
    "LoggingNotifier",
    "Notifier",
    "PendingMutations",
    "PostgrestWishlistRemote",
    "REMOVED",
    "REMOVE_FAILED",
    "RemoteStoreError",
    "WishlistLocalCache",
    "WishlistPersistence",
    "WishlistRemote",
]

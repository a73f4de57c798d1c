"""Local cache helpers dedicated to the wishlist store."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable

from storefront.cache import LocalStorage
from storefront.settings import DEFAULT_WISHLIST_CACHE_KEY

logger = logging.getLogger(__name__)


class WishlistLocalCache:
    """Read and write the wishlist array kept in durable local storage.

    The value is a JSON array of product identifier strings stored under a
    single key. Anything else found under that key (missing value, invalid
    JSON, wrong shape) reads back as an empty wishlist and is never raised to
    the store.

    A companion ``<key>:identity`` entry names the signed-in identity whose
    remote wishlist the array last mirrored. It is absent while the array only
    holds anonymous likes.
    """

    def __init__(self, storage: LocalStorage, *, key: str | None = None) -> None:
        self._storage = storage
        self._key = key or DEFAULT_WISHLIST_CACHE_KEY

    @property
    def identity_key(self) -> str:
        return f"{self._key}:identity"

    def read(self) -> list[str]:
        """Return the cached identifiers in stored order, deduplicated."""

        raw = self._storage.get_item(self._key)
        if raw is None:
            return []

        try:
            payload = json.loads(raw)
        except json.JSONDecodeError:
            logger.debug("Discarding unparseable wishlist cache under %s", self._key)
            return []

        if not isinstance(payload, list):
            logger.debug("Discarding wishlist cache with non-list payload under %s", self._key)
            return []

        entries: dict[str, None] = {}
        for item in payload:
            if isinstance(item, str) and item.strip():
                entries.setdefault(item.strip(), None)
        return list(entries)

    def write(self, entries: Iterable[str]) -> None:
        """Overwrite the cached array with ``entries``."""

        self._storage.set_item(self._key, json.dumps(list(entries)))

    def mirrored_identity(self) -> str | None:
        return self._storage.get_item(self.identity_key) or None

    def mark_mirrored_identity(self, identity: str) -> None:
        if self.mirrored_identity() != identity:
            self._storage.set_item(self.identity_key, identity)

"""Reconciliation queue for optimistic mutations the remote store rejected."""

from __future__ import annotations

from collections.abc import Iterable

from storefront.schemas.wishlist import MutationKind


class PendingMutations:
    """Remember failed remote writes per identity until one succeeds.

    Only the latest intent per product is kept: a failed add followed by a
    failed remove of the same product leaves a single pending remove. Any
    later successful remote write for that product settles the entry.
    """

    def __init__(self) -> None:
        self._by_identity: dict[str, dict[str, MutationKind]] = {}

    def record(self, identity: str, product_id: str, kind: MutationKind) -> None:
        queue = self._by_identity.setdefault(identity, {})
        # Re-insert so iteration follows the order of the latest intents.
        queue.pop(product_id, None)
        queue[product_id] = kind

    def settle(self, identity: str, product_id: str) -> None:
        queue = self._by_identity.get(identity)
        if queue is None:
            return
        queue.pop(product_id, None)
        if not queue:
            del self._by_identity[identity]

    def get(self, identity: str, product_id: str) -> MutationKind | None:
        return self._by_identity.get(identity, {}).get(product_id)

    def items(self, identity: str) -> list[tuple[str, MutationKind]]:
        return list(self._by_identity.get(identity, {}).items())

    def overlay(self, identity: str, remote_entries: Iterable[str]) -> list[str]:
        """Apply still-pending intents on top of a freshly fetched remote set."""

        entries: dict[str, None] = dict.fromkeys(remote_entries)
        for product_id, kind in self.items(identity):
            if kind is MutationKind.ADD:
                entries.setdefault(product_id, None)
            else:
                entries.pop(product_id, None)
        return list(entries)

    def count(self, identity: str | None = None) -> int:
        if identity is not None:
            return len(self._by_identity.get(identity, {}))
        return sum(len(queue) for queue in self._by_identity.values())

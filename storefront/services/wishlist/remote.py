"""Remote store contract and the hosted PostgREST adapter.

The remote store is the authoritative per-identity record of liked products.
Adapters expose three coroutines and translate every backend failure into
:class:`RemoteStoreError`, which is the only exception the wishlist store
catches.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

import httpx

logger = logging.getLogger(__name__)

WISHLIST_TABLE = "wishlist_items"


class RemoteStoreError(RuntimeError):
    """Raised when the remote wishlist store cannot complete an operation."""

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation


@runtime_checkable
class WishlistRemote(Protocol):
    """Row access to the remote wishlist table scoped by owner identity."""

    async def fetch_all_for_identity(self, identity: str) -> list[str]: ...

    async def upsert(self, identity: str, product_id: str) -> None: ...

    async def delete(self, identity: str, product_id: str) -> None: ...


class PostgrestWishlistRemote:
    """Talk to a hosted ``/rest/v1`` endpoint using :class:`httpx.AsyncClient`.

    Requests carry the public ``apikey`` header plus a bearer token; with a
    user access token the backend's row-level security restricts every call
    to that user's rows. Upserts ask the server to ignore duplicates on the
    ``(user_id, product_id)`` pair so they are idempotent.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        api_key: str | None = None,
        access_token: str | None = None,
        table: str = WISHLIST_TABLE,
    ) -> None:
        self._client = client
        self._table = table
        self._headers: dict[str, str] = {"Accept": "application/json"}
        if api_key:
            self._headers["apikey"] = api_key
        token = access_token or api_key
        if token:
            self._headers["Authorization"] = f"Bearer {token}"

    @classmethod
    def from_url(
        cls,
        base_url: str,
        *,
        api_key: str | None = None,
        access_token: str | None = None,
        timeout: float = 10.0,
    ) -> PostgrestWishlistRemote:
        """Build an adapter owning its own client rooted at ``base_url``."""

        client = httpx.AsyncClient(
            base_url=f"{base_url.rstrip('/')}/rest/v1",
            timeout=timeout,
        )
        return cls(client, api_key=api_key, access_token=access_token)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_all_for_identity(self, identity: str) -> list[str]:
        rows = await self._request(
            "fetch",
            "GET",
            params={"select": "product_id", "user_id": f"eq.{identity}"},
        )
        if not isinstance(rows, list):
            raise RemoteStoreError("fetch", "expected a JSON array of rows")

        product_ids: list[str] = []
        for row in rows:
            if isinstance(row, dict) and isinstance(row.get("product_id"), str):
                product_ids.append(row["product_id"])
        return product_ids

    async def upsert(self, identity: str, product_id: str) -> None:
        await self._request(
            "upsert",
            "POST",
            params={"on_conflict": "user_id,product_id"},
            json={"user_id": identity, "product_id": product_id},
            headers={
                "Content-Type": "application/json",
                "Prefer": "resolution=ignore-duplicates,return=minimal",
            },
        )

    async def delete(self, identity: str, product_id: str) -> None:
        await self._request(
            "delete",
            "DELETE",
            params={"user_id": f"eq.{identity}", "product_id": f"eq.{product_id}"},
            headers={"Prefer": "return=minimal"},
        )

    async def _request(
        self,
        operation: str,
        method: str,
        *,
        params: dict[str, str],
        json: object | None = None,
        headers: dict[str, str] | None = None,
    ) -> object | None:
        merged_headers = {**self._headers, **(headers or {})}
        try:
            response = await self._client.request(
                method,
                f"/{self._table}",
                params=params,
                json=json,
                headers=merged_headers,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise RemoteStoreError(
                operation, f"HTTP {exc.response.status_code} from {self._table}"
            ) from exc
        except httpx.HTTPError as exc:
            raise RemoteStoreError(operation, str(exc) or type(exc).__name__) from exc

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteStoreError(operation, "response body was not valid JSON") from exc


__all__ = [
    "PostgrestWishlistRemote",
    "RemoteStoreError",
    "WISHLIST_TABLE",
    "WishlistRemote",
]

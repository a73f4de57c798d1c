"""Tests for the PostgREST remote adapter using ``httpx.MockTransport``."""

from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest

from storefront.services.wishlist import PostgrestWishlistRemote, RemoteStoreError

BASE_URL = "https://shop.example.com/rest/v1"


def _remote(
    handler: Callable[[httpx.Request], httpx.Response],
    *,
    access_token: str | None = None,
) -> PostgrestWishlistRemote:
    client = httpx.AsyncClient(
        base_url=BASE_URL, transport=httpx.MockTransport(handler)
    )
    return PostgrestWishlistRemote(client, api_key="anon-key", access_token=access_token)


@pytest.mark.asyncio
async def test_fetch_filters_rows_by_identity() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200, json=[{"product_id": "p1"}, {"product_id": "p2"}, {"other": 1}]
        )

    remote = _remote(handler)
    try:
        assert await remote.fetch_all_for_identity("user-1") == ["p1", "p2"]
    finally:
        await remote.aclose()

    request = seen[0]
    assert request.method == "GET"
    assert request.url.path == "/rest/v1/wishlist_items"
    assert request.url.params["select"] == "product_id"
    assert request.url.params["user_id"] == "eq.user-1"
    assert request.headers["apikey"] == "anon-key"
    assert request.headers["Authorization"] == "Bearer anon-key"


@pytest.mark.asyncio
async def test_upsert_ignores_duplicates_on_owner_product_pair() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201)

    remote = _remote(handler, access_token="user-jwt")
    try:
        await remote.upsert("user-1", "p1")
    finally:
        await remote.aclose()

    request = seen[0]
    assert request.method == "POST"
    assert request.url.params["on_conflict"] == "user_id,product_id"
    assert "resolution=ignore-duplicates" in request.headers["Prefer"]
    assert request.headers["Authorization"] == "Bearer user-jwt"
    assert json.loads(request.content) == {"user_id": "user-1", "product_id": "p1"}


@pytest.mark.asyncio
async def test_delete_targets_single_row() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(204)

    remote = _remote(handler)
    try:
        await remote.delete("user-1", "p1")
    finally:
        await remote.aclose()

    request = seen[0]
    assert request.method == "DELETE"
    assert request.url.params["user_id"] == "eq.user-1"
    assert request.url.params["product_id"] == "eq.p1"


@pytest.mark.asyncio
async def test_http_error_status_becomes_remote_store_error() -> None:
    remote = _remote(lambda request: httpx.Response(401, json={"message": "JWT expired"}))
    try:
        with pytest.raises(RemoteStoreError) as excinfo:
            await remote.upsert("user-1", "p1")
    finally:
        await remote.aclose()

    assert excinfo.value.operation == "upsert"
    assert "HTTP 401" in str(excinfo.value)


@pytest.mark.asyncio
async def test_transport_error_becomes_remote_store_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    remote = _remote(handler)
    try:
        with pytest.raises(RemoteStoreError) as excinfo:
            await remote.fetch_all_for_identity("user-1")
    finally:
        await remote.aclose()

    assert excinfo.value.operation == "fetch"


@pytest.mark.asyncio
async def test_unexpected_payload_becomes_remote_store_error() -> None:
    remote = _remote(lambda request: httpx.Response(200, json={"rows": []}))
    try:
        with pytest.raises(RemoteStoreError):
            await remote.fetch_all_for_identity("user-1")
    finally:
        await remote.aclose()


@pytest.mark.asyncio
async def test_from_url_roots_client_at_rest_endpoint() -> None:
    remote = PostgrestWishlistRemote.from_url(
        "https://shop.example.com/", api_key="anon-key", timeout=3.0
    )
    try:
        assert str(remote._client.base_url) == "https://shop.example.com/rest/v1/"
        assert remote._client.timeout.read == 3.0
    finally:
        await remote.aclose()

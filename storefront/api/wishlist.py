"""FastAPI router exposing the wishlist store to product cards and the wishlist page."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from storefront.schemas.wishlist import MembershipResponse, WishlistSnapshot
from storefront.services.wishlist_service import WishlistStore, get_wishlist_store

router = APIRouter()


@router.get("", response_model=WishlistSnapshot)
async def read_wishlist(
    store: WishlistStore = Depends(get_wishlist_store),
) -> WishlistSnapshot:
    """Return the liked products together with the loading and owner state."""

    return store.snapshot()


@router.post("/refresh", response_model=WishlistSnapshot)
async def refresh_wishlist(
    store: WishlistStore = Depends(get_wishlist_store),
) -> WishlistSnapshot:
    """Reload the wishlist for the current owner."""

    await store.refresh()
    return store.snapshot()


@router.get("/{product_id}", response_model=MembershipResponse)
async def read_membership(
    product_id: str,
    store: WishlistStore = Depends(get_wishlist_store),
) -> MembershipResponse:
    return MembershipResponse(product_id=product_id, liked=store.is_member(product_id))


@router.put("/{product_id}", response_model=WishlistSnapshot)
async def add_product(
    product_id: str,
    store: WishlistStore = Depends(get_wishlist_store),
) -> WishlistSnapshot:
    """Like a product. Liking an already liked product changes nothing."""

    await store.add_entry(product_id)
    return store.snapshot()


@router.delete("/{product_id}", response_model=WishlistSnapshot)
async def remove_product(
    product_id: str,
    store: WishlistStore = Depends(get_wishlist_store),
) -> WishlistSnapshot:
    await store.remove_entry(product_id)
    return store.snapshot()

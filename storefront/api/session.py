"""Routes through which the auth collaborator reports sign-in and sign-out."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from storefront.schemas.wishlist import LoginRequest, WishlistSnapshot
from storefront.services.wishlist_service import WishlistStore, get_wishlist_store

router = APIRouter()


@router.post("/login", response_model=WishlistSnapshot)
async def login(
    payload: LoginRequest,
    store: WishlistStore = Depends(get_wishlist_store),
) -> WishlistSnapshot:
    """Adopt ``identity`` as the owner, merging anonymous likes on first sign-in."""

    await store.login(payload.identity)
    return store.snapshot()


@router.post("/logout", response_model=WishlistSnapshot)
async def logout(
    store: WishlistStore = Depends(get_wishlist_store),
) -> WishlistSnapshot:
    await store.logout()
    return store.snapshot()

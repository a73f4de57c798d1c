"""Delivery endpoint for the toast notifications emitted by the wishlist store."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from storefront.schemas.wishlist import Notification
from storefront.services.wishlist_service import (
    WishlistResources,
    get_wishlist_resources,
)

router = APIRouter()


@router.get("", response_model=list[Notification])
async def drain_notifications(
    resources: WishlistResources = Depends(get_wishlist_resources),
) -> list[Notification]:
    """Return and forget every notification emitted since the last call."""

    return resources.notifications.drain()

"""Pydantic schemas for the wishlist store and API responses."""

from storefront.schemas.error import (  # noqa: F401
    ErrorResponse,
    ErrorType,
    ValidationErrorDetail,
    ValidationErrorResponse,
)
from storefront.schemas.wishlist import (  # noqa: F401
    ANONYMOUS,
    AnonymousOwner,
    AuthenticatedOwner,
    InvalidProductIdError,
    LoginRequest,
    MembershipResponse,
    MutationKind,
    Notification,
    NotificationLevel,
    Owner,
    SessionState,
    WishlistSnapshot,
    normalize_product_id,
)

"""Pydantic schemas shared by the wishlist store and its API surface."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class InvalidProductIdError(ValueError):
    """Raised for product identifiers that are blank once whitespace is stripped."""

    def __init__(self, product_id: object) -> None:
        super().__init__("Product identifiers must be non-empty strings")
        self.product_id = product_id


def normalize_product_id(value: str) -> str:
    """Strip whitespace and reject empty product identifiers."""

    cleaned = value.strip() if isinstance(value, str) else ""
    if not cleaned:
        raise InvalidProductIdError(value)
    return cleaned


class AnonymousOwner(BaseModel):
    """Shopper without a server-side identity; only the local cache applies."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["anonymous"] = "anonymous"


class AuthenticatedOwner(BaseModel):
    """Shopper signed in with a stable identity issued by the auth provider."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["authenticated"] = "authenticated"
    identity: str = Field(
        ...,
        min_length=1,
        max_length=128,
        description="Opaque user identifier scoping the remote wishlist rows.",
    )


Owner = Annotated[
    Union[AnonymousOwner, AuthenticatedOwner],
    Field(discriminator="kind"),
]

ANONYMOUS = AnonymousOwner()


class SessionState(str, Enum):
    """Lifecycle of the wishlist owner within one application session."""

    ANONYMOUS = "anonymous"
    TRANSITIONING = "transitioning"
    AUTHENTICATED = "authenticated"


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


class Notification(BaseModel):
    """Toast-style message emitted as a side effect of wishlist mutations."""

    model_config = ConfigDict(frozen=True)

    level: NotificationLevel
    title: str
    description: str | None = None


class MutationKind(str, Enum):
    ADD = "add"
    REMOVE = "remove"


class WishlistSnapshot(BaseModel):
    """Read model describing the store at a single point in time."""

    entries: list[str] = Field(
        default_factory=list,
        description="Liked product identifiers in insertion order.",
    )
    is_loading: bool = Field(
        False, description="True while the initial load for the owner is in flight."
    )
    owner: Owner = Field(default_factory=AnonymousOwner)
    session_state: SessionState = SessionState.ANONYMOUS
    pending_mutations: int = Field(
        0,
        ge=0,
        description="Remote writes that failed and wait for the next bootstrap.",
    )


class MembershipResponse(BaseModel):
    product_id: str
    liked: bool


class LoginRequest(BaseModel):
    """Payload sent by the auth collaborator when a shopper signs in."""

    identity: str = Field(..., min_length=1, max_length=128)

    @field_validator("identity")
    @classmethod
    def _strip_identity(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Identity must not be blank once whitespace is removed")
        return cleaned


__all__ = [
    "ANONYMOUS",
    "AnonymousOwner",
    "AuthenticatedOwner",
    "InvalidProductIdError",
    "LoginRequest",
    "MembershipResponse",
    "MutationKind",
    "Notification",
    "NotificationLevel",
    "Owner",
    "SessionState",
    "WishlistSnapshot",
    "normalize_product_id",
]

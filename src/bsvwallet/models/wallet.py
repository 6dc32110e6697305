"""Wallet data models shared by the API access layer.

This module contains models for:
- The persisted access/refresh token pair
- The derived session state
- The wallet snapshot (balance, address, NFT gallery)
- Per-asset image state

SECURITY: Token values are opaque bearer strings and must never be logged.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class TokenPair(BaseModel):
    """Access/refresh token pair as persisted by the token store."""

    model_config = ConfigDict(frozen=True)

    access: str | None = Field(None, description="Bearer access token")
    refresh: str | None = Field(None, description="Refresh token")

    @property
    def is_empty(self) -> bool:
        """True when neither token is present."""
        return not self.access and not self.refresh

    @property
    def is_valid(self) -> bool:
        """True when both tokens are present."""
        return bool(self.access) and bool(self.refresh)


class SessionState(str, Enum):
    """Session states. No other states exist."""

    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"


class Session(BaseModel):
    """Session derived from the token store.

    A session restored from persisted tokens has no username because
    usernames are never persisted.
    """

    model_config = ConfigDict(frozen=True)

    state: SessionState = SessionState.ANONYMOUS
    username: str | None = None

    @property
    def is_authenticated(self) -> bool:
        """Return True if the user is authenticated."""
        return self.state == SessionState.AUTHENTICATED

    @classmethod
    def anonymous(cls) -> Session:
        return cls()

    @classmethod
    def authenticated(cls, username: str | None) -> Session:
        return cls(state=SessionState.AUTHENTICATED, username=username)


class ImageState(str, Enum):
    """Load state of an NFT image."""

    UNLOADED = "unloaded"
    LOADED = "loaded"
    UNAVAILABLE = "unavailable"


class AssetRecord(BaseModel):
    """One NFT in the gallery.

    The image fields are mutated in place by the per-asset image fetch,
    independently of sibling records.
    """

    origin_id: str = Field(..., min_length=1, description="Unique NFT origin")
    display_name: str = Field(..., description="NFT name")
    image: ImageState = Field(default=ImageState.UNLOADED)
    image_bytes: bytes | None = Field(None, repr=False)
    image_error: str | None = Field(None, description="Why the image is unavailable")

    @property
    def is_degraded(self) -> bool:
        """True when the image could not be loaded."""
        return self.image == ImageState.UNAVAILABLE

    def mark_loaded(self, data: bytes) -> None:
        self.image = ImageState.LOADED
        self.image_bytes = data
        self.image_error = None

    def mark_unavailable(self, reason: str) -> None:
        self.image = ImageState.UNAVAILABLE
        self.image_bytes = None
        self.image_error = reason


class WalletSnapshot(BaseModel):
    """Balance, receiving address and gallery, published as one unit."""

    model_config = ConfigDict(frozen=True)

    balance_satoshis: int = Field(..., ge=0, description="Balance in satoshis")
    address: str = Field(..., min_length=1, description="Receiving address")
    assets: list[AssetRecord] = Field(default_factory=list)

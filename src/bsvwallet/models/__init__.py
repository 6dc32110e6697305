"""Data models for the wallet client."""

from bsvwallet.models.wallet import (
    AssetRecord,
    ImageState,
    Session,
    SessionState,
    TokenPair,
    WalletSnapshot,
)

__all__ = [
    "AssetRecord",
    "ImageState",
    "Session",
    "SessionState",
    "TokenPair",
    "WalletSnapshot",
]

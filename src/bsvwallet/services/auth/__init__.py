"""Token persistence and session lifecycle."""

from bsvwallet.services.auth.session import SessionManager
from bsvwallet.services.auth.token_store import (
    JsonFileStorage,
    MemoryStorage,
    TokenStorage,
    TokenStore,
)

__all__ = [
    "JsonFileStorage",
    "MemoryStorage",
    "SessionManager",
    "TokenStorage",
    "TokenStore",
]

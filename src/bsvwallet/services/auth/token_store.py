"""Persistence and lifecycle of the access/refresh token pair.

The pair is stored as a single JSON record under one storage key.
Saves merge into the current record, so a refresh response that only
carries a new access token keeps the existing refresh token.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Protocol

import structlog
from pydantic import ValidationError as PydanticValidationError

from bsvwallet.models.wallet import TokenPair

log = structlog.get_logger(__name__)


class TokenStorage(Protocol):
    """Key/value storage for the token record."""

    def read(self, key: str) -> str | None: ...

    def write(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStorage:
    """Dict-backed storage, lost when the process exits."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def read(self, key: str) -> str | None:
        return self._data.get(key)

    def write(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStorage:
    """Storage backed by one JSON document on disk.

    The document maps storage keys to string values. Writes go through a
    temporary file and ``os.replace`` so a crash never leaves a truncated
    document behind.

    Attributes:
        path: Location of the JSON document.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path).expanduser()

    def _read_document(self) -> dict[str, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            log.warning("token_file_unreadable", path=str(self.path), error=str(e))
            return {}

        try:
            document = json.loads(raw)
        except json.JSONDecodeError:
            log.warning("token_file_malformed", path=str(self.path))
            return {}

        if not isinstance(document, dict):
            log.warning("token_file_malformed", path=str(self.path))
            return {}
        return {k: v for k, v in document.items() if isinstance(v, str)}

    def _write_document(self, document: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".tokens-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f)
            os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, self.path)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise

    def read(self, key: str) -> str | None:
        return self._read_document().get(key)

    def write(self, key: str, value: str) -> None:
        document = self._read_document()
        document[key] = value
        self._write_document(document)

    def delete(self, key: str) -> None:
        document = self._read_document()
        if document.pop(key, None) is not None:
            self._write_document(document)


class TokenStore:
    """Owns the persisted access/refresh token pair.

    The pair is read from storage once and kept in memory; storage is only
    touched again on save() and clear().

    Example:
        store = TokenStore(JsonFileStorage("~/.bsvwallet/tokens.json"))
        store.save(access="A1", refresh="R1")
        store.save(access="A2")
        assert store.load() == TokenPair(access="A2", refresh="R1")
    """

    DEFAULT_KEY = "bsvwallet.tokens"

    def __init__(self, storage: TokenStorage, key: str = DEFAULT_KEY) -> None:
        self._storage = storage
        self._key = key
        self._pair: TokenPair | None = None

    def load(self) -> TokenPair:
        """Read the persisted pair.

        Returns:
            The stored pair, or an empty pair if absent or malformed.
        """
        if self._pair is None:
            self._pair = self._read()
        return self._pair

    def _read(self) -> TokenPair:
        raw = self._storage.read(self._key)
        if raw is None:
            return TokenPair()

        try:
            return TokenPair.model_validate_json(raw)
        except PydanticValidationError:
            log.warning("token_record_malformed", key=self._key)
            return TokenPair()

    def save(self, access: str | None = None, refresh: str | None = None) -> TokenPair:
        """Merge the given tokens into the current pair and persist it.

        Args:
            access: New access token, or None to keep the current one.
            refresh: New refresh token, or None to keep the current one.

        Returns:
            The merged pair as persisted.
        """
        current = self.load()
        merged = TokenPair(
            access=access if access is not None else current.access,
            refresh=refresh if refresh is not None else current.refresh,
        )
        self._storage.write(self._key, merged.model_dump_json())
        self._pair = merged
        log.debug(
            "tokens_saved",
            access_updated=access is not None,
            refresh_updated=refresh is not None,
        )
        return merged

    def clear(self) -> None:
        """Remove the persisted pair, forcing an anonymous session."""
        self._storage.delete(self._key)
        self._pair = TokenPair()
        log.info("tokens_cleared")

    def has_valid_pair(self) -> bool:
        return self.load().is_valid

"""Login, logout and the derived session state.

The session is never stored on its own: it is Authenticated exactly when
the token store holds a valid pair. A refresh failure deep inside the
fetcher clears the store, which is observed here as Anonymous.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from pydantic import BaseModel, StrictStr
from pydantic import ValidationError as PydanticValidationError

from bsvwallet.constants.endpoints import LOGIN_PATH
from bsvwallet.core.exceptions import SchemaError, ValidationError
from bsvwallet.models.wallet import Session
from bsvwallet.services.auth.token_store import TokenStore

if TYPE_CHECKING:
    from bsvwallet.services.fetcher import AuthenticatedFetcher

log = structlog.get_logger(__name__)


class LoginResponse(BaseModel):
    """``{"access": ..., "refresh": ...}``"""

    access: StrictStr
    refresh: StrictStr


class SessionManager:
    """Drives the Anonymous -> Authenticated -> Anonymous lifecycle."""

    def __init__(self, fetcher: AuthenticatedFetcher, token_store: TokenStore) -> None:
        self._fetcher = fetcher
        self._token_store = token_store
        self._username: str | None = None

    @property
    def session(self) -> Session:
        """Current session, derived from the token store."""
        if self._token_store.has_valid_pair():
            return Session.authenticated(self._username)
        self._username = None
        return Session.anonymous()

    async def login(self, username: str, password: str) -> Session:
        """Exchange credentials for a token pair.

        The credentials are sent once and not kept.

        Raises:
            ValidationError: If username or password is empty.
            HttpError: If the service rejects the credentials.
            SchemaError: If the response lacks either token.
        """
        username = (username or "").strip()
        if not username:
            raise ValidationError("Please enter a username.")
        if not password:
            raise ValidationError("Please enter a password.")

        log.info("login_started", username=username)
        payload = await self._fetcher.post(
            LOGIN_PATH,
            json={"username": username, "password": password},
            authenticate=False,
        )

        try:
            tokens = LoginResponse.model_validate(payload)
        except PydanticValidationError as e:
            log.warning("login_response_unrecognized", username=username)
            raise SchemaError("Login response has no token pair", endpoint=LOGIN_PATH) from e
        if not tokens.access or not tokens.refresh:
            raise SchemaError("Login response has an empty token", endpoint=LOGIN_PATH)

        self._token_store.clear()
        self._token_store.save(access=tokens.access, refresh=tokens.refresh)
        self._username = username
        log.info("login_succeeded", username=username)
        return Session.authenticated(username)

    def logout(self) -> Session:
        """Drop the token pair and return to Anonymous."""
        self._token_store.clear()
        log.info("logout", username=self._username)
        self._username = None
        return Session.anonymous()

"""Composition root for the wallet client.

Wires the token store, fetcher, session manager, aggregator and action
dispatcher from Settings so callers depend on one object.
"""

from __future__ import annotations

import structlog

from bsvwallet.config.settings import Settings, get_settings
from bsvwallet.models.wallet import Session, WalletSnapshot
from bsvwallet.services.auth.session import SessionManager
from bsvwallet.services.auth.token_store import JsonFileStorage, TokenStorage, TokenStore
from bsvwallet.services.fetcher import AuthenticatedFetcher
from bsvwallet.services.mock_transport import build_mock_transport
from bsvwallet.services.wallet.actions import ActionDispatcher
from bsvwallet.services.wallet.aggregator import WalletDataAggregator

log = structlog.get_logger(__name__)


class WalletClient:
    """Wallet client facade.

    Usage:
        async with WalletClient() as wallet:
            await wallet.sessions.login("alice", "pw")
            snapshot = await wallet.refresh()
            await wallet.actions.send_funds("bob@example.com", 1000)
    """

    def __init__(
        self,
        settings: Settings | None = None,
        storage: TokenStorage | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            settings: Settings to use, defaults to get_settings().
            storage: Token storage, defaults to a JsonFileStorage at
                ``settings.token_store_path``.
        """
        self.settings = settings or get_settings()

        self.token_store = TokenStore(
            storage or JsonFileStorage(self.settings.token_store_path),
            key=self.settings.token_storage_key,
        )
        self.fetcher = AuthenticatedFetcher(
            base_url=self.settings.api_base_url,
            token_store=self.token_store,
            timeout=self.settings.request_timeout,
            transport=build_mock_transport() if self.settings.mock_mode else None,
        )
        self.sessions = SessionManager(self.fetcher, self.token_store)
        self.aggregator = WalletDataAggregator(
            self.fetcher,
            image_fetch_concurrency=self.settings.image_fetch_concurrency,
        )
        self.actions = ActionDispatcher(
            self.fetcher,
            self.aggregator,
            app_name=self.settings.asset_app_name,
        )
        log.debug(
            "wallet_client_initialized",
            base_url=self.settings.api_base_url,
            mock_mode=self.settings.mock_mode,
        )

    @property
    def session(self) -> Session:
        return self.sessions.session

    async def refresh(self) -> WalletSnapshot:
        """Load a fresh snapshot, then its images.

        Image failures only degrade their own record.
        """
        snapshot = await self.aggregator.load_snapshot()
        await self.aggregator.load_images(snapshot.assets)
        return snapshot

    def logout(self) -> Session:
        self.aggregator.reset()
        return self.sessions.logout()

    async def close(self) -> None:
        await self.fetcher.close()

    async def __aenter__(self) -> WalletClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

"""Mutating wallet commands: send funds, send an NFT, create an NFT.

Each command issues exactly one request through the authenticated
fetcher and, on success, re-reads only the part of the snapshot it
affected.
"""

from __future__ import annotations

from typing import Any

import structlog

from bsvwallet.constants.endpoints import (
    CREATE_ASSET_PATH,
    SEND_ASSET_PATH,
    SEND_FUNDS_PATH,
)
from bsvwallet.core.exceptions import BsvWalletError, ValidationError
from bsvwallet.services.fetcher import AuthenticatedFetcher
from bsvwallet.services.wallet.aggregator import WalletDataAggregator

log = structlog.get_logger(__name__)


class ActionDispatcher:
    """Issues mutating commands and invalidates the affected snapshot part.

    Errors of the command itself propagate unchanged. A failure of the
    follow-up re-read is only logged: the command has already taken
    effect on the service and must not look failed to the caller.
    """

    def __init__(
        self,
        fetcher: AuthenticatedFetcher,
        aggregator: WalletDataAggregator,
        app_name: str = "bsvwallet",
    ) -> None:
        self._fetcher = fetcher
        self._aggregator = aggregator
        self._app_name = app_name

    async def send_funds(self, recipient: str, amount: int) -> Any:
        """Send satoshis to a paymail address.

        Args:
            recipient: Recipient paymail.
            amount: Amount in satoshis, strictly positive.

        Returns:
            The service acknowledgement.

        Raises:
            ValidationError: If the recipient or amount is invalid.
            BsvWalletError: If the send request fails.
        """
        recipient = _require_recipient(recipient)
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise ValidationError("Amount must be a positive number of satoshis")

        log.info("send_funds_requested", amount_satoshis=amount)
        ack = await self._fetcher.post(
            SEND_FUNDS_PATH,
            json={"recipient_paymail": recipient, "amount_satoshis": amount},
        )
        log.info("send_funds_succeeded", amount_satoshis=amount)

        await self._invalidate("balance")
        return ack

    async def send_asset(self, recipient: str, origin_id: str) -> Any:
        """Send one NFT to a paymail address.

        Raises:
            ValidationError: If the recipient or origin is empty.
            BsvWalletError: If the send request fails.
        """
        recipient = _require_recipient(recipient)
        if not origin_id:
            raise ValidationError("NFT origin must not be empty")

        log.info("send_asset_requested", origin=origin_id)
        ack = await self._fetcher.post(
            SEND_ASSET_PATH,
            json={"recipient_paymail": recipient, "nft_origin": origin_id},
        )
        log.info("send_asset_succeeded", origin=origin_id)

        await self._invalidate("assets")
        return ack

    async def create_asset(
        self,
        name: str,
        file_bytes: bytes,
        filename: str = "image.png",
        content_type: str = "application/octet-stream",
    ) -> Any:
        """Create an NFT from an uploaded file.

        The request is multipart ``{name, file, app}``.

        Raises:
            ValidationError: If the name or file is empty.
            BsvWalletError: If the create request fails.
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("NFT name must not be empty")
        if not file_bytes:
            raise ValidationError("NFT file must not be empty")

        log.info("create_asset_requested", name=name, size=len(file_bytes))
        ack = await self._fetcher.post(
            CREATE_ASSET_PATH,
            data={"name": name, "app": self._app_name},
            files={"file": (filename, file_bytes, content_type)},
        )
        log.info("create_asset_succeeded", name=name)

        await self._invalidate("assets")
        return ack

    async def _invalidate(self, part: str) -> None:
        try:
            if part == "balance":
                await self._aggregator.refresh_balance()
            else:
                await self._aggregator.refresh_assets()
        except BsvWalletError as e:
            log.warning("snapshot_invalidation_failed", part=part, error=str(e))


def _require_recipient(recipient: str) -> str:
    recipient = (recipient or "").strip()
    if not recipient:
        raise ValidationError("Recipient paymail must not be empty")
    return recipient

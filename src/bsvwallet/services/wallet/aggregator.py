"""Wallet snapshot loading and NFT gallery image fetching.

The three core reads (balance, address, asset list) form one atomic unit:
they run concurrently and the snapshot is published only when all three
succeed. Image fetches are the opposite: each asset succeeds or fails on
its own and a failure only degrades that one record.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from urllib.parse import quote

import structlog

from bsvwallet.constants.endpoints import (
    ADDRESS_PATH,
    ASSET_IMAGE_PATH,
    ASSETS_PATH,
    BALANCE_PATH,
)
from bsvwallet.core.exceptions import SchemaError
from bsvwallet.models.wallet import AssetRecord, ImageState, WalletSnapshot
from bsvwallet.services.fetcher import AuthenticatedFetcher
from bsvwallet.services.wallet.schemas import (
    normalize_address,
    normalize_assets,
    normalize_balance,
)

log = structlog.get_logger(__name__)


class WalletDataAggregator:
    """Loads the wallet snapshot and the gallery images.

    Holds the last-known-good snapshot. A failed load never replaces it.

    Example:
        aggregator = WalletDataAggregator(fetcher)
        snapshot = await aggregator.load_snapshot()
        await aggregator.load_images()
        for asset in snapshot.assets:
            print(asset.display_name, asset.image)
    """

    def __init__(
        self,
        fetcher: AuthenticatedFetcher,
        image_fetch_concurrency: int = 4,
    ) -> None:
        """Initialize the aggregator.

        Args:
            fetcher: Authenticated fetcher used for every call.
            image_fetch_concurrency: Maximum concurrent image fetches.
        """
        self._fetcher = fetcher
        self._image_semaphore = asyncio.Semaphore(image_fetch_concurrency)
        self._snapshot: WalletSnapshot | None = None

    @property
    def snapshot(self) -> WalletSnapshot | None:
        """Last successfully published snapshot, if any."""
        return self._snapshot

    def reset(self) -> None:
        """Forget the published snapshot (on logout)."""
        self._snapshot = None

    async def fetch_balance(self) -> int:
        return normalize_balance(await self._fetcher.get(BALANCE_PATH))

    async def fetch_address(self) -> str:
        return normalize_address(await self._fetcher.get(ADDRESS_PATH))

    async def fetch_assets(self) -> list[AssetRecord]:
        return normalize_assets(await self._fetcher.get(ASSETS_PATH))

    async def load_snapshot(self) -> WalletSnapshot:
        """Load balance, address and assets as one atomic unit.

        The three reads run concurrently. If any of them fails the others
        are cancelled, the first error propagates and the previously
        published snapshot stays in place.

        Returns:
            The newly published snapshot (images not yet loaded).

        Raises:
            BsvWalletError: The first error raised by any of the reads.
        """
        log.debug("snapshot_load_started")

        tasks = [
            asyncio.ensure_future(self.fetch_balance()),
            asyncio.ensure_future(self.fetch_address()),
            asyncio.ensure_future(self.fetch_assets()),
        ]
        try:
            balance, address, assets = await asyncio.gather(*tasks)
        except Exception as e:
            log.warning("snapshot_load_failed", error=str(e), error_type=type(e).__name__)
            raise
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()

        snapshot = WalletSnapshot(balance_satoshis=balance, address=address, assets=assets)
        self._snapshot = snapshot
        log.info("snapshot_loaded", balance_satoshis=balance, asset_count=len(assets))
        return snapshot

    async def load_images(self, assets: Sequence[AssetRecord] | None = None) -> None:
        """Fetch the image of every asset, each in isolation.

        A failed fetch marks only that record UNAVAILABLE and is logged;
        it never aborts sibling fetches and never escapes this call.

        Args:
            assets: Records to load, defaults to the published snapshot's.
        """
        if assets is None:
            assets = self._snapshot.assets if self._snapshot is not None else []

        pending = [asset for asset in assets if asset.image != ImageState.LOADED]
        if not pending:
            return

        await asyncio.gather(*(self._load_image(asset) for asset in pending))

        log.info(
            "asset_images_loaded",
            total=len(pending),
            unavailable=sum(1 for asset in pending if asset.is_degraded),
        )

    async def _load_image(self, asset: AssetRecord) -> None:
        path = ASSET_IMAGE_PATH.format(origin=quote(asset.origin_id, safe=""))
        try:
            async with self._image_semaphore:
                data = await self._fetcher.get(path)
            if not isinstance(data, bytes) or not data:
                raise SchemaError("Image response is not binary data", endpoint=path)
        except Exception as e:
            log.warning(
                "asset_image_unavailable",
                origin=asset.origin_id,
                name=asset.display_name,
                error=str(e),
            )
            asset.mark_unavailable(str(e) or type(e).__name__)
            return

        asset.mark_loaded(data)

    async def refresh_balance(self) -> int:
        """Re-read only the balance and update the published snapshot."""
        balance = await self.fetch_balance()
        if self._snapshot is not None:
            self._snapshot = self._snapshot.model_copy(update={"balance_satoshis": balance})
        log.info("balance_refreshed", balance_satoshis=balance)
        return balance

    async def refresh_assets(self) -> list[AssetRecord]:
        """Re-read only the asset list and update the published snapshot.

        Records whose origin was already in the gallery keep their image.
        """
        assets = await self.fetch_assets()
        if self._snapshot is not None:
            previous = {asset.origin_id: asset for asset in self._snapshot.assets}
            for asset in assets:
                old = previous.get(asset.origin_id)
                if old is not None and old.image == ImageState.LOADED:
                    asset.mark_loaded(old.image_bytes or b"")
            self._snapshot = self._snapshot.model_copy(update={"assets": assets})
        log.info("assets_refreshed", asset_count=len(assets))
        return assets

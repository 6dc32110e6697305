"""End-to-end tests for WalletClient over mocked HTTP."""

from pathlib import Path

import pytest
import respx
from httpx import Response

from bsvwallet.client import WalletClient
from bsvwallet.config.settings import Settings
from bsvwallet.core.exceptions import AuthExpiredError, HttpError
from bsvwallet.models.wallet import ImageState, SessionState, TokenPair
from bsvwallet.services.auth.token_store import MemoryStorage
from bsvwallet.services.mock_transport import (
    MOCK_ADDRESS,
    MOCK_BALANCE,
    MOCK_DISABLED_MESSAGE,
)

BASE_URL = "https://wallet.test"


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(  # type: ignore[call-arg]
        _env_file=None,
        api_base_url=BASE_URL,
        token_store_path=tmp_path / "tokens.json",
    )


class TestWalletClientEndToEnd:
    """Login, snapshot, gallery and send through the full stack."""

    @pytest.mark.asyncio
    async def test_broken_image_keeps_asset_sendable(
        self, settings: Settings, respx_mock_api: respx.MockRouter
    ) -> None:
        """
        Given: login alice/pw -> A1/R1, balance 100, address 1Abc, one NFT o1
        When: The image fetch for o1 fails
        Then: The record shows X/o1/UNAVAILABLE and can still be sent
        """
        respx_mock_api.post("/api/v1/auth/jwt-token").mock(
            return_value=Response(200, json={"access": "A1", "refresh": "R1"})
        )
        respx_mock_api.get("/api/v1/user/wallet/balance").mock(
            return_value=Response(200, json={"balance": 100})
        )
        respx_mock_api.get("/api/v1/bsv/legacy-address").mock(
            return_value=Response(200, json={"Address": "1Abc"})
        )
        respx_mock_api.get("/api/v1/user/nfts/info").mock(
            return_value=Response(200, json=[{"name": "X", "nft_origin": "o1"}])
        )
        respx_mock_api.get("/api/v1/nft/data/o1").mock(return_value=Response(500))
        send = respx_mock_api.post("/api/v1/nft/paymail/send").mock(
            return_value=Response(200, json={"status": "sent"})
        )

        async with WalletClient(settings, storage=MemoryStorage()) as wallet:
            session = await wallet.sessions.login("alice", "pw")
            assert session.username == "alice"
            assert wallet.token_store.load() == TokenPair(access="A1", refresh="R1")

            snapshot = await wallet.refresh()

            assert snapshot.balance_satoshis == 100
            assert snapshot.address == "1Abc"
            [record] = snapshot.assets
            assert (record.display_name, record.origin_id, record.image) == (
                "X",
                "o1",
                ImageState.UNAVAILABLE,
            )
            ack = await wallet.actions.send_asset("bob@paymail.test", record.origin_id)
            assert ack == {"status": "sent"}

        assert send.call_count == 1
        assert send.calls.last.request.headers["Authorization"] == "Bearer A1"

    @pytest.mark.asyncio
    async def test_tokens_persist_across_clients(
        self, settings: Settings, respx_mock_api: respx.MockRouter
    ) -> None:
        respx_mock_api.post("/api/v1/auth/jwt-token").mock(
            return_value=Response(200, json={"access": "A1", "refresh": "R1"})
        )

        async with WalletClient(settings) as wallet:
            await wallet.sessions.login("alice", "pw")

        async with WalletClient(settings) as restored:
            assert restored.session.state == SessionState.AUTHENTICATED
            assert restored.session.username is None

            restored.logout()
            assert restored.session.state == SessionState.ANONYMOUS
            assert restored.aggregator.snapshot is None


class TestWalletClientMockMode:
    """Tests for the in-process demo backend."""

    @pytest.mark.asyncio
    async def test_demo_wallet(self, settings: Settings) -> None:
        demo = settings.model_copy(update={"mock_mode": True})

        async with WalletClient(demo, storage=MemoryStorage()) as wallet:
            await wallet.sessions.login("demo", "demo")
            snapshot = await wallet.refresh()

            assert snapshot.balance_satoshis == MOCK_BALANCE
            assert snapshot.address == MOCK_ADDRESS
            assert len(snapshot.assets) == 3
            assert all(a.image == ImageState.LOADED for a in snapshot.assets)
            assert snapshot.assets[0].image_bytes is not None
            assert snapshot.assets[0].image_bytes.startswith(b"\x89PNG")

    @pytest.mark.asyncio
    async def test_demo_refuses_mutations(self, settings: Settings) -> None:
        demo = settings.model_copy(update={"mock_mode": True})

        async with WalletClient(demo, storage=MemoryStorage()) as wallet:
            await wallet.sessions.login("demo", "demo")

            with pytest.raises(HttpError) as exc_info:
                await wallet.actions.send_funds("bob@paymail.test", 100)

        assert exc_info.value.status_code == 403
        assert exc_info.value.message == MOCK_DISABLED_MESSAGE

    @pytest.mark.asyncio
    async def test_demo_requires_login(self, settings: Settings) -> None:
        demo = settings.model_copy(update={"mock_mode": True})

        async with WalletClient(demo, storage=MemoryStorage()) as wallet:
            with pytest.raises(AuthExpiredError):
                await wallet.refresh()

            assert wallet.aggregator.snapshot is None

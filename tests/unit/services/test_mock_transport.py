"""Unit tests for the mock-mode demo backend."""

import httpx
import pytest
import pytest_asyncio

from bsvwallet.services.mock_transport import (
    MOCK_ACCESS_TOKEN,
    MOCK_ADDRESS,
    MOCK_ASSETS,
    MOCK_BALANCE,
    MOCK_REFRESH_TOKEN,
    build_mock_transport,
)

AUTH = {"Authorization": f"Bearer {MOCK_ACCESS_TOKEN}"}


@pytest_asyncio.fixture
async def client():
    """Plain httpx client over the mock transport."""
    async with httpx.AsyncClient(
        base_url="https://mock.test", transport=build_mock_transport()
    ) as c:
        yield c


class TestMockAuth:
    """Tests for the demo token endpoints."""

    @pytest.mark.asyncio
    async def test_any_credentials_log_in(self, client: httpx.AsyncClient) -> None:
        response = await client.post(
            "/api/v1/auth/jwt-token", json={"username": "demo", "password": "demo"}
        )

        assert response.status_code == 200
        assert response.json() == {
            "access": MOCK_ACCESS_TOKEN,
            "refresh": MOCK_REFRESH_TOKEN,
        }

    @pytest.mark.asyncio
    async def test_empty_password_rejected(self, client: httpx.AsyncClient) -> None:
        response = await client.post(
            "/api/v1/auth/jwt-token", json={"username": "demo", "password": ""}
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_refresh(self, client: httpx.AsyncClient) -> None:
        ok = await client.post("/api/v1/auth/refresh", json={"refresh": MOCK_REFRESH_TOKEN})
        bad = await client.post("/api/v1/auth/refresh", json={"refresh": "other"})

        assert ok.json() == {"access": MOCK_ACCESS_TOKEN}
        assert bad.status_code == 401

    @pytest.mark.asyncio
    async def test_reads_require_bearer(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/api/v1/user/wallet/balance")

        assert response.status_code == 401


class TestMockReads:
    """Tests for the canned wallet data."""

    @pytest.mark.asyncio
    async def test_wallet_reads(self, client: httpx.AsyncClient) -> None:
        balance = await client.get("/api/v1/user/wallet/balance", headers=AUTH)
        address = await client.get("/api/v1/bsv/legacy-address", headers=AUTH)
        assets = await client.get("/api/v1/user/nfts/info", headers=AUTH)

        assert balance.json() == {"balance": MOCK_BALANCE}
        assert address.json() == {"Address": [MOCK_ADDRESS]}
        assert assets.json() == MOCK_ASSETS

    @pytest.mark.asyncio
    async def test_known_image(self, client: httpx.AsyncClient) -> None:
        origin = MOCK_ASSETS[0]["nft_origin"]

        response = await client.get(f"/api/v1/nft/data/{origin}", headers=AUTH)

        assert response.status_code == 200
        assert response.headers["Content-Type"] == "image/png"
        assert response.content.startswith(b"\x89PNG")

    @pytest.mark.asyncio
    async def test_unknown_image_is_404(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/api/v1/nft/data/nope", headers=AUTH)

        assert response.status_code == 404


class TestMockCommands:
    """Tests for refused mutating commands."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "path",
        ["/api/v1/bsv/paymail/send", "/api/v1/nft/paymail/send", "/api/v1/nft/create"],
    )
    async def test_commands_forbidden(self, client: httpx.AsyncClient, path: str) -> None:
        response = await client.post(path, json={}, headers=AUTH)

        assert response.status_code == 403
        assert response.json()["detail"] == "Functionality disabled in mock mode."

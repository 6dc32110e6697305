"""In-process demo backend for mock mode.

Serves canned wallet data through an ``httpx.MockTransport`` so the whole
client stack (token store, fetcher, aggregator) runs unchanged without a
network. Mutating commands are refused.
"""

import base64
import json
from typing import Final

import httpx
import structlog

from bsvwallet.constants.endpoints import (
    ADDRESS_PATH,
    ASSETS_PATH,
    BALANCE_PATH,
    CREATE_ASSET_PATH,
    LOGIN_PATH,
    REFRESH_PATH,
    SEND_ASSET_PATH,
    SEND_FUNDS_PATH,
)

log = structlog.get_logger(__name__)

MOCK_ACCESS_TOKEN: Final[str] = "mock-access-token"
MOCK_REFRESH_TOKEN: Final[str] = "mock-refresh-token"
MOCK_BALANCE: Final[int] = 1_234_567
MOCK_ADDRESS: Final[str] = "1MockAddressForDemoPurposeOnly"
MOCK_ASSETS: Final[list[dict[str, str]]] = [
    {"name": "Demo NFT 1", "nft_origin": "mock_origin_1"},
    {"name": "Cool Cat", "nft_origin": "mock_origin_2"},
    {"name": "My Artwork", "nft_origin": "mock_origin_3"},
]
MOCK_DISABLED_MESSAGE: Final[str] = "Functionality disabled in mock mode."

# 1x1 transparent PNG
_PLACEHOLDER_PNG: Final[bytes] = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)
_IMAGE_PREFIX: Final[str] = "/api/v1/nft/data/"


def _json(status: int, payload: object) -> httpx.Response:
    return httpx.Response(status, json=payload)


def _authorized(request: httpx.Request) -> bool:
    return request.headers.get("authorization") == f"Bearer {MOCK_ACCESS_TOKEN}"


def _handle(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    log.debug("mock_request", method=request.method, path=path)

    if request.method == "POST" and path == LOGIN_PATH:
        body = json.loads(request.content or b"{}")
        if not body.get("username") or not body.get("password"):
            return _json(401, {"detail": "No active account found with the given credentials"})
        return _json(200, {"access": MOCK_ACCESS_TOKEN, "refresh": MOCK_REFRESH_TOKEN})

    if request.method == "POST" and path == REFRESH_PATH:
        body = json.loads(request.content or b"{}")
        if body.get("refresh") != MOCK_REFRESH_TOKEN:
            return _json(401, {"detail": "Token is invalid or expired"})
        return _json(200, {"access": MOCK_ACCESS_TOKEN})

    if not _authorized(request):
        return _json(401, {"detail": "Authentication credentials were not provided."})

    if request.method == "POST" and path in (SEND_ASSET_PATH, SEND_FUNDS_PATH, CREATE_ASSET_PATH):
        return _json(403, {"detail": MOCK_DISABLED_MESSAGE})

    if request.method == "GET":
        if path == BALANCE_PATH:
            return _json(200, {"balance": MOCK_BALANCE})
        if path == ADDRESS_PATH:
            return _json(200, {"Address": [MOCK_ADDRESS]})
        if path == ASSETS_PATH:
            return _json(200, MOCK_ASSETS)
        if path.startswith(_IMAGE_PREFIX):
            origin = path[len(_IMAGE_PREFIX):]
            if any(asset["nft_origin"] == origin for asset in MOCK_ASSETS):
                return httpx.Response(
                    200, content=_PLACEHOLDER_PNG, headers={"Content-Type": "image/png"}
                )

    return _json(404, {"detail": "Not found."})


def build_mock_transport() -> httpx.MockTransport:
    """Create the demo transport used when ``mock_mode`` is enabled."""
    log.info("mock_transport_enabled")
    return httpx.MockTransport(_handle)

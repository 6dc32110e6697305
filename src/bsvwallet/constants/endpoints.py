"""REST endpoints of the custodial wallet service."""

from typing import Final

# Auth
LOGIN_PATH: Final[str] = "/api/v1/auth/jwt-token"
REFRESH_PATH: Final[str] = "/api/v1/auth/refresh"

# Wallet reads
BALANCE_PATH: Final[str] = "/api/v1/user/wallet/balance"
ADDRESS_PATH: Final[str] = "/api/v1/bsv/legacy-address"
ASSETS_PATH: Final[str] = "/api/v1/user/nfts/info"
ASSET_IMAGE_PATH: Final[str] = "/api/v1/nft/data/{origin}"

# Mutating commands
SEND_ASSET_PATH: Final[str] = "/api/v1/nft/paymail/send"
SEND_FUNDS_PATH: Final[str] = "/api/v1/bsv/paymail/send"
CREATE_ASSET_PATH: Final[str] = "/api/v1/nft/create"

JSON_CONTENT_TYPE: Final[str] = "application/json"

"""Response-shape normalization for the wallet read endpoints.

The service has returned more than one shape for the same logical field
(``balance`` vs ``total_balance``, the address as a string vs a
one-element array). Each endpoint has an ordered list of known variants;
the first variant that validates is mapped to the internal shape.
Payloads matching no variant raise SchemaError instead of being guessed.
"""

from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr
from pydantic import ValidationError as PydanticValidationError

from bsvwallet.core.exceptions import SchemaError
from bsvwallet.models.wallet import AssetRecord

log = structlog.get_logger(__name__)


class BalanceV1(BaseModel):
    """``{"balance": <satoshis>}``"""

    balance: StrictInt = Field(..., ge=0)

    def satoshis(self) -> int:
        return self.balance


class BalanceV2(BaseModel):
    """``{"total_balance": <satoshis>}``"""

    total_balance: StrictInt = Field(..., ge=0)

    def satoshis(self) -> int:
        return self.total_balance


class AddressV1(BaseModel):
    """``{"Address": "1Abc..."}``"""

    address: StrictStr = Field(..., alias="Address", min_length=1)

    def value(self) -> str:
        return self.address


class AddressV2(BaseModel):
    """``{"Address": ["1Abc..."]}``"""

    address: list[StrictStr] = Field(..., alias="Address", min_length=1, max_length=1)

    def value(self) -> str:
        if not self.address[0]:
            raise ValueError("empty address")
        return self.address[0]


class AssetInfoV1(BaseModel):
    """One entry of ``[{"name": ..., "nft_origin": ...}]``"""

    model_config = ConfigDict(extra="ignore")

    name: StrictStr
    nft_origin: StrictStr = Field(..., min_length=1)


BALANCE_VARIANTS: tuple[type[BaseModel], ...] = (BalanceV1, BalanceV2)
ADDRESS_VARIANTS: tuple[type[BaseModel], ...] = (AddressV1, AddressV2)


def _first_match(
    payload: Any,
    variants: tuple[type[BaseModel], ...],
    endpoint: str,
) -> BaseModel:
    for variant in variants:
        try:
            return variant.model_validate(payload)
        except PydanticValidationError:
            continue

    log.warning(
        "response_schema_unrecognized",
        endpoint=endpoint,
        payload_type=type(payload).__name__,
        keys=sorted(payload) if isinstance(payload, dict) else None,
    )
    raise SchemaError(f"Unrecognized {endpoint} response shape", endpoint=endpoint)


def normalize_balance(payload: Any) -> int:
    """Map a balance response to satoshis.

    Raises:
        SchemaError: If no known balance shape matches.
    """
    model = _first_match(payload, BALANCE_VARIANTS, "balance")
    return model.satoshis()  # type: ignore[attr-defined]


def normalize_address(payload: Any) -> str:
    """Map an address response to the bare address string.

    Raises:
        SchemaError: If no known address shape matches.
    """
    model = _first_match(payload, ADDRESS_VARIANTS, "address")
    try:
        return model.value()  # type: ignore[attr-defined]
    except ValueError as e:
        raise SchemaError("Unrecognized address response shape", endpoint="address") from e


def normalize_assets(payload: Any) -> list[AssetRecord]:
    """Map an asset-list response to unloaded AssetRecords, in list order.

    Raises:
        SchemaError: If the payload is not a list of known entries or an
            origin appears twice.
    """
    if not isinstance(payload, list):
        log.warning(
            "response_schema_unrecognized",
            endpoint="assets",
            payload_type=type(payload).__name__,
        )
        raise SchemaError("Unrecognized assets response shape", endpoint="assets")

    records: list[AssetRecord] = []
    seen: set[str] = set()
    for index, item in enumerate(payload):
        try:
            info = AssetInfoV1.model_validate(item)
        except PydanticValidationError as e:
            log.warning("response_schema_unrecognized", endpoint="assets", index=index)
            raise SchemaError(
                f"Unrecognized asset entry at position {index}", endpoint="assets"
            ) from e

        if info.nft_origin in seen:
            raise SchemaError(f"Duplicate asset origin {info.nft_origin}", endpoint="assets")
        seen.add(info.nft_origin)
        records.append(AssetRecord(origin_id=info.nft_origin, display_name=info.name))

    return records

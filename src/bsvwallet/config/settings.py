"""Application settings using pydantic-settings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from bsvwallet.core.exceptions import ConfigurationError


class Settings(BaseSettings):
    """Wallet client configuration from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra env vars
    )

    # Application
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Minimum log level"
    )

    # Remote wallet service
    api_base_url: str = Field(
        default="https://akematsu.yenpoint.jp",
        description="Wallet service base URL",
    )
    request_timeout: float = Field(
        default=30.0, gt=0, description="Seconds before a request times out"
    )
    mock_mode: bool = Field(
        default=False, description="Serve demo data instead of calling the service"
    )

    # Token persistence
    token_store_path: Path = Field(
        default=Path.home() / ".bsvwallet" / "tokens.json",
        description="File holding the persisted token record",
    )
    token_storage_key: str = Field(
        default="bsvwallet.tokens", min_length=1, description="Token record key"
    )

    # Gallery
    image_fetch_concurrency: int = Field(
        default=4, ge=1, le=32, description="Concurrent NFT image fetches"
    )
    asset_app_name: str = Field(
        default="bsvwallet", min_length=1, description="'app' field sent on NFT creation"
    )

    @field_validator("api_base_url")
    @classmethod
    def validate_api_base_url(cls, v: str) -> str:
        """Validate base URL format and drop any trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("API base URL must start with http:// or https://")
        return v.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Raises:
        ConfigurationError: If the environment or .env holds invalid values.
    """
    try:
        return Settings()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e

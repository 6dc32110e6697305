"""Configuration module for the wallet client.

Usage:
    from bsvwallet.config import get_settings

    settings = get_settings()  # Cached singleton
    print(settings.api_base_url)
"""

from bsvwallet.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]

"""Shared pytest fixtures for wallet client tests.

This module provides fixtures for:
- Test environment variables and a clean settings cache
- In-memory token stores, empty or pre-seeded
- An AuthenticatedFetcher pointed at a respx-mocked base URL

Usage:
    @pytest.mark.asyncio
    async def test_something(fetcher, respx_mock_api):
        respx_mock_api.get("/api/v1/user/wallet/balance").mock(...)
"""

import os
from collections.abc import Generator

import pytest
import respx

from bsvwallet.services.auth.token_store import MemoryStorage, TokenStore
from bsvwallet.services.fetcher import AuthenticatedFetcher

BASE_URL = "https://wallet.test"

# =============================================================================
# Environment Configuration
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment() -> Generator[None, None, None]:
    """Set up test environment variables.

    Loads .env file first, then sets defaults for any missing variables.
    """
    from dotenv import load_dotenv

    original_env = os.environ.copy()

    load_dotenv()

    os.environ.setdefault("API_BASE_URL", BASE_URL)
    os.environ.setdefault("MOCK_MODE", "false")

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Drop the cached Settings between tests."""
    from bsvwallet.config.settings import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# =============================================================================
# Token Store Fixtures
# =============================================================================


@pytest.fixture
def token_store() -> TokenStore:
    """Empty in-memory token store."""
    return TokenStore(MemoryStorage())


@pytest.fixture
def logged_in_store(token_store: TokenStore) -> TokenStore:
    """Token store holding the pair A1/R1."""
    token_store.save(access="A1", refresh="R1")
    return token_store


# =============================================================================
# HTTP Fixtures
# =============================================================================


@pytest.fixture
def respx_mock_api() -> Generator[respx.MockRouter, None, None]:
    """respx router bound to the test base URL.

    Unmatched requests fail the test.
    """
    with respx.mock(base_url=BASE_URL, assert_all_called=False) as router:
        yield router


@pytest.fixture
def fetcher(logged_in_store: TokenStore) -> AuthenticatedFetcher:
    """Fetcher backed by the A1/R1 token store."""
    return AuthenticatedFetcher(base_url=BASE_URL, token_store=logged_in_store)


@pytest.fixture
def anonymous_fetcher(token_store: TokenStore) -> AuthenticatedFetcher:
    """Fetcher backed by an empty token store."""
    return AuthenticatedFetcher(base_url=BASE_URL, token_store=token_store)

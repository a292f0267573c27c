from typing import AsyncGenerator

import pytest
from faker import Faker
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from pairlink.main import app
from pairlink.services.claim_cache import ClaimCache
from pairlink.services.token_codec import TokenCodec
from tests.utils import TEST_SECRET, ManualClock


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def faker() -> Faker:
    """Create a Faker instance for generating test data."""
    return Faker()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def codec(clock: ManualClock) -> TokenCodec:
    """Token codec with a known secret and a manual clock."""
    return TokenCodec(secret=TEST_SECRET, clock=clock)


@pytest.fixture
def claim_cache(clock: ManualClock) -> ClaimCache:
    """Claim cache with the default 300 s TTL and a manual clock."""
    return ClaimCache(ttl_seconds=300, clock=clock)


@pytest.fixture
def test_app(codec: TokenCodec, claim_cache: ClaimCache) -> FastAPI:
    """
    The application with test-owned codec and cache attached.

    ASGITransport does not run the lifespan, so state is attached here instead.
    """
    app.state.token_codec = codec
    app.state.claim_cache = claim_cache

    yield app

    del app.state.token_codec
    del app.state.claim_cache
    app.dependency_overrides.clear()


@pytest.fixture
async def client(test_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for testing."""
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url="http://test") as ac:
        yield ac

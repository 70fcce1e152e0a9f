from __future__ import annotations

from typing import Callable

import httpx
import pytest

from cinesense.cache import CacheStore
from cinesense.client import ApiClient
from cinesense.config import Settings
from cinesense.storage import InMemoryStorage

from tests.helpers import API_URL, CountingTokenStore, FakeClock, Recorder


@pytest.fixture
def settings() -> Settings:
    return Settings(api_url=API_URL, in_memory=True, _env_file=None)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def cache(storage, clock) -> CacheStore:
    return CacheStore(storage, clock=clock)


@pytest.fixture
def token_store() -> CountingTokenStore:
    return CountingTokenStore(token="abc123")


@pytest.fixture
async def make_client(settings, cache, token_store):
    """Build an ApiClient whose network is the given handler."""
    clients: list[ApiClient] = []

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> tuple[ApiClient, Recorder]:
        recorder = Recorder(handler)
        client = ApiClient(
            settings,
            cache,
            token_store,
            transport=httpx.MockTransport(recorder),
        )
        clients.append(client)
        return client, recorder

    yield _make

    for client in clients:
        await client.aclose()

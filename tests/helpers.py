"""Test doubles shared across the suite."""

from __future__ import annotations

from typing import Callable

import httpx

from cinesense.tokens import InMemoryTokenStore

API_URL = "http://test.local/api"


class FakeClock:
    """Millisecond clock the tests move by hand."""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class CountingTokenStore(InMemoryTokenStore):
    def __init__(self, token: str | None = None) -> None:
        super().__init__(token)
        self.remove_calls = 0

    async def remove_item(self, key: str) -> None:
        self.remove_calls += 1
        await super().remove_item(key)


class Recorder:
    """Wraps a request handler and records every request it sees."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.handler = handler
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def calls(self) -> int:
        return len(self.requests)

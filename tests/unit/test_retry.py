"""Tests for retry with exponential backoff."""

from unittest.mock import AsyncMock, call, patch

import httpx
import pytest

from cinesense.exceptions import (
    APITimeoutError,
    NotFoundError,
    RateLimitError,
    ServerError,
    ClientError,
)
from cinesense.retry import backoff_delay_ms, is_retryable_status, retry_request


class FlakyRequest:
    """Fails with the given exceptions, then returns ``result``."""

    def __init__(self, failures, result="ok"):
        self.failures = list(failures)
        self.result = result
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.failures:
            raise self.failures.pop(0)
        return self.result


@pytest.fixture
def sleep():
    with patch("cinesense.retry.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
        yield mock_sleep


class TestRetryRequest:
    """Test retry_request."""

    async def test_success_first_try(self, sleep):
        """Test that a successful call is not retried."""
        request_fn = FlakyRequest([])
        assert await retry_request(request_fn) == "ok"
        assert request_fn.calls == 1
        sleep.assert_not_awaited()

    async def test_backoff_then_success(self, sleep):
        """Test two 500s then success waits 1s then 2s and stops."""
        request_fn = FlakyRequest([ServerError(http_status=500), ServerError(http_status=500)])

        assert await retry_request(request_fn, 3, 1000) == "ok"

        assert request_fn.calls == 3
        assert sleep.await_args_list == [call(1.0), call(2.0)]

    async def test_no_retry_on_not_found(self, sleep):
        """Test that a 404 fails after one attempt with no delay."""
        request_fn = FlakyRequest([NotFoundError()])

        with pytest.raises(NotFoundError):
            await retry_request(request_fn, 3, 1000)

        assert request_fn.calls == 1
        sleep.assert_not_awaited()

    @pytest.mark.parametrize("status", [400, 401, 403, 422, 499])
    async def test_no_retry_on_client_errors(self, sleep, status):
        """Test that 4xx statuses other than 429 are not retried."""
        request_fn = FlakyRequest([ClientError(http_status=status)])
        with pytest.raises(ClientError):
            await retry_request(request_fn)
        assert request_fn.calls == 1

    async def test_rate_limit_is_retried(self, sleep):
        """Test that 429 is retried."""
        request_fn = FlakyRequest([RateLimitError()])
        assert await retry_request(request_fn, 3, 10) == "ok"
        assert request_fn.calls == 2
        assert sleep.await_args_list == [call(0.01)]

    async def test_timeout_is_retried(self, sleep):
        """Test that failures without a status are retried."""
        request_fn = FlakyRequest([APITimeoutError()])
        assert await retry_request(request_fn, 2, 1000) == "ok"
        assert request_fn.calls == 2

    async def test_exhaustion_raises_last_failure_unchanged(self, sleep):
        """Test that the final failure propagates as-is."""
        last = ServerError(http_status=503)
        request_fn = FlakyRequest([ServerError(http_status=500), ServerError(http_status=502), last])

        with pytest.raises(ServerError) as exc_info:
            await retry_request(request_fn, 3, 1000)

        assert exc_info.value is last
        assert request_fn.calls == 3
        assert sleep.await_args_list == [call(1.0), call(2.0)]

    async def test_raw_httpx_status_errors(self, sleep):
        """Test that unclassified httpx errors are inspected too."""
        request = httpx.Request("POST", "http://test.local/api/lists")
        response = httpx.Response(404, request=request)
        request_fn = FlakyRequest([httpx.HTTPStatusError("nf", request=request, response=response)])

        with pytest.raises(httpx.HTTPStatusError):
            await retry_request(request_fn)
        assert request_fn.calls == 1

    async def test_single_attempt(self, sleep):
        """Test max_retries=1 never sleeps."""
        request_fn = FlakyRequest([ServerError(http_status=500)])
        with pytest.raises(ServerError):
            await retry_request(request_fn, max_retries=1)
        sleep.assert_not_awaited()

    async def test_real_delays(self):
        """Test backoff with real sleeping and small delays."""
        request_fn = FlakyRequest([ServerError(http_status=500), ServerError(http_status=500)])
        assert await retry_request(request_fn, 3, 1) == "ok"
        assert request_fn.calls == 3


class TestHelpers:
    """Test retry helpers."""

    def test_backoff_delay(self):
        """Test the doubling schedule."""
        assert [backoff_delay_ms(i, 1000) for i in range(4)] == [1000, 2000, 4000, 8000]

    def test_retryable_status(self):
        """Test the status rule."""
        assert is_retryable_status(None)
        assert is_retryable_status(429)
        assert is_retryable_status(500)
        assert not is_retryable_status(400)
        assert not is_retryable_status(404)

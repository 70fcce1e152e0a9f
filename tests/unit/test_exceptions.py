"""Tests for failure classification."""

import httpx
import pytest

from cinesense.exceptions import (
    GENERIC_MESSAGE,
    APITimeoutError,
    AuthenticationError,
    ClientError,
    NetworkUnreachableError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitError,
    RequestFailure,
    ServerError,
    UnknownRequestError,
    classify,
    http_status_of,
    map_http_status_to_error,
)
from cinesense.types import FailureKind

REQUEST = httpx.Request("GET", "http://test.local/api/media/trending")


def status_error(status: int, **kwargs) -> httpx.HTTPStatusError:
    response = httpx.Response(status, request=REQUEST, **kwargs)
    return httpx.HTTPStatusError("error", request=REQUEST, response=response)


class TestRequestFailure:
    """Test base exception class."""

    def test_basic_failure(self):
        """Test default values."""
        failure = RequestFailure()
        assert failure.kind == FailureKind.UNKNOWN
        assert failure.user_message == GENERIC_MESSAGE
        assert failure.http_status is None
        assert failure.is_network_error is False

    def test_str_includes_status(self):
        """Test string form."""
        failure = ServerError("Down", http_status=503)
        assert str(failure) == "[503] ServerError: Down"

    def test_rate_limit_defaults(self):
        """Test RateLimitError defaults."""
        failure = RateLimitError()
        assert failure.kind == FailureKind.RATE_LIMITED
        assert failure.http_status == 429
        assert failure.user_message == "Too many requests. Please try again later."

    def test_client_error_subclasses(self):
        """Test the ClientError family."""
        for cls in (AuthenticationError, PermissionDeniedError, NotFoundError):
            assert issubclass(cls, ClientError)
            assert cls().kind == FailureKind.CLIENT_ERROR


class TestClassify:
    """Test the classification rules, in order."""

    def test_timeout(self):
        """Test that transport timeouts classify as Timeout."""
        failure = classify(httpx.ReadTimeout("slow", request=REQUEST))
        assert isinstance(failure, APITimeoutError)
        assert failure.kind == FailureKind.TIMEOUT
        assert failure.user_message == "Request timed out. Please check your internet connection."
        assert failure.is_network_error is False

    def test_connect_timeout_is_timeout(self):
        """Test that connect timeouts are timeouts, not unreachable."""
        assert isinstance(classify(httpx.ConnectTimeout("slow", request=REQUEST)), APITimeoutError)

    def test_network_unreachable(self):
        """Test that other transport errors classify as NetworkUnreachable."""
        failure = classify(httpx.ConnectError("refused", request=REQUEST))
        assert isinstance(failure, NetworkUnreachableError)
        assert failure.kind == FailureKind.NETWORK_UNREACHABLE
        assert failure.user_message == "No internet connection. Please check your network."
        assert failure.is_network_error is True

    def test_unauthorized(self):
        """Test that 401 classifies as an authentication ClientError."""
        failure = classify(status_error(401, json={"message": "Token expired"}))
        assert isinstance(failure, AuthenticationError)
        assert failure.kind == FailureKind.CLIENT_ERROR
        assert failure.http_status == 401
        assert failure.user_message == "Token expired"

    def test_forbidden(self):
        """Test that 403 gets the permission message."""
        failure = classify(status_error(403, json={"message": "ignored"}))
        assert isinstance(failure, PermissionDeniedError)
        assert failure.user_message == "You do not have permission to access this resource."

    def test_rate_limited(self):
        """Test that 429 classifies as RateLimited with Retry-After."""
        failure = classify(status_error(429, headers={"Retry-After": "30"}))
        assert isinstance(failure, RateLimitError)
        assert failure.kind == FailureKind.RATE_LIMITED
        assert failure.retry_after == 30
        assert failure.user_message == "Too many requests. Please try again later."

    @pytest.mark.parametrize("status", [500, 502, 503, 504])
    def test_server_unavailable(self, status):
        """Test the server-unavailable statuses."""
        failure = classify(status_error(status, json={"message": "ignored"}))
        assert isinstance(failure, ServerError)
        assert failure.http_status == status
        assert failure.user_message == "Server is currently unavailable. Please try again later."

    def test_other_client_status_uses_body_message(self):
        """Test that other 4xx statuses take the body message."""
        failure = classify(status_error(422, json={"message": "Title is required"}))
        assert type(failure) is ClientError
        assert failure.http_status == 422
        assert failure.user_message == "Title is required"
        assert failure.body == {"message": "Title is required"}

    def test_nested_error_message(self):
        """Test the error.message body shape."""
        failure = classify(status_error(400, json={"error": {"message": "Bad page"}}))
        assert failure.user_message == "Bad page"

    def test_not_found(self):
        """Test that 404 is a NotFoundError."""
        failure = classify(status_error(404))
        assert isinstance(failure, NotFoundError)
        assert failure.user_message == GENERIC_MESSAGE

    def test_other_server_status(self):
        """Test that other 5xx statuses are ServerErrors with the fallback message."""
        failure = classify(status_error(507, text="disk full"))
        assert type(failure) is ServerError
        assert failure.http_status == 507
        assert failure.user_message == GENERIC_MESSAGE
        assert failure.body == "disk full"

    def test_unknown(self):
        """Test that anything else is Unknown."""
        failure = classify(RuntimeError("what"))
        assert isinstance(failure, UnknownRequestError)
        assert failure.kind == FailureKind.UNKNOWN
        assert failure.user_message == GENERIC_MESSAGE

    def test_already_classified_is_unchanged(self):
        """Test that classification is idempotent."""
        failure = RateLimitError()
        assert classify(failure) is failure


class TestHelpers:
    """Test module helpers."""

    def test_map_status_defaults(self):
        """Test mapping a status without a body."""
        assert isinstance(map_http_status_to_error(401), AuthenticationError)
        assert isinstance(map_http_status_to_error(418), ClientError)
        assert isinstance(map_http_status_to_error(599), ServerError)

    def test_http_status_of(self):
        """Test reading a status from different exception shapes."""
        assert http_status_of(NotFoundError()) == 404
        assert http_status_of(status_error(500)) == 500
        assert http_status_of(APITimeoutError()) is None
        assert http_status_of(ValueError()) is None

"""Custom exceptions for the CineSense API client."""

from typing import Any, Optional

import httpx

from cinesense.types import FailureKind


GENERIC_MESSAGE = "Something went wrong. Please try again."
TIMEOUT_MESSAGE = "Request timed out. Please check your internet connection."
NETWORK_MESSAGE = "No internet connection. Please check your network."
PERMISSION_MESSAGE = "You do not have permission to access this resource."
RATE_LIMIT_MESSAGE = "Too many requests. Please try again later."
SERVER_UNAVAILABLE_MESSAGE = "Server is currently unavailable. Please try again later."

SERVER_UNAVAILABLE_STATUSES = frozenset({500, 502, 503, 504})


class RequestFailure(Exception):
    """Base exception for every classified request failure.

    Attributes:
        kind: Failure category callers branch on
        http_status: Status code when the failure came from an HTTP response
        user_message: Ready-to-display message
        body: Decoded response body, if any
        is_network_error: True when no response was received at all
    """

    kind: FailureKind = FailureKind.UNKNOWN

    def __init__(
        self,
        message: str = GENERIC_MESSAGE,
        *,
        http_status: Optional[int] = None,
        body: Any = None,
        is_network_error: bool = False,
    ) -> None:
        super().__init__(message)
        self.user_message = message
        self.http_status = http_status
        self.body = body
        self.is_network_error = is_network_error

    def __str__(self) -> str:
        msg = f"{self.kind.value}: {self.user_message}"
        if self.http_status is not None:
            msg = f"[{self.http_status}] {msg}"
        return msg


class ClientError(RequestFailure):
    """4xx response other than 429."""

    kind = FailureKind.CLIENT_ERROR


class AuthenticationError(ClientError):
    """401 response; the stored bearer token is no longer valid."""

    def __init__(self, message: str = "Authentication failed", **kwargs: Any) -> None:
        kwargs.setdefault("http_status", 401)
        super().__init__(message, **kwargs)


class PermissionDeniedError(ClientError):
    """403 response."""

    def __init__(self, message: str = PERMISSION_MESSAGE, **kwargs: Any) -> None:
        kwargs.setdefault("http_status", 403)
        super().__init__(message, **kwargs)


class NotFoundError(ClientError):
    """404 response."""

    def __init__(self, message: str = "Resource not found", **kwargs: Any) -> None:
        kwargs.setdefault("http_status", 404)
        super().__init__(message, **kwargs)


class RateLimitError(RequestFailure):
    """429 response."""

    kind = FailureKind.RATE_LIMITED

    def __init__(
        self,
        message: str = RATE_LIMIT_MESSAGE,
        retry_after: Optional[int] = None,
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("http_status", 429)
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class ServerError(RequestFailure):
    """5xx response."""

    kind = FailureKind.SERVER_ERROR


class APITimeoutError(RequestFailure):
    """The transport gave up waiting for a response."""

    kind = FailureKind.TIMEOUT

    def __init__(self, message: str = TIMEOUT_MESSAGE, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class NetworkUnreachableError(RequestFailure):
    """No response received; the only kind eligible for stale-cache fallback."""

    kind = FailureKind.NETWORK_UNREACHABLE

    def __init__(self, message: str = NETWORK_MESSAGE, **kwargs: Any) -> None:
        kwargs["is_network_error"] = True
        super().__init__(message, **kwargs)


class UnknownRequestError(RequestFailure):
    """Anything that could not be classified."""

    kind = FailureKind.UNKNOWN


class StorageError(Exception):
    """Raised by key-value storage backends on read/write faults."""
    pass


class EncryptionError(StorageError):
    """Raised when a stored value cannot be encrypted or decrypted."""
    pass


def _body_message(body: Any) -> Optional[str]:
    """Pull a human-readable message out of a decoded error body."""
    if not isinstance(body, dict):
        return None
    message = body.get("message")
    if isinstance(message, str) and message:
        return message
    error = body.get("error")
    if isinstance(error, dict):
        message = error.get("message")
        if isinstance(message, str) and message:
            return message
    elif isinstance(error, str) and error:
        return error
    return None


def _decode_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text or None


def map_http_status_to_error(
    status_code: int,
    body: Any = None,
    retry_after: Optional[int] = None,
) -> RequestFailure:
    """Map an HTTP status code to the matching failure.

    Args:
        status_code: Response status
        body: Decoded response body
        retry_after: Parsed ``Retry-After`` header for 429 responses

    Returns:
        Classified failure carrying a user-facing message
    """
    body_message = _body_message(body)

    if status_code == 401:
        return AuthenticationError(body_message or GENERIC_MESSAGE, body=body)
    if status_code == 403:
        return PermissionDeniedError(body=body)
    if status_code == 429:
        return RateLimitError(retry_after=retry_after, body=body)
    if status_code in SERVER_UNAVAILABLE_STATUSES:
        return ServerError(SERVER_UNAVAILABLE_MESSAGE, http_status=status_code, body=body)

    message = body_message or GENERIC_MESSAGE
    if status_code == 404:
        return NotFoundError(message, body=body)
    if 400 <= status_code < 500:
        return ClientError(message, http_status=status_code, body=body)
    if status_code >= 500:
        return ServerError(message, http_status=status_code, body=body)
    return UnknownRequestError(message, http_status=status_code, body=body)


def classify(exc: BaseException) -> RequestFailure:
    """Map a raw transport or HTTP error into the failure taxonomy.

    Classification is pure: it performs no I/O. The 401 token-clearing side
    effect lives in the client.

    Args:
        exc: Exception raised while issuing a request

    Returns:
        Classified failure
    """
    if isinstance(exc, RequestFailure):
        return exc

    if isinstance(exc, httpx.TimeoutException):
        return APITimeoutError()

    if isinstance(exc, httpx.HTTPStatusError):
        response = exc.response
        retry_after = None
        if response.status_code == 429:
            header = response.headers.get("retry-after")
            if header and header.isdigit():
                retry_after = int(header)
        return map_http_status_to_error(
            response.status_code,
            _decode_body(response),
            retry_after=retry_after,
        )

    if isinstance(exc, httpx.TransportError):
        return NetworkUnreachableError()

    return UnknownRequestError(GENERIC_MESSAGE)


def http_status_of(exc: BaseException) -> Optional[int]:
    """Return the HTTP status carried by an exception, if any."""
    if isinstance(exc, RequestFailure):
        return exc.http_status
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code
    return None

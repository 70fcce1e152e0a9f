"""Structured logging with redaction of sensitive values."""

import logging
import sys
from typing import Any, Optional

import structlog

REDACTED = "[REDACTED]"

SENSITIVE_KEYS = (
    "token",
    "authorization",
    "password",
    "api_key",
    "apikey",
    "secret",
    "bearer",
)


def is_sensitive(key: Any) -> bool:
    """Check whether a field name looks like it holds a credential."""
    lower_key = str(key).lower()
    return any(sensitive in lower_key for sensitive in SENSITIVE_KEYS)


def sanitize(obj: Any) -> Any:
    """Return a copy of ``obj`` with sensitive fields redacted.

    Dicts are walked recursively, including dicts nested inside lists and
    tuples. Non-container values are returned unchanged and the input is
    never mutated.
    """
    if isinstance(obj, dict):
        return {
            key: REDACTED if is_sensitive(key) else sanitize(value)
            for key, value in obj.items()
        }
    if isinstance(obj, (list, tuple)):
        return [sanitize(item) for item in obj]
    return obj


def redact_event(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """structlog processor that redacts sensitive keys in every event."""
    return {
        key: value if key == "event" else (REDACTED if is_sensitive(key) else sanitize(value))
        for key, value in event_dict.items()
    }


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """Configure structlog and the standard library root logger.

    Args:
        level: Minimum log level name
        json_logs: Render events as JSON instead of console key-value pairs
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            redact_event,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)
    logging.getLogger().setLevel(log_level)


class ApiLogger:
    """Logs API traffic with sanitized payloads.

    Output is suppressed unless ``enabled`` is true, so release builds never
    write request bodies to the log.
    """

    def __init__(self, name: str = "cinesense.api", *, enabled: bool = False) -> None:
        self.enabled = enabled
        self._logger = structlog.get_logger(name)

    def api_request(self, method: str, url: str, data: Any = None) -> None:
        if not self.enabled:
            return
        self._logger.debug(
            "api_request",
            method=method,
            url=url,
            data=sanitize(data) if data is not None else None,
        )

    def api_response(self, method: str, url: str, status: int, data: Any = None) -> None:
        if not self.enabled:
            return
        self._logger.debug(
            "api_response",
            method=method,
            url=url,
            status=status,
            data=sanitize(data) if data is not None else None,
        )

    def api_error(
        self,
        method: str,
        url: str,
        error: BaseException,
        status: Optional[int] = None,
        data: Any = None,
    ) -> None:
        if not self.enabled:
            return
        self._logger.error(
            "api_error",
            method=method,
            url=url,
            message=str(error),
            status=status,
            data=sanitize(data) if data is not None else None,
        )

"""Client configuration."""

from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cinesense.types import CacheTTL

DEFAULT_DATA_DIR = Path("~/.cinesense")


class Settings(BaseSettings):
    """Settings read from ``CINESENSE_*`` environment variables and ``.env``.

    Storage is durable and encrypted unless ``in_memory`` is set: the cache
    and token live in ``cache_path`` (default ``data_dir/cache.db``), encrypted
    with ``encryption_key`` or, when that is unset, a secret generated once
    and kept in ``key_path`` (default ``data_dir/secret.key``).
    """

    model_config = SettingsConfigDict(
        env_prefix="CINESENSE_",
        env_file=".env",
        extra="ignore",
    )

    api_url: str = "http://localhost:5000/api"
    timeout: float = 15.0
    health_timeout: float = 5.0
    health_path: str = "/health"
    default_cache_ttl_ms: int = Field(default=int(CacheTTL.MEDIUM), gt=0)
    data_dir: Path = Field(default=DEFAULT_DATA_DIR, validate_default=True)
    cache_path: Optional[Path] = None
    key_path: Optional[Path] = None
    encryption_key: Optional[str] = None
    in_memory: bool = False
    debug: bool = False
    log_level: str = "INFO"
    json_logs: bool = False

    @field_validator("api_url")
    @classmethod
    def validate_api_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("api_url must be an http(s) URL")
        return value.rstrip("/")

    @field_validator("timeout", "health_timeout")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeouts must be positive")
        return value

    @field_validator("data_dir", "cache_path", "key_path")
    @classmethod
    def expand_paths(cls, value: Optional[Path]) -> Optional[Path]:
        return value.expanduser() if value is not None else None

    @property
    def resolved_cache_path(self) -> Path:
        return self.cache_path or self.data_dir / "cache.db"

    @property
    def resolved_key_path(self) -> Path:
        return self.key_path or self.data_dir / "secret.key"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value}")
        return level


def load_settings(path: Optional[Union[str, Path]] = None, **overrides: Any) -> Settings:
    """Load settings from an optional YAML file.

    Values from the file are used as constructor arguments, so explicit
    ``overrides`` win over the file, and both win over the environment.

    Args:
        path: YAML file with a top-level mapping of setting names
        **overrides: Explicit setting values

    Returns:
        Validated settings
    """
    values: dict[str, Any] = {}
    if path is not None:
        with open(path) as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"Settings file {path} must contain a mapping")
        values.update(loaded)
    values.update(overrides)
    return Settings(**values)

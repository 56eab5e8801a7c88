"""
Configuration management for vestledger.

Handles loading configuration from environment variables and validation.
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass
from typing import Any

from vestledger.core.exceptions import ConfigurationError


def _get_env_var(name: str, default: str | None = None, required: bool = False) -> str | None:
    """Get environment variable with optional default."""
    value = os.environ.get(name, default)
    if required and not value:
        raise ConfigurationError(f"Required environment variable {name} is not set")
    return value


def _parse(name: str, value: str | None, cast: type) -> Any:
    if value is None:
        return None
    try:
        return cast(value)
    except ValueError:
        raise ConfigurationError(
            f"Invalid value for {name}: {value!r}", details={"expected": cast.__name__}
        ) from None


@dataclass(frozen=True)
class Config:
    """Ledger configuration."""

    storage_backend: str = "memory"
    redis_url: str | None = None
    log_level: str = "INFO"
    env: str = "development"

    # Schedule locks
    lock_ttl: int = 30  # seconds
    lock_retry_count: int = 3
    lock_retry_delay: float = 0.1

    # Custodial transfer API (HttpAssetTransfer)
    transfer_api_url: str | None = None
    transfer_api_key: str | None = None
    request_timeout: float = 30.0

    def __post_init__(self) -> None:
        if self.lock_ttl <= 0:
            raise ConfigurationError("lock_ttl must be positive")
        if self.lock_retry_count < 0:
            raise ConfigurationError("lock_retry_count must not be negative")
        if self.lock_retry_delay < 0:
            raise ConfigurationError("lock_retry_delay must not be negative")
        if self.request_timeout <= 0:
            raise ConfigurationError("request_timeout must be positive")

    @classmethod
    def from_env(cls, **overrides: Any) -> Config:
        """Load configuration from environment variables."""
        values: dict[str, Any] = {
            "storage_backend": _get_env_var("VESTLEDGER_STORAGE_BACKEND", default="memory"),
            "redis_url": _get_env_var("VESTLEDGER_REDIS_URL"),
            "log_level": _get_env_var("VESTLEDGER_LOG_LEVEL", default="INFO"),
            "env": _get_env_var("VESTLEDGER_ENV", default="development"),
            "lock_ttl": _parse(
                "VESTLEDGER_LOCK_TTL", _get_env_var("VESTLEDGER_LOCK_TTL"), int
            ),
            "lock_retry_count": _parse(
                "VESTLEDGER_LOCK_RETRY_COUNT", _get_env_var("VESTLEDGER_LOCK_RETRY_COUNT"), int
            ),
            "lock_retry_delay": _parse(
                "VESTLEDGER_LOCK_RETRY_DELAY", _get_env_var("VESTLEDGER_LOCK_RETRY_DELAY"), float
            ),
            "transfer_api_url": _get_env_var("VESTLEDGER_TRANSFER_API_URL"),
            "transfer_api_key": _get_env_var("VESTLEDGER_TRANSFER_API_KEY"),
            "request_timeout": _parse(
                "VESTLEDGER_REQUEST_TIMEOUT", _get_env_var("VESTLEDGER_REQUEST_TIMEOUT"), float
            ),
        }
        # Unset numeric variables fall back to the dataclass defaults
        values = {k: v for k, v in values.items() if v is not None}
        values.update(overrides)
        return cls(**values)

    def with_updates(self, **updates: Any) -> Config:
        """Create a new Config with updated values."""
        current = asdict(self)
        current.update(updates)
        return Config(**current)

    def masked_api_key(self) -> str:
        """Return transfer API key with most characters masked for safe logging."""
        if not self.transfer_api_key:
            return ""
        if len(self.transfer_api_key) <= 8:
            return "****"
        return self.transfer_api_key[:4] + "..." + self.transfer_api_key[-4:]

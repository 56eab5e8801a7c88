"""Unit tests for config module."""

import os
from unittest.mock import patch

import pytest

from vestledger.core.config import Config
from vestledger.core.exceptions import ConfigurationError


class TestConfig:
    """Tests for Config class."""

    def test_defaults(self) -> None:
        config = Config()

        assert config.storage_backend == "memory"
        assert config.log_level == "INFO"
        assert config.lock_ttl == 30
        assert config.transfer_api_url is None

    def test_config_is_immutable(self) -> None:
        config = Config()

        with pytest.raises(AttributeError):
            config.storage_backend = "redis"  # type: ignore

    @pytest.mark.parametrize(
        "field, value",
        [
            ("lock_ttl", 0),
            ("lock_retry_count", -1),
            ("lock_retry_delay", -0.5),
            ("request_timeout", 0),
        ],
    )
    def test_invalid_values_raise(self, field, value) -> None:
        with pytest.raises(ConfigurationError):
            Config(**{field: value})

    def test_from_env(self) -> None:
        env = {
            "VESTLEDGER_STORAGE_BACKEND": "redis",
            "VESTLEDGER_REDIS_URL": "redis://cache:6379/1",
            "VESTLEDGER_LOG_LEVEL": "DEBUG",
            "VESTLEDGER_LOCK_TTL": "10",
            "VESTLEDGER_LOCK_RETRY_DELAY": "0.25",
            "VESTLEDGER_TRANSFER_API_URL": "https://custody.example.com/v1",
            "VESTLEDGER_TRANSFER_API_KEY": "secret-key-123456",
        }
        with patch.dict(os.environ, env, clear=True):
            config = Config.from_env()

        assert config.storage_backend == "redis"
        assert config.redis_url == "redis://cache:6379/1"
        assert config.log_level == "DEBUG"
        assert config.lock_ttl == 10
        assert config.lock_retry_delay == 0.25
        assert config.lock_retry_count == 3
        assert config.transfer_api_url == "https://custody.example.com/v1"

    def test_from_env_defaults(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            config = Config.from_env()

        assert config == Config()

    def test_from_env_overrides_win(self) -> None:
        with patch.dict(os.environ, {"VESTLEDGER_LOG_LEVEL": "DEBUG"}, clear=True):
            config = Config.from_env(log_level="WARNING", env="production")

        assert config.log_level == "WARNING"
        assert config.env == "production"

    def test_from_env_unparseable_number(self) -> None:
        with patch.dict(os.environ, {"VESTLEDGER_LOCK_TTL": "soon"}, clear=True):
            with pytest.raises(ConfigurationError, match="VESTLEDGER_LOCK_TTL"):
                Config.from_env()

    def test_with_updates(self) -> None:
        config = Config()
        updated = config.with_updates(lock_retry_count=7)

        assert updated.lock_retry_count == 7
        assert config.lock_retry_count == 3

    def test_masked_api_key(self) -> None:
        assert Config().masked_api_key() == ""
        assert Config(transfer_api_key="short").masked_api_key() == "****"
        assert Config(transfer_api_key="abcd1234efgh5678").masked_api_key() == "abcd...5678"

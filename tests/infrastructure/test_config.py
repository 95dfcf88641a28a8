"""Tests for environment-driven settings."""

from pathlib import Path

import pytest

from bookstore.domain.exceptions import ValidationError
from bookstore.infrastructure.config import DEFAULT_DATA_DIR, Settings


class TestSettings:

    def test_defaults(self):
        cfg = Settings.from_env({})
        assert cfg.backend == "json"
        assert cfg.data_dir == DEFAULT_DATA_DIR
        assert cfg.tx_timeout_ms == 5000
        assert cfg.tx_max_retries == 3
        assert cfg.tx_retry_delay == 0.5
        assert not cfg.is_production

    def test_overrides(self):
        cfg = Settings.from_env({
            "BOOKSTORE_BACKEND": "Mongo",
            "BOOKSTORE_DATA_DIR": "/tmp/books",
            "BOOKSTORE_MONGO_URL": "mongodb://db:27017/?replicaSet=rs0",
            "BOOKSTORE_MONGO_DB": "shop",
            "BOOKSTORE_TX_TIMEOUT_MS": "1000",
            "BOOKSTORE_TX_MAX_RETRIES": "5",
            "BOOKSTORE_TX_RETRY_DELAY": "0.25",
            "BOOKSTORE_ENV": "production",
        })
        assert cfg.backend == "mongo"
        assert cfg.data_dir == Path("/tmp/books")
        assert cfg.mongo_db == "shop"
        assert cfg.tx_timeout_ms == 1000
        assert cfg.tx_max_retries == 5
        assert cfg.tx_retry_delay == 0.25
        assert cfg.is_production

    def test_unknown_backend(self):
        with pytest.raises(ValidationError, match="BOOKSTORE_BACKEND"):
            Settings.from_env({"BOOKSTORE_BACKEND": "redis"})

    def test_non_numeric_retries(self):
        with pytest.raises(ValidationError, match="must be an integer"):
            Settings.from_env({"BOOKSTORE_TX_MAX_RETRIES": "many"})

    def test_zero_retries(self):
        with pytest.raises(ValidationError, match="must be at least 1, got 0"):
            Settings.from_env({"BOOKSTORE_TX_MAX_RETRIES": "0"})

    def test_negative_delay(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            Settings.from_env({"BOOKSTORE_TX_RETRY_DELAY": "-1"})

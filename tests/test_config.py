"""Tests for environment-based configuration."""

import pytest
from datetime import date
from pathlib import Path

from payment_import.config import DEFAULT_FIO_API_URL, SyncConfig
from payment_import.exceptions import ConfigurationError


@pytest.fixture
def environ():
    """Minimal production environment."""
    return {
        "FIO_API_TOKEN": "fio-token",
        "BILLING_API_URL": "https://ucrm.example",
        "BILLING_API_KEY": "app-key",
        "SYNC_START_DATE": "2024-01-01",
    }


class TestFromEnv:
    """Tests for SyncConfig.from_env."""

    def test_defaults(self, environ):
        config = SyncConfig.from_env(environ)

        assert config.feed_provider == "fio"
        assert config.billing_provider == "ucrm"
        assert config.fio_api_url == DEFAULT_FIO_API_URL
        assert config.billing_api_version == "1.0"
        assert config.start_date == date(2024, 1, 1)
        assert config.match_by == "invoiceNumber"
        assert config.provider_name == "Fio CZ"
        assert config.checkpoint_backend == "file"
        assert config.checkpoint_file == Path("fio_cz_last_payment.txt")
        assert config.database_url is None
        assert config.http_timeout == 30.0
        assert config.log_level == "INFO"

    def test_overrides(self, environ):
        environ.update({
            "PAYMENT_MATCH_ATTRIBUTE": "vs",
            "PAYMENT_PROVIDER_NAME": "Fio SK",
            "CHECKPOINT_FILE": "/var/lib/payment-import/last.txt",
            "HTTP_TIMEOUT": "5.5",
            "LOG_LEVEL": "debug",
            "BILLING_API_VERSION": "2.0",
        })

        config = SyncConfig.from_env(environ)

        assert config.match_by == "vs"
        assert config.provider_name == "Fio SK"
        assert config.checkpoint_file == Path("/var/lib/payment-import/last.txt")
        assert config.http_timeout == 5.5
        assert config.log_level == "DEBUG"
        assert config.billing_api_version == "2.0"

    def test_empty_values_use_defaults(self, environ):
        environ["PAYMENT_MATCH_ATTRIBUTE"] = ""

        assert SyncConfig.from_env(environ).match_by == "invoiceNumber"

    def test_providers_are_case_insensitive(self, environ):
        environ.update({"FEED_PROVIDER": "Simulator", "BILLING_PROVIDER": "SIMULATOR"})

        config = SyncConfig.from_env(environ)

        assert config.feed_provider == "simulator"
        assert config.billing_provider == "simulator"

    def test_reads_os_environ_by_default(self, environ, monkeypatch):
        for name, value in environ.items():
            monkeypatch.setenv(name, value)

        assert SyncConfig.from_env().fio_api_token == "fio-token"


class TestValidation:
    """Configuration errors name the offending environment variable."""

    def test_missing_start_date(self, environ):
        del environ["SYNC_START_DATE"]

        with pytest.raises(ConfigurationError, match="SYNC_START_DATE"):
            SyncConfig.from_env(environ)

    def test_invalid_start_date(self, environ):
        environ["SYNC_START_DATE"] = "last tuesday"

        with pytest.raises(ConfigurationError, match="SYNC_START_DATE"):
            SyncConfig.from_env(environ)

    def test_fio_requires_token(self, environ):
        del environ["FIO_API_TOKEN"]

        with pytest.raises(ConfigurationError, match="FIO_API_TOKEN"):
            SyncConfig.from_env(environ)

    def test_ucrm_requires_credentials(self, environ):
        del environ["BILLING_API_KEY"]

        with pytest.raises(ConfigurationError, match="BILLING_API_KEY"):
            SyncConfig.from_env(environ)

    def test_simulators_need_no_credentials(self):
        config = SyncConfig.from_env({
            "FEED_PROVIDER": "simulator",
            "BILLING_PROVIDER": "simulator",
            "SYNC_START_DATE": "2024-01-01",
        })

        assert config.fio_api_token is None

    def test_invalid_timeout(self, environ):
        environ["HTTP_TIMEOUT"] = "0"

        with pytest.raises(ConfigurationError, match="HTTP_TIMEOUT"):
            SyncConfig.from_env(environ)

    def test_invalid_log_level(self, environ):
        environ["LOG_LEVEL"] = "chatty"

        with pytest.raises(ConfigurationError, match="LOG_LEVEL"):
            SyncConfig.from_env(environ)

    def test_unknown_checkpoint_backend(self, environ):
        environ["CHECKPOINT_BACKEND"] = "redis"

        with pytest.raises(ConfigurationError, match="redis"):
            SyncConfig.from_env(environ)

    def test_database_backend_requires_url(self, environ):
        environ["CHECKPOINT_BACKEND"] = "database"

        with pytest.raises(ConfigurationError, match="DATABASE_URL"):
            SyncConfig.from_env(environ)

    def test_database_backend(self, environ):
        environ.update({"CHECKPOINT_BACKEND": "database", "DATABASE_URL": "sqlite:///sync.db"})

        config = SyncConfig.from_env(environ)

        assert config.checkpoint_backend == "database"
        assert config.checkpoint_name == "fio_cz"

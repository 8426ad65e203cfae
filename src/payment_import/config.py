"""Runtime configuration for the payment import job."""

import os
from datetime import date
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .exceptions import ConfigurationError

DEFAULT_FIO_API_URL = "https://www.fio.cz/ib_api/rest"

# Environment variable -> SyncConfig field
ENV_FIELDS = {
    "FEED_PROVIDER": "feed_provider",
    "FIO_API_TOKEN": "fio_api_token",
    "FIO_API_URL": "fio_api_url",
    "BILLING_PROVIDER": "billing_provider",
    "BILLING_API_URL": "billing_api_url",
    "BILLING_API_KEY": "billing_api_key",
    "BILLING_API_VERSION": "billing_api_version",
    "SYNC_START_DATE": "start_date",
    "PAYMENT_MATCH_ATTRIBUTE": "match_by",
    "PAYMENT_PROVIDER_NAME": "provider_name",
    "CHECKPOINT_BACKEND": "checkpoint_backend",
    "CHECKPOINT_FILE": "checkpoint_file",
    "CHECKPOINT_NAME": "checkpoint_name",
    "DATABASE_URL": "database_url",
    "HTTP_TIMEOUT": "http_timeout",
    "LOG_LEVEL": "log_level",
}


class SyncConfig(BaseModel):
    """Settings for one sync job, passed explicitly to every component."""
    feed_provider: str = Field(default="fio", description="Bank feed provider")
    fio_api_token: Optional[str] = Field(None, description="Fio API token")
    fio_api_url: str = Field(default=DEFAULT_FIO_API_URL)
    billing_provider: str = Field(default="ucrm", description="Billing system provider")
    billing_api_url: Optional[str] = Field(None, description="Billing system base URL")
    billing_api_key: Optional[str] = Field(None, description="Billing system app key")
    billing_api_version: str = Field(default="1.0")
    start_date: date = Field(..., description="Earliest date ever synchronized")
    match_by: str = Field(default="invoiceNumber", description="Client match attribute")
    provider_name: str = Field(default="Fio CZ", description="Provider name on payments")
    checkpoint_backend: str = Field(default="file")
    checkpoint_file: Path = Field(default=Path("fio_cz_last_payment.txt"))
    checkpoint_name: str = Field(default="fio_cz")
    database_url: Optional[str] = None
    http_timeout: float = Field(default=30.0, gt=0)
    log_level: str = Field(default="INFO")

    @field_validator("feed_provider", "billing_provider", "checkpoint_backend")
    @classmethod
    def _lowercase(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("match_by")
    @classmethod
    def _match_by_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("match_by must not be empty")
        return value

    @field_validator("log_level")
    @classmethod
    def _valid_log_level(cls, value: str) -> str:
        value = value.strip().upper()
        if value not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unsupported log level: {value}")
        return value

    @model_validator(mode="after")
    def _check_provider_settings(self) -> "SyncConfig":
        if self.feed_provider == "fio" and not self.fio_api_token:
            raise ValueError("FIO_API_TOKEN is required for the fio feed")
        if self.billing_provider == "ucrm":
            if not self.billing_api_url or not self.billing_api_key:
                raise ValueError(
                    "BILLING_API_URL and BILLING_API_KEY are required for the ucrm billing provider"
                )
        if self.checkpoint_backend not in ("file", "database"):
            raise ValueError(f"Unsupported checkpoint backend: {self.checkpoint_backend}")
        if self.checkpoint_backend == "database" and not self.database_url:
            raise ValueError("DATABASE_URL is required for the database checkpoint backend")
        return self

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SyncConfig":
        """Build configuration from environment variables.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.

        Returns:
            Validated SyncConfig.

        Raises:
            ConfigurationError: If a value is missing or invalid.
        """
        env = os.environ if environ is None else environ
        values = {}
        for env_name, field_name in ENV_FIELDS.items():
            value = env.get(env_name)
            if value is not None and value != "":
                values[field_name] = value
        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(_describe_validation_error(e)) from e


def _describe_validation_error(error: ValidationError) -> str:
    field_to_env = {v: k for k, v in ENV_FIELDS.items()}
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ()))
        name = field_to_env.get(location, location) or "configuration"
        problems.append(f"{name}: {item.get('msg')}")
    return "Invalid configuration: " + "; ".join(problems)

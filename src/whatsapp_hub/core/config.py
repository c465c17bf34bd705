"""Configuration loaders for the messaging services.

Leverages pydantic-settings to hydrate runtime configuration from environment
variables, an optional ``.env`` file, or default values. Nested settings classes
mirror infrastructure concerns (datastore, cache, WhatsApp bridge, webhooks).
"""

from __future__ import annotations

from functools import cached_property
from typing import Any

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseAppSettings(BaseSettings):
    """Base settings that looks at environment variables and an optional .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


class PostgresSettings(BaseAppSettings):
    """Postgres connection details."""

    model_config = SettingsConfigDict(
        env_prefix="postgres_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    host: str = "localhost"
    port: int = Field(default=5432, ge=1, le=65535)
    database: str = Field(
        default="whatsapp_hub",
        validation_alias=AliasChoices("database", "db"),
    )
    user: str = "whatsapp_hub"
    password: str = "changeme"
    sslmode: str = "prefer"
    url: str | None = None

    @cached_property
    def dsn(self) -> str:
        """Return a SQLAlchemy compatible DSN string; ``POSTGRES_URL`` wins when set."""

        if self.url:
            return self.url
        return (
            f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"
            f"?sslmode={self.sslmode}"
        )


class RedisSettings(BaseAppSettings):
    """Redis URL configuration for the session cache."""

    model_config = SettingsConfigDict(
        env_prefix="redis_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    url: str | None = "redis://localhost:6379/0"
    enabled: bool = True


class BaileysSettings(BaseAppSettings):
    """Location and polling behaviour of the Baileys Node bridge."""

    model_config = SettingsConfigDict(
        env_prefix="baileys_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    url: str = "http://localhost:3000"
    timeout_seconds: float = Field(default=30.0, ge=0.1)
    qr_poll_attempts: int = Field(default=3, ge=1)
    qr_poll_delay_seconds: float = Field(default=0.5, ge=0.0)


class WebhookSettings(BaseAppSettings):
    """Outbound webhook delivery and inbound verification settings."""

    model_config = SettingsConfigDict(
        env_prefix="webhook_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    timeout_seconds: float = Field(default=10.0, ge=0.1)
    max_retries: int = Field(default=3, ge=0)
    verify_token: str | None = None
    inbound_secret: str | None = None


class TelemetrySettings(BaseAppSettings):
    """Shared telemetry configuration."""

    model_config = SettingsConfigDict(
        env_prefix="otel_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    exporter_endpoint: str | None = None
    exporter_headers: str | None = None


class AppSettings(BaseAppSettings):
    """Top level settings object used by services."""

    service_name: str = "whatsapp-hub"
    app_version: str = "0.1.0"
    log_level: str = "INFO"

    postgres: PostgresSettings = Field(default_factory=PostgresSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    baileys: BaileysSettings = Field(default_factory=BaileysSettings)
    webhook: WebhookSettings = Field(default_factory=WebhookSettings)
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)

    @classmethod
    def load(cls, **kwargs: Any) -> AppSettings:
        """Helper factory that mirrors BaseSettings semantics."""

        return cls(**kwargs)

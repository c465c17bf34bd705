from __future__ import annotations

from pathlib import Path

import pytest

from whatsapp_hub.core.config import AppSettings, BaileysSettings, PostgresSettings

pytestmark = pytest.mark.unit


def test_postgres_settings_env_precedence(tmp_path: Path, monkeypatch) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        "\n".join(
            [
                "POSTGRES_HOST=from_env_file",
                "POSTGRES_DB=whatsapp",
                "POSTGRES_USER=file_user",
            ]
        ),
        encoding="utf-8",
    )

    monkeypatch.setenv("POSTGRES_HOST", "from_environment")
    settings = PostgresSettings(_env_file=env_file)

    assert settings.host == "from_environment"
    assert settings.database == "whatsapp"
    assert settings.user == "file_user"
    assert settings.dsn.startswith("postgresql://file_user:")
    assert "@from_environment:5432/whatsapp" in settings.dsn


def test_postgres_url_overrides_components(monkeypatch) -> None:
    monkeypatch.setenv("POSTGRES_URL", "sqlite://")

    assert PostgresSettings(_env_file=None).dsn == "sqlite://"


def test_baileys_defaults(monkeypatch) -> None:
    monkeypatch.delenv("BAILEYS_URL", raising=False)
    settings = BaileysSettings(_env_file=None)

    assert settings.url == "http://localhost:3000"
    assert settings.qr_poll_attempts == 3
    assert settings.qr_poll_delay_seconds == 0.5


def test_app_settings_composes_sub_settings(monkeypatch) -> None:
    monkeypatch.setenv("REDIS_URL", "redis://example:6379/1")
    monkeypatch.setenv("BAILEYS_URL", "http://bridge:3000")
    monkeypatch.setenv("WEBHOOK_MAX_RETRIES", "5")

    settings = AppSettings.load()

    assert settings.redis.url == "redis://example:6379/1"
    assert settings.baileys.url == "http://bridge:3000"
    assert settings.webhook.max_retries == 5
    assert settings.webhook.timeout_seconds == 10.0

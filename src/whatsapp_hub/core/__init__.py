"""Core utilities and domain building blocks for the WhatsApp hub."""

from . import config, domain, errors, logging
from .config import AppSettings, BaileysSettings, PostgresSettings, RedisSettings, WebhookSettings
from .domain import (
    IncomingMessage,
    MessageResult,
    MessageStatus,
    MessageType,
    ProviderType,
    SessionStatus,
    TenantConfig,
    normalize_phone,
)
from .logging import configure_logging, get_logger

__all__ = [
    "config",
    "domain",
    "errors",
    "logging",
    "configure_logging",
    "get_logger",
    "AppSettings",
    "BaileysSettings",
    "PostgresSettings",
    "RedisSettings",
    "WebhookSettings",
    "IncomingMessage",
    "MessageResult",
    "MessageStatus",
    "MessageType",
    "ProviderType",
    "SessionStatus",
    "TenantConfig",
    "normalize_phone",
]

"""Database models, engines and tenant-scoped repositories."""

from . import models, repositories, session
from .models import AIAgent, AIConversation, Message, Tenant, User, WhatsAppSession, metadata
from .repositories import MessageRepository, SessionRepository, to_session_record
from .session import create_engine_from_settings, init_db, session_scope

__all__ = [
    "models",
    "repositories",
    "session",
    "AIAgent",
    "AIConversation",
    "Message",
    "Tenant",
    "User",
    "WhatsAppSession",
    "metadata",
    "MessageRepository",
    "SessionRepository",
    "to_session_record",
    "create_engine_from_settings",
    "init_db",
    "session_scope",
]

"""SQLModel declarative models for tenants, sessions, messages and agents."""

from datetime import UTC, datetime
from typing import Any, List, Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, Boolean, Column, DateTime, String, UniqueConstraint, func
from sqlmodel import Field, Relationship, SQLModel

from whatsapp_hub.core.domain import MessageStatus, MessageType, ProviderType


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def created_at_field() -> Any:
    return Field(
        default_factory=_utcnow,
        sa_column=Column(
            DateTime(timezone=True),
            nullable=False,
            server_default=func.now(),
        ),
    )


def updated_at_field() -> Any:
    return Field(
        default_factory=_utcnow,
        sa_column=Column(
            DateTime(timezone=True),
            nullable=False,
            server_default=func.now(),
            onupdate=func.now(),
        ),
    )


def json_field(*, nullable: bool = False) -> Any:
    return Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=nullable),
    )


class UUIDPrimaryKey(SQLModel, table=False):
    """Mixin providing a UUID primary key."""

    id: UUID = Field(default_factory=uuid4, primary_key=True, nullable=False)


class Tenant(UUIDPrimaryKey, table=True):
    """Customer account; every other row is scoped to one."""

    __tablename__ = "tenants"

    created_at: datetime = created_at_field()
    updated_at: datetime = updated_at_field()

    client_id: str = Field(
        sa_column=Column(String(length=100), nullable=False, unique=True, index=True)
    )
    name: str = Field(sa_column=Column(String(length=200), nullable=False))
    settings: dict[str, Any] = json_field()

    users: List["User"] = Relationship(
        back_populates="tenant", sa_relationship_kwargs={"cascade": "all,delete"}
    )
    sessions: List["WhatsAppSession"] = Relationship(
        back_populates="tenant", sa_relationship_kwargs={"cascade": "all,delete"}
    )
    messages: List["Message"] = Relationship(
        back_populates="tenant", sa_relationship_kwargs={"cascade": "all,delete"}
    )
    agents: List["AIAgent"] = Relationship(
        back_populates="tenant", sa_relationship_kwargs={"cascade": "all,delete"}
    )
    conversations: List["AIConversation"] = Relationship(
        back_populates="tenant", sa_relationship_kwargs={"cascade": "all,delete"}
    )


class User(UUIDPrimaryKey, table=True):
    __tablename__ = "users"

    created_at: datetime = created_at_field()
    updated_at: datetime = updated_at_field()

    tenant_id: UUID = Field(foreign_key="tenants.id", nullable=False, index=True)
    email: str = Field(sa_column=Column(String(length=255), nullable=False, unique=True))
    password_hash: str = Field(sa_column=Column(String(length=255), nullable=False))
    full_name: str = Field(sa_column=Column(String(length=200), nullable=False))
    role: str = Field(sa_column=Column(String(length=32), nullable=False, default="User"))
    is_active: bool = Field(default=True, sa_column=Column(Boolean, nullable=False))
    last_login_at: datetime | None = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True),
    )

    tenant: Optional[Tenant] = Relationship(back_populates="users")


class WhatsAppSession(UUIDPrimaryKey, table=True):
    """One WhatsApp Web login for a tenant phone number."""

    __tablename__ = "whatsapp_sessions"

    created_at: datetime = created_at_field()
    updated_at: datetime = updated_at_field()

    tenant_id: UUID = Field(foreign_key="tenants.id", nullable=False, index=True)
    phone_number: str = Field(sa_column=Column(String(length=32), nullable=False))
    provider_type: ProviderType = Field(
        sa_column=Column(
            String(length=32), nullable=False, default=ProviderType.BAILEYS.value
        )
    )
    session_data: dict[str, Any] = json_field()
    is_active: bool = Field(default=False, sa_column=Column(Boolean, nullable=False))

    tenant: Optional[Tenant] = Relationship(back_populates="sessions")
    messages: List["Message"] = Relationship(
        back_populates="session", sa_relationship_kwargs={"cascade": "all,delete"}
    )
    conversations: List["AIConversation"] = Relationship(
        back_populates="session", sa_relationship_kwargs={"cascade": "all,delete"}
    )

    __table_args__ = (
        UniqueConstraint("tenant_id", "phone_number", name="uq_session_tenant_phone"),
    )


class Message(UUIDPrimaryKey, table=True):
    __tablename__ = "messages"

    created_at: datetime = created_at_field()
    updated_at: datetime = updated_at_field()

    tenant_id: UUID = Field(foreign_key="tenants.id", nullable=False, index=True)
    session_id: UUID = Field(foreign_key="whatsapp_sessions.id", nullable=False, index=True)
    message_id: str | None = Field(
        default=None,
        sa_column=Column(String(length=255), nullable=True, unique=True),
    )
    from_number: str = Field(sa_column=Column(String(length=32), nullable=False, index=True))
    to_number: str = Field(sa_column=Column(String(length=32), nullable=False, index=True))
    message_type: MessageType = Field(
        sa_column=Column(String(length=32), nullable=False, default=MessageType.TEXT.value)
    )
    content: dict[str, Any] = json_field()
    status: MessageStatus = Field(
        sa_column=Column(
            String(length=32), nullable=False, default=MessageStatus.PENDING.value
        )
    )
    ai_processed: bool = Field(default=False, sa_column=Column(Boolean, nullable=False))

    tenant: Optional[Tenant] = Relationship(back_populates="messages")
    session: Optional[WhatsAppSession] = Relationship(back_populates="messages")


class AIAgent(UUIDPrimaryKey, table=True):
    __tablename__ = "ai_agents"

    created_at: datetime = created_at_field()
    updated_at: datetime = updated_at_field()

    tenant_id: UUID = Field(foreign_key="tenants.id", nullable=False, index=True)
    name: str = Field(sa_column=Column(String(length=200), nullable=False))
    type: str = Field(sa_column=Column(String(length=64), nullable=False, default="general"))
    configuration: dict[str, Any] = json_field()
    is_active: bool = Field(default=True, sa_column=Column(Boolean, nullable=False))

    tenant: Optional[Tenant] = Relationship(back_populates="agents")
    conversations: List["AIConversation"] = Relationship(
        back_populates="agent", sa_relationship_kwargs={"cascade": "all,delete"}
    )

    __table_args__ = (
        UniqueConstraint("tenant_id", "name", name="uq_agent_tenant_name"),
    )


class AIConversation(UUIDPrimaryKey, table=True):
    """Rolling agent context for one session."""

    __tablename__ = "ai_conversations"

    created_at: datetime = created_at_field()
    updated_at: datetime = updated_at_field()

    tenant_id: UUID = Field(foreign_key="tenants.id", nullable=False, index=True)
    agent_id: UUID = Field(foreign_key="ai_agents.id", nullable=False, index=True)
    session_id: UUID = Field(foreign_key="whatsapp_sessions.id", nullable=False, index=True)
    context: dict[str, Any] = json_field()

    tenant: Optional[Tenant] = Relationship(back_populates="conversations")
    agent: Optional[AIAgent] = Relationship(back_populates="conversations")
    session: Optional[WhatsAppSession] = Relationship(back_populates="conversations")


metadata = SQLModel.metadata

__all__ = [
    "AIAgent",
    "AIConversation",
    "Message",
    "Tenant",
    "UUIDPrimaryKey",
    "User",
    "WhatsAppSession",
    "metadata",
]

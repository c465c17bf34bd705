"""Create tenant, session, message and agent tables."""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None

UUID = postgresql.UUID(as_uuid=True)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
            onupdate=sa.func.now(),
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "tenants",
        sa.Column("id", UUID, primary_key=True, nullable=False),
        *_timestamps(),
        sa.Column("client_id", sa.String(length=100), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("settings", sa.JSON(), nullable=False),
    )
    op.create_index("ix_tenants_client_id", "tenants", ["client_id"], unique=True)

    op.create_table(
        "users",
        sa.Column("id", UUID, primary_key=True, nullable=False),
        *_timestamps(),
        sa.Column("tenant_id", UUID, nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=200), nullable=False),
        sa.Column("role", sa.String(length=32), nullable=False, server_default="User"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenants.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_users_tenant_id", "users", ["tenant_id"])

    op.create_table(
        "whatsapp_sessions",
        sa.Column("id", UUID, primary_key=True, nullable=False),
        *_timestamps(),
        sa.Column("tenant_id", UUID, nullable=False),
        sa.Column("phone_number", sa.String(length=32), nullable=False),
        sa.Column(
            "provider_type", sa.String(length=32), nullable=False, server_default="baileys"
        ),
        sa.Column("session_data", sa.JSON(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenants.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("tenant_id", "phone_number", name="uq_session_tenant_phone"),
    )
    op.create_index("ix_whatsapp_sessions_tenant_id", "whatsapp_sessions", ["tenant_id"])

    op.create_table(
        "messages",
        sa.Column("id", UUID, primary_key=True, nullable=False),
        *_timestamps(),
        sa.Column("tenant_id", UUID, nullable=False),
        sa.Column("session_id", UUID, nullable=False),
        sa.Column("message_id", sa.String(length=255), nullable=True, unique=True),
        sa.Column("from_number", sa.String(length=32), nullable=False),
        sa.Column("to_number", sa.String(length=32), nullable=False),
        sa.Column("message_type", sa.String(length=32), nullable=False, server_default="text"),
        sa.Column("content", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="pending"),
        sa.Column("ai_processed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenants.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["session_id"], ["whatsapp_sessions.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_messages_tenant_id", "messages", ["tenant_id"])
    op.create_index("ix_messages_session_id", "messages", ["session_id"])
    op.create_index("ix_messages_from_number", "messages", ["from_number"])
    op.create_index("ix_messages_to_number", "messages", ["to_number"])

    op.create_table(
        "ai_agents",
        sa.Column("id", UUID, primary_key=True, nullable=False),
        *_timestamps(),
        sa.Column("tenant_id", UUID, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("type", sa.String(length=64), nullable=False, server_default="general"),
        sa.Column("configuration", sa.JSON(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenants.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("tenant_id", "name", name="uq_agent_tenant_name"),
    )
    op.create_index("ix_ai_agents_tenant_id", "ai_agents", ["tenant_id"])

    op.create_table(
        "ai_conversations",
        sa.Column("id", UUID, primary_key=True, nullable=False),
        *_timestamps(),
        sa.Column("tenant_id", UUID, nullable=False),
        sa.Column("agent_id", UUID, nullable=False),
        sa.Column("session_id", UUID, nullable=False),
        sa.Column("context", sa.JSON(), nullable=False),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenants.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["agent_id"], ["ai_agents.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["session_id"], ["whatsapp_sessions.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_ai_conversations_tenant_id", "ai_conversations", ["tenant_id"])
    op.create_index("ix_ai_conversations_agent_id", "ai_conversations", ["agent_id"])
    op.create_index("ix_ai_conversations_session_id", "ai_conversations", ["session_id"])


def downgrade() -> None:
    op.drop_table("ai_conversations")
    op.drop_table("ai_agents")
    op.drop_table("messages")
    op.drop_table("whatsapp_sessions")
    op.drop_table("users")
    op.drop_table("tenants")

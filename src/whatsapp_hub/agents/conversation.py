"""Per-session agent conversations and the incoming-message responder loop."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any
from uuid import UUID

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

from whatsapp_hub.core.db.models import AIConversation
from whatsapp_hub.core.domain import utcnow
from whatsapp_hub.core.errors import CoreError, NotFoundError

from .responder import ResponseGenerator
from .service import AIAgentService

logger = logging.getLogger(__name__)


def _fresh_context(marker: str) -> dict[str, Any]:
    return {"messages": [], marker: utcnow().isoformat()}


class AIConversationService:
    def __init__(
        self,
        session: Session,
        *,
        agents: AIAgentService | None = None,
        responder: ResponseGenerator | None = None,
    ) -> None:
        self._session = session
        self._agents = agents or AIAgentService(session)
        self._responder = responder or ResponseGenerator()

    def get_or_create(self, tenant_id: UUID, agent_id: UUID, session_id: UUID) -> AIConversation:
        statement = select(AIConversation).where(
            AIConversation.tenant_id == tenant_id,
            AIConversation.session_id == session_id,
        )
        existing = self._session.exec(statement).first()
        if existing is not None:
            return existing

        if self._agents.get(tenant_id, agent_id) is None:
            raise NotFoundError(f"Agent {agent_id} not found for tenant {tenant_id}")

        conversation = AIConversation(
            tenant_id=tenant_id,
            agent_id=agent_id,
            session_id=session_id,
            context=_fresh_context("created_at"),
        )
        self._session.add(conversation)
        self._session.flush()
        logger.info("created agent conversation", extra={"conversation_id": str(conversation.id)})
        return conversation

    def _require(self, conversation_id: UUID) -> AIConversation:
        conversation = self._session.get(AIConversation, conversation_id)
        if conversation is None:
            raise NotFoundError(f"Conversation {conversation_id} not found")
        return conversation

    def update_context(self, conversation_id: UUID, context: dict[str, Any]) -> None:
        conversation = self._require(conversation_id)
        conversation.context = dict(context)
        conversation.updated_at = utcnow()
        self._session.add(conversation)
        self._session.flush()

    def get_context(self, conversation_id: UUID) -> dict[str, Any] | None:
        conversation = self._session.get(AIConversation, conversation_id)
        if conversation is None or conversation.context is None:
            return None
        return dict(conversation.context)

    def clear_context(self, conversation_id: UUID) -> None:
        conversation = self._session.get(AIConversation, conversation_id)
        if conversation is None:
            return
        conversation.context = _fresh_context("cleared_at")
        conversation.updated_at = utcnow()
        self._session.add(conversation)
        self._session.flush()

    def cleanup_old(self, days_to_keep: int = 30) -> int:
        """Delete conversations idle for longer than ``days_to_keep`` days."""

        cutoff = utcnow() - timedelta(days=days_to_keep)
        result = self._session.execute(
            delete(AIConversation).where(col(AIConversation.updated_at) < cutoff)
        )
        deleted = result.rowcount or 0
        logger.info("deleted old agent conversations", extra={"count": deleted})
        return deleted

    def process_incoming_message(
        self,
        tenant_id: UUID,
        agent_id: UUID,
        session_id: UUID,
        from_number: str,
        text: str,
    ) -> str | None:
        """Append the user turn and a generated reply to the context; returns the reply."""

        try:
            conversation = self.get_or_create(tenant_id, agent_id, session_id)
            agent = self._agents.get(tenant_id, agent_id)
            if agent is None or not agent.is_active:
                logger.warning("agent missing or inactive", extra={"agent_id": str(agent_id)})
                return None

            context = dict(conversation.context or {})
            messages = list(context.get("messages") or [])
            messages.append(
                {
                    "role": "user",
                    "content": text,
                    "from": from_number,
                    "timestamp": utcnow().isoformat(),
                }
            )
            reply = self._responder.generate_reply(agent, messages)
            messages.append(
                {"role": "assistant", "content": reply, "timestamp": utcnow().isoformat()}
            )
            context["messages"] = messages
            context["last_interaction"] = utcnow().isoformat()
            self.update_context(conversation.id, context)
            return reply
        except (CoreError, SQLAlchemyError):
            logger.exception(
                "failed to process incoming message with agent",
                extra={"agent_id": str(agent_id), "session_id": str(session_id)},
            )
            return None

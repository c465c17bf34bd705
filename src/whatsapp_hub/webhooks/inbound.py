"""Background handling of inbound messages routed to a tenant's AI agent."""

from __future__ import annotations

import asyncio
from uuid import UUID

from sqlalchemy.engine import Engine

from whatsapp_hub.agents import AIConversationService
from whatsapp_hub.core.db.models import Message
from whatsapp_hub.core.db.session import session_scope
from whatsapp_hub.core.logging import get_logger
from whatsapp_hub.messaging import MessageService
from whatsapp_hub.providers import ProviderFactory
from whatsapp_hub.sessions import SessionCacheService, SessionService

logger = get_logger(__name__)


def _generate_reply(
    engine: Engine,
    *,
    tenant_id: UUID,
    agent_id: UUID,
    session_id: UUID,
    message_row_id: UUID,
    from_number: str,
    text: str,
) -> str | None:
    with session_scope(engine) as db:
        reply = AIConversationService(db).process_incoming_message(
            tenant_id, agent_id, session_id, from_number, text
        )
        if reply is None:
            return None

        message = db.get(Message, message_row_id)
        if message is not None:
            message.ai_processed = True
            db.add(message)
        return reply


async def respond_with_agent(
    engine: Engine,
    factory: ProviderFactory,
    cache: SessionCacheService,
    *,
    tenant_id: UUID,
    agent_id: UUID,
    session_id: UUID,
    message_row_id: UUID,
    from_number: str,
    text: str,
) -> str | None:
    """Run the agent on an inbound text and send its reply back to the sender.

    Runs outside the request, so it opens its own database sessions; the
    synchronous parts run in a worker thread. Returns the reply that was sent,
    or ``None`` when the agent produced nothing.
    """

    reply = await asyncio.to_thread(
        _generate_reply,
        engine,
        tenant_id=tenant_id,
        agent_id=agent_id,
        session_id=session_id,
        message_row_id=message_row_id,
        from_number=from_number,
        text=text,
    )
    if reply is None:
        return None

    with session_scope(engine) as db:
        sessions = SessionService(db, factory, cache)
        result = await MessageService(db, sessions).send_text(tenant_id, from_number, reply)
        await asyncio.to_thread(db.commit)

    if result.succeeded:
        logger.info(
            "agent.reply_sent",
            tenant_id=str(tenant_id),
            agent_id=str(agent_id),
            message_id=result.message_id,
        )
    else:
        logger.warning(
            "agent.reply_failed",
            tenant_id=str(tenant_id),
            agent_id=str(agent_id),
            error=result.error,
        )
    return reply

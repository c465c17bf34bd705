"""Canned agent replies standing in for a real language model."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from whatsapp_hub.core.db.models import AIAgent

CANNED_REPLIES: dict[str, str] = {
    "atendimento": "Olá! Sou o assistente de atendimento. Como posso ajudá-lo hoje?",
    "vendas": (
        "Olá! Estou aqui para ajudar você a encontrar o produto perfeito. "
        "O que você está procurando?"
    ),
    "suporte": (
        "Olá! Sou o suporte técnico. Por favor, descreva o problema que você está enfrentando."
    ),
}


class ResponseGenerator:
    """Deterministic replies keyed by agent type.

    A provider-backed implementation would send ``history`` and the agent's
    ``configuration`` (model, system prompt) to an LLM; this one only looks at
    the agent type so behaviour can be asserted in tests.
    """

    def generate_reply(self, agent: AIAgent, history: Sequence[Mapping[str, Any]]) -> str:
        agent_type = (agent.type or "general").lower()
        reply = CANNED_REPLIES.get(agent_type)
        if reply is not None:
            return reply
        return f"Olá! Recebi sua mensagem. Agente '{agent.name}' configurado e pronto para atender."

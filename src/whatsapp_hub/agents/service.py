"""Tenant-scoped CRUD for AI agents."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from uuid import UUID

from sqlmodel import Session, col, select

from whatsapp_hub.core.db.models import AIAgent, Tenant
from whatsapp_hub.core.errors import ConflictError, NotFoundError
from whatsapp_hub.core.logging import get_logger

from .templates import AgentTemplateService

logger = get_logger(__name__)


class AIAgentService:
    def __init__(self, session: Session, templates: AgentTemplateService | None = None) -> None:
        self._session = session
        self._templates = templates or AgentTemplateService()

    def _name_taken(self, tenant_id: UUID, name: str, *, exclude: UUID | None = None) -> bool:
        statement = select(AIAgent).where(AIAgent.tenant_id == tenant_id, AIAgent.name == name)
        if exclude is not None:
            statement = statement.where(AIAgent.id != exclude)
        return self._session.exec(statement).first() is not None

    def create(
        self,
        tenant_id: UUID,
        *,
        name: str,
        agent_type: str | None = None,
        configuration: Mapping[str, Any] | None = None,
        is_active: bool = True,
    ) -> AIAgent:
        if self._session.get(Tenant, tenant_id) is None:
            raise NotFoundError(f"Tenant {tenant_id} not found")
        if self._name_taken(tenant_id, name):
            raise ConflictError(f"Agent with name '{name}' already exists for this tenant")

        agent = AIAgent(
            tenant_id=tenant_id,
            name=name,
            type=agent_type or "general",
            configuration=dict(configuration or {}),
            is_active=is_active,
        )
        self._session.add(agent)
        self._session.flush()
        logger.info("agent.created", tenant_id=str(tenant_id), agent_id=str(agent.id))
        return agent

    def create_from_template(
        self, tenant_id: UUID, template_id: str, *, name: str | None = None
    ) -> AIAgent:
        template = self._templates.get_by_id(template_id)
        if template is None:
            raise NotFoundError(f"Template {template_id} not found")
        return self.create(
            tenant_id,
            name=name or template.name,
            agent_type=template.type,
            configuration=template.configuration,
        )

    def get(self, tenant_id: UUID, agent_id: UUID) -> AIAgent | None:
        agent = self._session.get(AIAgent, agent_id)
        if agent is None or agent.tenant_id != tenant_id:
            return None
        return agent

    def require(self, tenant_id: UUID, agent_id: UUID) -> AIAgent:
        agent = self.get(tenant_id, agent_id)
        if agent is None:
            raise NotFoundError(f"Agent {agent_id} not found")
        return agent

    def list_all(self, tenant_id: UUID) -> list[AIAgent]:
        statement = (
            select(AIAgent)
            .where(AIAgent.tenant_id == tenant_id)
            .order_by(col(AIAgent.created_at))
        )
        return list(self._session.exec(statement))

    def list_active(self, tenant_id: UUID) -> list[AIAgent]:
        return [agent for agent in self.list_all(tenant_id) if agent.is_active]

    def update(
        self,
        tenant_id: UUID,
        agent_id: UUID,
        *,
        name: str | None = None,
        agent_type: str | None = None,
        configuration: Mapping[str, Any] | None = None,
        is_active: bool | None = None,
    ) -> AIAgent:
        agent = self.require(tenant_id, agent_id)
        if name and name != agent.name:
            if self._name_taken(tenant_id, name, exclude=agent.id):
                raise ConflictError(f"Agent with name '{name}' already exists for this tenant")
            agent.name = name
        if agent_type:
            agent.type = agent_type
        if configuration is not None:
            agent.configuration = dict(configuration)
        if is_active is not None:
            agent.is_active = is_active
        self._session.add(agent)
        self._session.flush()
        return agent

    def delete(self, tenant_id: UUID, agent_id: UUID) -> None:
        agent = self.require(tenant_id, agent_id)
        self._session.delete(agent)
        self._session.flush()
        logger.info("agent.deleted", tenant_id=str(tenant_id), agent_id=str(agent_id))

    def toggle(self, tenant_id: UUID, agent_id: UUID) -> AIAgent:
        agent = self.require(tenant_id, agent_id)
        agent.is_active = not agent.is_active
        self._session.add(agent)
        self._session.flush()
        return agent

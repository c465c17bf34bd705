"""AI agent CRUD and template routes."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, status

from whatsapp_hub.core.errors import NotFoundError

from .. import schemas
from ..dependencies import AgentServiceDep, TemplateServiceDep
from ..tenancy import CurrentTenant

router = APIRouter(prefix="/api/v1/aiagent", tags=["agents"])


@router.get("", response_model=list[schemas.AgentResponse])
def list_agents(tenant: CurrentTenant, agents: AgentServiceDep) -> list[schemas.AgentResponse]:
    return [schemas.AgentResponse.model_validate(agent) for agent in agents.list_all(tenant.id)]


@router.get("/active", response_model=list[schemas.AgentResponse])
def list_active_agents(
    tenant: CurrentTenant, agents: AgentServiceDep
) -> list[schemas.AgentResponse]:
    return [schemas.AgentResponse.model_validate(agent) for agent in agents.list_active(tenant.id)]


# Registered before "/{agent_id}" so "templates" is not parsed as an id.
@router.get("/templates", response_model=list[schemas.AgentTemplateResponse])
def list_templates(
    _: CurrentTenant, templates: TemplateServiceDep
) -> list[schemas.AgentTemplateResponse]:
    return [
        schemas.AgentTemplateResponse.model_validate(template.to_dict())
        for template in templates.get_all()
    ]


@router.post(
    "/templates/{template_id}/create",
    response_model=schemas.AgentResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_from_template(
    template_id: str,
    tenant: CurrentTenant,
    agents: AgentServiceDep,
    payload: schemas.AgentFromTemplateRequest | None = None,
) -> schemas.AgentResponse:
    name = payload.name if payload is not None else None
    agent = agents.create_from_template(tenant.id, template_id, name=name)
    return schemas.AgentResponse.model_validate(agent)


@router.get("/{agent_id}", response_model=schemas.AgentResponse)
def get_agent(agent_id: UUID, tenant: CurrentTenant, agents: AgentServiceDep) -> schemas.AgentResponse:
    agent = agents.get(tenant.id, agent_id)
    if agent is None:
        raise NotFoundError("Agent not found")
    return schemas.AgentResponse.model_validate(agent)


@router.post("", response_model=schemas.AgentResponse, status_code=status.HTTP_201_CREATED)
def create_agent(
    payload: schemas.AgentCreateRequest,
    tenant: CurrentTenant,
    agents: AgentServiceDep,
) -> schemas.AgentResponse:
    agent = agents.create(
        tenant.id,
        name=payload.name,
        agent_type=payload.type,
        configuration=payload.configuration,
        is_active=payload.is_active,
    )
    return schemas.AgentResponse.model_validate(agent)


@router.put("/{agent_id}", response_model=schemas.AgentResponse)
def update_agent(
    agent_id: UUID,
    payload: schemas.AgentUpdateRequest,
    tenant: CurrentTenant,
    agents: AgentServiceDep,
) -> schemas.AgentResponse:
    agent = agents.update(
        tenant.id,
        agent_id,
        name=payload.name,
        agent_type=payload.type,
        configuration=payload.configuration,
        is_active=payload.is_active,
    )
    return schemas.AgentResponse.model_validate(agent)


@router.delete("/{agent_id}", response_model=schemas.InfoResponse)
def delete_agent(agent_id: UUID, tenant: CurrentTenant, agents: AgentServiceDep) -> schemas.InfoResponse:
    agents.delete(tenant.id, agent_id)
    return schemas.InfoResponse(message="Agent deleted successfully")


@router.post("/{agent_id}/toggle", response_model=schemas.InfoResponse)
def toggle_agent(agent_id: UUID, tenant: CurrentTenant, agents: AgentServiceDep) -> schemas.InfoResponse:
    agents.toggle(tenant.id, agent_id)
    return schemas.InfoResponse(message="Agent toggled successfully")

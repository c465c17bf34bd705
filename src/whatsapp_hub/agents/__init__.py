"""AI agents: CRUD, templates, and the canned responder."""

from .conversation import AIConversationService
from .responder import ResponseGenerator
from .service import AIAgentService
from .templates import TEMPLATES, AgentTemplate, AgentTemplateService

__all__ = [
    "AIAgentService",
    "AIConversationService",
    "AgentTemplate",
    "AgentTemplateService",
    "ResponseGenerator",
    "TEMPLATES",
]

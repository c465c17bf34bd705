"""Static catalog of pre-configured agent templates."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class AgentTemplate:
    id: str
    name: str
    type: str
    description: str
    icon: str
    configuration: Mapping[str, Any]
    use_cases: Sequence[str] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "description": self.description,
            "icon": self.icon,
            "configuration": dict(self.configuration),
            "use_cases": list(self.use_cases),
        }


def _config(
    greeting: str,
    system_prompt: str,
    *,
    model: str = "gpt-3.5-turbo",
    temperature: float = 0.7,
    max_tokens: int = 150,
    **extra: Any,
) -> dict[str, Any]:
    return {
        "greeting": greeting,
        "model": model,
        "temperature": temperature,
        "max_tokens": max_tokens,
        "system_prompt": system_prompt,
        **extra,
    }


TEMPLATES: tuple[AgentTemplate, ...] = (
    AgentTemplate(
        id="atendimento_geral",
        name="Atendimento Geral",
        type="atendimento",
        description="Agente para atendimento ao cliente com perguntas frequentes",
        icon="🤝",
        configuration=_config(
            "Olá! Sou o assistente de atendimento. Como posso ajudá-lo hoje?",
            "Você é um assistente de atendimento ao cliente. Seja educado, prestativo e "
            "direto nas respostas.",
        ),
        use_cases=(
            "Responder perguntas frequentes",
            "Direcionar clientes para departamentos",
            "Fornecer informações sobre produtos/serviços",
        ),
    ),
    AgentTemplate(
        id="vendas",
        name="Assistente de Vendas",
        type="vendas",
        description="Agente especializado em vendas e apresentação de produtos",
        icon="💰",
        configuration=_config(
            "Olá! Estou aqui para ajudá-lo a encontrar o produto perfeito. "
            "O que você está procurando?",
            "Você é um vendedor experiente. Foque em entender as necessidades do cliente e "
            "apresentar soluções que se adequem. Seja persuasivo mas não invasivo.",
            temperature=0.8,
            max_tokens=200,
        ),
        use_cases=(
            "Apresentar produtos e serviços",
            "Identificar necessidades do cliente",
            "Fechar vendas e negociações",
            "Fornecer informações sobre preços e condições",
        ),
    ),
    AgentTemplate(
        id="suporte_tecnico",
        name="Suporte Técnico",
        type="suporte",
        description="Agente para resolução de problemas técnicos",
        icon="🔧",
        configuration=_config(
            "Olá! Sou o suporte técnico. Por favor, descreva o problema que você está "
            "enfrentando.",
            "Você é um especialista em suporte técnico. Faça perguntas específicas para "
            "diagnosticar problemas. Forneça soluções passo a passo de forma clara.",
            model="gpt-4",
            temperature=0.5,
            max_tokens=300,
        ),
        use_cases=(
            "Diagnosticar problemas técnicos",
            "Fornecer soluções passo a passo",
            "Escalar tickets complexos",
            "Documentar incidentes",
        ),
    ),
    AgentTemplate(
        id="agendamento",
        name="Agendamento de Consultas",
        type="agendamento",
        description="Agente para marcar e gerenciar agendamentos",
        icon="📅",
        configuration=_config(
            "Olá! Posso ajudá-lo a agendar uma consulta. Qual data e horário você prefere?",
            "Você é um assistente de agendamento. Colete informações necessárias: data, "
            "horário, tipo de serviço e dados de contato. Confirme sempre os detalhes antes "
            "de finalizar.",
            temperature=0.6,
        ),
        use_cases=(
            "Agendar consultas e compromissos",
            "Verificar disponibilidade",
            "Reagendar ou cancelar",
            "Enviar lembretes",
        ),
    ),
    AgentTemplate(
        id="cobranca",
        name="Assistente Financeiro",
        type="cobranca",
        description="Agente para cobranças e questões financeiras",
        icon="💳",
        configuration=_config(
            "Olá! Posso ajudá-lo com questões sobre pagamentos e faturas. "
            "Em que posso auxiliar?",
            "Você é um assistente financeiro. Seja profissional ao tratar de cobranças. "
            "Forneça informações sobre pagamentos, faturas e opções de parcelamento.",
            temperature=0.5,
        ),
        use_cases=(
            "Enviar lembretes de pagamento",
            "Informar sobre faturas vencidas",
            "Negociar condições de pagamento",
            "Fornecer segunda via de boletos",
        ),
    ),
    AgentTemplate(
        id="feedback",
        name="Coletor de Feedback",
        type="feedback",
        description="Agente para coletar avaliações e feedbacks",
        icon="⭐",
        configuration=_config(
            "Olá! Gostaríamos de saber sua opinião sobre nosso atendimento. "
            "Como foi sua experiência?",
            "Você é um coletor de feedback. Faça perguntas sobre a experiência do cliente, "
            "seja empático com críticas e agradeça por elogios. Colete informações específicas.",
            max_tokens=100,
        ),
        use_cases=(
            "Coletar avaliações pós-atendimento",
            "Medir satisfação do cliente",
            "Identificar pontos de melhoria",
            "Registrar reclamações e elogios",
        ),
    ),
    AgentTemplate(
        id="faq",
        name="Perguntas Frequentes",
        type="faq",
        description="Agente com respostas pré-definidas para perguntas comuns",
        icon="❓",
        configuration=_config(
            "Olá! Tenho respostas para as perguntas mais comuns. O que você gostaria de saber?",
            "Você tem acesso a uma base de conhecimento de perguntas frequentes. Forneça "
            "respostas precisas e consistentes. Se não souber a resposta, direcione para "
            "atendimento humano.",
            temperature=0.3,
            max_tokens=120,
        ),
        use_cases=(
            "Responder perguntas frequentes",
            "Fornecer informações sobre horários e localização",
            "Explicar políticas e procedimentos",
            "Direcionar para recursos específicos",
        ),
    ),
    AgentTemplate(
        id="multilingual",
        name="Atendimento Multilíngue",
        type="atendimento",
        description="Agente que atende em múltiplos idiomas",
        icon="🌍",
        configuration=_config(
            "Hello! Olá! Hola! How can I help you? / Como posso ajudá-lo?",
            "Você é um assistente multilíngue. Detecte o idioma do cliente e responda no "
            "mesmo idioma. Seja natural e culturalmente apropriado.",
            model="gpt-4",
            supported_languages=["pt", "en", "es", "fr"],
        ),
        use_cases=(
            "Atender clientes internacionais",
            "Traduzir informações automaticamente",
            "Adaptar respostas culturalmente",
            "Expandir mercado global",
        ),
    ),
)


class AgentTemplateService:
    def __init__(self, templates: Sequence[AgentTemplate] = TEMPLATES) -> None:
        self._templates = tuple(templates)

    def get_all(self) -> list[AgentTemplate]:
        return list(self._templates)

    def get_by_id(self, template_id: str) -> AgentTemplate | None:
        return next((t for t in self._templates if t.id == template_id), None)

    def get_by_type(self, agent_type: str) -> list[AgentTemplate]:
        wanted = agent_type.casefold()
        return [t for t in self._templates if t.type.casefold() == wanted]

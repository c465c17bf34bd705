"""Outbound tenant webhooks and signature helpers."""

from .delivery import WebhookDeliveryResult, WebhookDeliveryService
from .forwarding import (
    WebhookTarget,
    agent_id_from_settings,
    forward_incoming_message,
    forward_message_status,
    forward_session_event,
)
from .signing import (
    EVENT_HEADER,
    SIGNATURE_HEADER,
    SignatureVerificationError,
    sign_payload,
    validate_signature,
)

__all__ = [
    "EVENT_HEADER",
    "SIGNATURE_HEADER",
    "SignatureVerificationError",
    "WebhookDeliveryResult",
    "WebhookDeliveryService",
    "WebhookTarget",
    "agent_id_from_settings",
    "forward_incoming_message",
    "forward_message_status",
    "forward_session_event",
    "sign_payload",
    "validate_signature",
]

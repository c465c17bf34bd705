"""WhatsApp provider implementations and selection."""

from .baileys import BaileysProvider, session_id_for
from .base import WhatsAppProvider
from .bridge import BaileysBridgeClient, BridgeError
from .factory import ProviderFactory
from .meta_api import MetaApiProvider

__all__ = [
    "BaileysBridgeClient",
    "BaileysProvider",
    "BridgeError",
    "MetaApiProvider",
    "ProviderFactory",
    "WhatsAppProvider",
    "session_id_for",
]

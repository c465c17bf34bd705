from .service import NO_SESSION_ERROR, MessageService

__all__ = ["MessageService", "NO_SESSION_ERROR"]

"""Session lifecycle and caching."""

from .cache import SessionCacheService, create_session_cache
from .service import SessionService, tenant_config

__all__ = ["SessionCacheService", "SessionService", "create_session_cache", "tenant_config"]

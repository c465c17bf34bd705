from .service import TenantService

__all__ = ["TenantService"]

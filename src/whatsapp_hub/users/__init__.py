from .service import ROLES, UserService, hash_password, verify_password

__all__ = ["ROLES", "UserService", "hash_password", "verify_password"]

"""Bearer-token authentication for admin routes."""

from .dependencies import get_jwt_handler, require_admin, verify_current_user
from .jwt_handler import JWTHandler
from .schemas import User, UserResponse

__all__ = [
    "JWTHandler",
    "User",
    "UserResponse",
    "get_jwt_handler",
    "require_admin",
    "verify_current_user",
]

"""
Authentication Module

Phone-number identity for WeShare:

- Signup and login by Rwandan phone number (login creates the account on
  first use); numbers are stored in E.164 form
- Bearer tokens (HS256 JWT) resolved to a user on every request
- Role checks for admin and super-admin endpoints
- Profile with verification status and profile picture upload
"""

from .router import router, profile_router
from .dependencies import get_current_user, require_admin, require_super_admin
from .service import UserService
from .schemas import UserRole, User, AuthResponse

__all__ = [
    "router",
    "profile_router",
    "get_current_user",
    "require_admin",
    "require_super_admin",
    "UserService",
    "UserRole",
    "User",
    "AuthResponse",
]

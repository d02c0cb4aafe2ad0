"""
Admin Module

Super-admin tools for managing who can review driver verifications.
Verification review endpoints themselves live in weshare.verification.
"""

from .router import router
from .service import AdminManagementService
from .schemas import AdminUser, AdminUserCreate

__all__ = [
    "router",
    "AdminManagementService",
    "AdminUser",
    "AdminUserCreate",
]

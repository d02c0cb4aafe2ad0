from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from typing import Optional
from weshare.config import settings
from weshare.database import get_db
from weshare.auth.utils import verify_token
from weshare.auth.service import UserService
from weshare.auth.schemas import ADMIN_ROLES, UserRole
from weshare.exceptions import Forbidden, Unauthorized
from weshare.models import User

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login", auto_error=False)

def get_current_user(token: Optional[str] = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
    """Resolve the bearer token to a user row"""
    if not token:
        raise Unauthorized("Not authenticated")

    token_data = verify_token(token)

    user = UserService.get_user_by_id(db, user_id=token_data["user_id"])
    if user is None:
        raise Unauthorized("User not found. Please log out and sign in again.")

    return user

def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """Require ADMIN or SUPER_ADMIN role"""
    if current_user.role not in ADMIN_ROLES:
        raise Forbidden("Admin access required")
    return current_user

def require_super_admin(current_user: User = Depends(get_current_user)) -> User:
    """Require SUPER_ADMIN role"""
    if current_user.role != UserRole.SUPER_ADMIN.value:
        raise Forbidden("Forbidden. Super admin only.")
    return current_user

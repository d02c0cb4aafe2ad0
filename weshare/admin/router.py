from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from weshare.database import get_db
from weshare.auth.dependencies import require_super_admin
from weshare.models import User
from weshare.admin.schemas import AdminUser, AdminUserCreate, AdminUserCreated
from weshare.admin.service import AdminManagementService

router = APIRouter()

@router.get("/users", response_model=List[AdminUser])
def list_admins(
    super_admin: User = Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    """List ADMIN and SUPER_ADMIN accounts"""
    return AdminManagementService(db).list_admins()

@router.post("/users", response_model=AdminUserCreated)
def create_admin(
    request: AdminUserCreate,
    super_admin: User = Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    """Create an admin by phone number, promoting the account if it exists"""
    user, promoted = AdminManagementService(db).create_admin(request, super_admin)
    if promoted:
        message = "Existing user promoted to admin. They can now log in with this phone."
    else:
        message = "Admin created. They can log in with this phone number, no signup required."
    return {"user": user, "message": message}

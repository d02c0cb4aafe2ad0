import logging
from typing import List, Tuple

from sqlalchemy.orm import Session

from weshare.auth.schemas import ADMIN_ROLES, UserRole
from weshare.auth.service import UserService
from weshare.exceptions import Conflict, NotFound
from weshare.models import User
from weshare.admin.schemas import AdminUserCreate

logger = logging.getLogger(__name__)

class AdminManagementService:
    """Super-admin management of admin accounts"""

    def __init__(self, db: Session):
        self.db = db

    def list_admins(self) -> List[User]:
        return (
            self.db.query(User)
            .filter(User.role.in_(ADMIN_ROLES))
            .order_by(User.created_at.desc(), User.id.desc())
            .all()
        )

    def create_admin(self, request: AdminUserCreate, created_by: User) -> Tuple[User, bool]:
        """Create an admin by phone, or promote the existing account.

        Returns the user and whether an existing account was promoted. The new
        admin logs in with the phone number directly, no signup needed.
        """
        phone = UserService.normalize_and_validate_phone(request.phone)
        existing = UserService.get_user_by_phone(self.db, phone)

        if existing:
            if existing.role in ADMIN_ROLES:
                raise Conflict("This phone is already an admin.")
            existing.role = UserRole.ADMIN.value
            self.db.commit()
            self.db.refresh(existing)
            logger.info("Super admin %s promoted user %s to ADMIN", created_by.id, existing.id)
            return existing, True

        admin = UserService.create_user(self.db, phone, request.name, role=UserRole.ADMIN)
        logger.info("Super admin %s created admin %s", created_by.id, admin.id)
        return admin, False

    def promote_super_admin(self, phone: str) -> Tuple[User, bool]:
        """Make the account with this phone a SUPER_ADMIN; returns (user, changed)"""
        user = UserService.get_user_by_phone(self.db, phone)
        if not user:
            raise NotFound(f"No user found with phone: {phone}")
        if user.role == UserRole.SUPER_ADMIN.value:
            return user, False
        user.role = UserRole.SUPER_ADMIN.value
        self.db.commit()
        self.db.refresh(user)
        logger.info("Promoted user %s to SUPER_ADMIN", user.id)
        return user, True

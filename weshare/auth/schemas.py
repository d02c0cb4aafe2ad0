from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum

class UserRole(str, Enum):
    """User role enumeration"""
    PASSENGER = "PASSENGER"
    DRIVER = "DRIVER"
    AGENCY = "AGENCY"
    ADMIN = "ADMIN"
    SUPER_ADMIN = "SUPER_ADMIN"

ADMIN_ROLES = {UserRole.ADMIN.value, UserRole.SUPER_ADMIN.value}

class PhoneLoginRequest(BaseModel):
    phone: str = Field(..., min_length=1)
    name: str = Field(..., min_length=2, max_length=255)

class SignupRequest(PhoneLoginRequest):
    """New accounts are always passengers; other roles come from verification or admins"""

class UserSummary(BaseModel):
    """Public view of a user embedded in other resources"""
    id: int
    name: str
    phone: str

    class Config:
        from_attributes = True

class User(BaseModel):
    id: int
    phone: str
    name: str
    role: UserRole
    phone_verified: bool = False
    driver_verified: bool = False
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class Profile(User):
    profile_image_url: Optional[str] = None
    is_verified: bool = False

class AuthResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: User
    message: Optional[str] = None

class ProfileImageResponse(BaseModel):
    success: bool = True
    profile_image_url: str

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from weshare.auth.schemas import UserRole

class AdminUserCreate(BaseModel):
    phone: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=100)

class AdminUser(BaseModel):
    id: int
    phone: str
    name: str
    role: UserRole
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class AdminUserCreated(BaseModel):
    user: AdminUser
    message: str

from pydantic import BaseModel, Field
from typing import Dict, Optional
from datetime import datetime

from weshare.auth.schemas import UserSummary

class MessageCreate(BaseModel):
    content: str = Field(..., max_length=2000)

class Message(BaseModel):
    id: int
    booking_id: int
    sender_id: int
    receiver_id: int
    content: str
    read: bool = False
    sender: Optional[UserSummary] = None
    receiver: Optional[UserSummary] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class MarkReadResponse(BaseModel):
    success: bool = True
    updated: int

class UnreadCounts(BaseModel):
    """Unread messages per booking id, only bookings with unread messages"""
    counts: Dict[int, int] = {}
    total: int = 0

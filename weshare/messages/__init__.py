"""
Booking Messages Module

Chat between a passenger and the driver once a booking is confirmed.

Key Components:
- service.py: MessageService (list, send, mark read, unread counts)
- router.py: endpoints under /messages
- schemas.py: message payloads and views
"""

from .router import router
from .service import MessageService
from .schemas import Message, MessageCreate, UnreadCounts

__all__ = [
    "router",
    "MessageService",
    "Message",
    "MessageCreate",
    "UnreadCounts",
]

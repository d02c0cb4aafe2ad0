"""
Notifications Module

E-mail notifications for bookings, payments and upcoming trips. Delivery is
mocked in email.py until a provider is chosen.
"""

from .router import router
from .service import NotificationService
from .schemas import NotificationRequest, NotificationType

__all__ = [
    "router",
    "NotificationService",
    "NotificationRequest",
    "NotificationType",
]

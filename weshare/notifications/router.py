from fastapi import APIRouter, Depends

from weshare.auth.dependencies import get_current_user
from weshare.models import User
from weshare.notifications.schemas import NotificationRequest, NotificationResponse
from weshare.notifications.service import NotificationService

router = APIRouter()

@router.post("/send", response_model=NotificationResponse)
def send_notification(request: NotificationRequest, current_user: User = Depends(get_current_user)):
    """Send a booking confirmation, payment receipt or trip reminder e-mail"""
    return NotificationResponse(success=NotificationService.send(request))

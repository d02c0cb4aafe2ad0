import logging
from typing import List

from weshare.exceptions import ValidationError
from weshare.notifications import email
from weshare.notifications.schemas import NotificationRequest, NotificationType

logger = logging.getLogger(__name__)

# Payload fields each notification needs
REQUIRED_FIELDS = {
    NotificationType.BOOKING_CONFIRMATION: ("driver_name", "trip"),
    NotificationType.PAYMENT_RECEIPT: ("amount", "transaction_id"),
    NotificationType.TRIP_REMINDER: ("trip",),
}

class NotificationService:
    @staticmethod
    def send(request: NotificationRequest) -> bool:
        """Dispatch one notification e-mail"""
        missing: List[str] = [f for f in REQUIRED_FIELDS[request.type] if getattr(request, f) is None]
        if missing:
            raise ValidationError(
                f"Missing fields for {request.type.value}: {', '.join(missing)}",
                details=[{"field": f, "message": "This field is required"} for f in missing],
            )

        if request.type == NotificationType.BOOKING_CONFIRMATION:
            return email.send_booking_confirmation_email(request.to, request.driver_name, request.trip.dict())
        if request.type == NotificationType.PAYMENT_RECEIPT:
            return email.send_payment_receipt_email(request.to, request.amount, request.transaction_id)
        return email.send_trip_reminder_email(request.to, request.trip.dict())

    @staticmethod
    def send_payment_receipt_quietly(to: str, amount: int, transaction_id: str) -> None:
        """Background receipt delivery; a failure must not affect the payment"""
        try:
            email.send_payment_receipt_email(to, amount, transaction_id)
        except Exception:
            logger.exception("Failed to send payment receipt %s to %s", transaction_id, to)

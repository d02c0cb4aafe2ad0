from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from enum import Enum

class NotificationType(str, Enum):
    BOOKING_CONFIRMATION = "booking_confirmation"
    PAYMENT_RECEIPT = "payment_receipt"
    TRIP_REMINDER = "trip_reminder"

class TripDetails(BaseModel):
    depart_city: str
    destination_city: str
    date: str
    time: str

class NotificationRequest(BaseModel):
    type: NotificationType
    to: EmailStr
    driver_name: Optional[str] = None
    trip: Optional[TripDetails] = None
    amount: Optional[int] = Field(None, ge=0)
    transaction_id: Optional[str] = None

class NotificationResponse(BaseModel):
    success: bool

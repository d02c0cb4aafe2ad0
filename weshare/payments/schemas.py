from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime
from enum import Enum

from weshare.payments.mobile_money import PaymentMethod

class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

class PaymentCreate(BaseModel):
    booking_id: int
    method: PaymentMethod
    phone: str = Field(..., min_length=1, description="Mobile money number to charge")
    receipt_email: Optional[EmailStr] = None

class Payment(BaseModel):
    id: int
    booking_id: int
    user_id: int
    amount: int
    method: PaymentMethod
    status: PaymentStatus
    transaction_id: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class PaymentResponse(BaseModel):
    payment: Payment
    message: str

from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.orm import Session
from typing import List

from weshare.database import get_db
from weshare.auth.dependencies import get_current_user
from weshare.models import User
from weshare.notifications.service import NotificationService
from weshare.payments.schemas import Payment, PaymentCreate, PaymentResponse
from weshare.payments.service import PaymentService

router = APIRouter()

@router.post("/process", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
def process_payment(
    request: PaymentCreate,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Pay a confirmed booking with MTN Mobile Money or Airtel Money"""
    payment, message = PaymentService(db).process_payment(current_user, request)
    if request.receipt_email:
        background_tasks.add_task(
            NotificationService.send_payment_receipt_quietly,
            request.receipt_email,
            payment.amount,
            payment.transaction_id,
        )
    return {"payment": payment, "message": message}

@router.get("", response_model=List[Payment])
def my_payments(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return PaymentService(db).list_my_payments(current_user)

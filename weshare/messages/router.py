from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from weshare.database import get_db
from weshare.auth.dependencies import get_current_user
from weshare.messages.schemas import MarkReadResponse, Message, MessageCreate, UnreadCounts
from weshare.messages.service import MessageService
from weshare.models import User

router = APIRouter()

@router.get("/unread", response_model=UnreadCounts)
def unread_counts(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Unread message counts per booking"""
    counts = MessageService(db).unread_counts(current_user)
    return UnreadCounts(counts=counts, total=sum(counts.values()))

@router.get("/{booking_id}", response_model=List[Message])
def list_messages(
    booking_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return MessageService(db).list_messages(booking_id, current_user)

@router.post("/{booking_id}", response_model=Message, status_code=status.HTTP_201_CREATED)
def send_message(
    booking_id: int,
    request: MessageCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Send a message to the other party of a confirmed booking"""
    return MessageService(db).send_message(booking_id, current_user, request.content)

@router.post("/{booking_id}/read", response_model=MarkReadResponse)
def mark_read(
    booking_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    updated = MessageService(db).mark_read(booking_id, current_user)
    return MarkReadResponse(updated=updated)

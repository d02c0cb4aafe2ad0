from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from weshare.database import get_db
from weshare.auth.dependencies import get_current_user
from weshare.bookings.schemas import Booking, BookingCreate, BookingDetail
from weshare.bookings.service import BookingService
from weshare.models import User

router = APIRouter()

@router.post("", response_model=BookingDetail, status_code=status.HTTP_201_CREATED)
def create_booking(
    request: BookingCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Book seats on a trip; the booking stays PENDING until the driver confirms"""
    return BookingService(db).create_booking(current_user, request)

@router.get("", response_model=List[BookingDetail])
def my_bookings(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Current user's bookings, newest first"""
    return BookingService(db).list_my_bookings(current_user)

@router.post("/{booking_id}/confirm", response_model=Booking)
def confirm_booking(
    booking_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Driver confirms a pending booking"""
    return BookingService(db).confirm_booking(booking_id, current_user)

@router.post("/{booking_id}/cancel", response_model=Booking)
def cancel_booking(
    booking_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Passenger cancels a booking (at least 1 hour before departure)"""
    return BookingService(db).cancel_booking(booking_id, current_user)

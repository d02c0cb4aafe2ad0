from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from weshare.auth.schemas import UserSummary
from weshare.ledger import BookingStatus
from weshare.trips.schemas import Trip

class BookingCreate(BaseModel):
    trip_id: int
    seats: int = Field(..., ge=1, le=4)

class Booking(BaseModel):
    id: int
    trip_id: int
    user_id: int
    seats: int
    status: BookingStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class BookingDetail(Booking):
    """Booking with its trip (and driver) and passenger"""
    trip: Optional[Trip] = None
    passenger: Optional[UserSummary] = None

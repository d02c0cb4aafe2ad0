from pydantic import BaseModel, Field, validator
from typing import List, Optional
from datetime import date as Date, datetime

from weshare.auth.schemas import UserSummary
from weshare.ledger import BookingStatus, TripStatus
from weshare.utils import parse_wall_clock

def _check_time(v: str) -> str:
    parse_wall_clock(v)
    return v.strip()

class TripCreate(BaseModel):
    depart_city: str = Field(..., min_length=1, max_length=100)
    depart_location: str = Field(..., min_length=1, max_length=255)
    destination_city: str = Field(..., min_length=1, max_length=100)
    destination_location: str = Field(..., min_length=1, max_length=255)
    date: Date
    time: str = Field(..., description="Departure time HH:MM, city-local")
    available_seats: int = Field(..., ge=1, le=4)
    price: int = Field(..., ge=0, description="Price per seat in RWF")
    car_model: str = Field(..., min_length=1, max_length=100)

    @validator('depart_city', 'depart_location', 'destination_city', 'destination_location', 'car_model')
    def strip_text(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Field cannot be blank')
        return v

    @validator('time')
    def validate_time(cls, v):
        return _check_time(v)

class TripUpdate(BaseModel):
    depart_city: Optional[str] = Field(None, min_length=1, max_length=100)
    depart_location: Optional[str] = Field(None, min_length=1, max_length=255)
    destination_city: Optional[str] = Field(None, min_length=1, max_length=100)
    destination_location: Optional[str] = Field(None, min_length=1, max_length=255)
    date: Optional[Date] = None
    time: Optional[str] = None
    available_seats: Optional[int] = Field(None, ge=1, le=4)
    price: Optional[int] = Field(None, ge=0)
    car_model: Optional[str] = Field(None, min_length=1, max_length=100)
    status: Optional[TripStatus] = None

    @validator('time')
    def validate_time(cls, v):
        return _check_time(v) if v is not None else v

class TripBooking(BaseModel):
    """Booking as seen by the trip's driver"""
    id: int
    seats: int
    status: BookingStatus
    passenger: Optional[UserSummary] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class Trip(BaseModel):
    id: int
    driver_id: int
    depart_city: str
    depart_location: str
    destination_city: str
    destination_location: str
    date: Date
    time: str
    available_seats: int
    price: int
    car_model: str
    status: TripStatus
    booked_seats: int = 0
    remaining_seats: int = 0
    driver: Optional[UserSummary] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class TripDetail(Trip):
    bookings: List[TripBooking] = []

class TripSearchFilters(BaseModel):
    depart_city: Optional[str] = None
    destination_city: Optional[str] = None
    date: Optional[Date] = None
    status: TripStatus = TripStatus.ACTIVE

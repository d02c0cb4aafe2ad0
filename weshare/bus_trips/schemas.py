from pydantic import BaseModel, Field, validator
from typing import Optional
from datetime import date as Date, datetime

from weshare.auth.schemas import UserSummary
from weshare.ledger import BookingStatus, TripStatus
from weshare.utils import parse_wall_clock

class BusTripCreate(BaseModel):
    depart_city: str = Field(..., min_length=1, max_length=100)
    destination_city: str = Field(..., min_length=1, max_length=100)
    date: Date
    time: str = Field(..., description="Departure time HH:MM, city-local")
    total_seats: int = Field(..., ge=1, le=100)
    price: int = Field(0, ge=0, description="Price per seat in RWF")

    @validator('depart_city', 'destination_city')
    def strip_city(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('City cannot be blank')
        return v

    @validator('time')
    def validate_time(cls, v):
        parse_wall_clock(v)
        return v.strip()

class BusTrip(BaseModel):
    id: int
    agency_id: int
    depart_city: str
    destination_city: str
    date: Date
    time: str
    total_seats: int
    available_seats: int
    price: int
    status: TripStatus
    agency: Optional[UserSummary] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class BusTripSearchFilters(BaseModel):
    depart_city: Optional[str] = None
    destination_city: Optional[str] = None
    date: Optional[Date] = None
    status: TripStatus = TripStatus.ACTIVE

class TicketBookingCreate(BaseModel):
    bus_trip_id: int
    seats: int = Field(..., ge=1, le=10)

class TicketBooking(BaseModel):
    id: int
    bus_trip_id: int
    user_id: int
    seats: int
    status: BookingStatus
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class TicketBookingDetail(TicketBooking):
    bus_trip: Optional[BusTrip] = None
    passenger: Optional[UserSummary] = None

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date

from weshare.database import get_db
from weshare.auth.dependencies import get_current_user
from weshare.bus_trips.schemas import (
    BusTrip, BusTripCreate, BusTripSearchFilters, TicketBooking, TicketBookingCreate, TicketBookingDetail
)
from weshare.bus_trips.service import BusTripService
from weshare.ledger import TripStatus
from weshare.models import User

router = APIRouter()
tickets_router = APIRouter()

# Bus Trip Endpoints
@router.get("", response_model=List[BusTrip])
def search_bus_trips(
    depart_city: Optional[str] = Query(None),
    destination_city: Optional[str] = Query(None),
    date: Optional[date] = Query(None),
    status: TripStatus = Query(TripStatus.ACTIVE),
    db: Session = Depends(get_db),
):
    """Search upcoming agency bus trips"""
    filters = BusTripSearchFilters(
        depart_city=depart_city,
        destination_city=destination_city,
        date=date,
        status=status,
    )
    return BusTripService(db).list_bus_trips(filters)

@router.post("", response_model=BusTrip, status_code=201)
def create_bus_trip(
    request: BusTripCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Post a bus trip (agencies only, at least 2 days ahead)"""
    return BusTripService(db).create_bus_trip(current_user, request)

@router.get("/{bus_trip_id}", response_model=BusTrip)
def get_bus_trip(bus_trip_id: int, db: Session = Depends(get_db)):
    return BusTripService(db).get_bus_trip(bus_trip_id)

# Ticket Endpoints
@tickets_router.post("", response_model=TicketBookingDetail, status_code=201)
def book_ticket(
    request: TicketBookingCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Book bus tickets; confirmed immediately"""
    return BusTripService(db).create_ticket_booking(current_user, request)

@tickets_router.get("", response_model=List[TicketBookingDetail])
def my_tickets(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return BusTripService(db).list_my_tickets(current_user)

@tickets_router.post("/{ticket_id}/cancel", response_model=TicketBooking)
def cancel_ticket(
    ticket_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Cancel a ticket at least 24 hours before departure"""
    return BusTripService(db).cancel_ticket_booking(ticket_id, current_user)

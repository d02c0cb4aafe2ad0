from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date

from weshare.database import get_db
from weshare.auth.dependencies import get_current_user
from weshare.ledger import TripStatus
from weshare.models import User
from weshare.trips.schemas import Trip, TripCreate, TripDetail, TripSearchFilters, TripUpdate
from weshare.trips.service import TripService

router = APIRouter()

@router.get("", response_model=List[Trip])
def search_trips(
    depart_city: Optional[str] = Query(None, description="Departure city (case-insensitive, partial)"),
    destination_city: Optional[str] = Query(None, description="Destination city (case-insensitive, partial)"),
    date: Optional[date] = Query(None, description="Travel date YYYY-MM-DD"),
    status: TripStatus = Query(TripStatus.ACTIVE),
    db: Session = Depends(get_db),
):
    """Search upcoming trips"""
    filters = TripSearchFilters(
        depart_city=depart_city,
        destination_city=destination_city,
        date=date,
        status=status,
    )
    return TripService(db).list_trips(filters)

@router.post("", response_model=Trip, status_code=201)
def create_trip(
    request: TripCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Post a new trip (verified drivers only)"""
    return TripService(db).create_trip(current_user, request)

@router.get("/my-trips", response_model=List[TripDetail])
def my_trips(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Trips posted by the current driver, with their bookings"""
    return TripService(db).list_my_trips(current_user)

@router.get("/{trip_id}", response_model=Trip)
def get_trip(trip_id: int, db: Session = Depends(get_db)):
    return TripService(db).get_trip(trip_id)

@router.patch("/{trip_id}", response_model=Trip)
def update_trip(
    trip_id: int,
    request: TripUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return TripService(db).update_trip(trip_id, current_user, request)

@router.delete("/{trip_id}", status_code=204)
def delete_trip(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    TripService(db).delete_trip(trip_id, current_user)

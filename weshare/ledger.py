"""
Seat accounting shared by carpool trips and agency bus trips.

Availability is never stored: it is always the posted capacity minus the
seats held by booking rows. Writers lock the trip row first so that the
read-count-insert sequence runs one transaction per trip at a time.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from weshare.exceptions import Conflict, NotFound, PolicyViolation
from weshare.models import Booking, BusTrip, TicketBooking, Trip
from weshare.utils import hours_until


class TripStatus(str, Enum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class BookingStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


# Bookings that take a seat away from the trip
HOLDING_STATUSES = (BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value, BookingStatus.COMPLETED.value)
# Bookings the driver has accepted
SETTLED_STATUSES = (BookingStatus.CONFIRMED.value, BookingStatus.COMPLETED.value)
# Bookings a passenger still holds and may cancel
OPEN_STATUSES = (BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value)


def lock_trip(db: Session, trip_id: int) -> Trip:
    trip = db.query(Trip).filter(Trip.id == trip_id).with_for_update().first()
    if not trip:
        raise NotFound("Trip not found")
    return trip


def lock_bus_trip(db: Session, bus_trip_id: int) -> BusTrip:
    bus_trip = db.query(BusTrip).filter(BusTrip.id == bus_trip_id).with_for_update().first()
    if not bus_trip:
        raise NotFound("Bus trip not found")
    return bus_trip


def booked_seats(db: Session, trip_id: int, exclude_booking_id: Optional[int] = None) -> int:
    """Seats held on a carpool trip by PENDING, CONFIRMED and COMPLETED bookings"""
    query = db.query(func.coalesce(func.sum(Booking.seats), 0)).filter(
        Booking.trip_id == trip_id,
        Booking.status.in_(HOLDING_STATUSES),
    )
    if exclude_booking_id is not None:
        query = query.filter(Booking.id != exclude_booking_id)
    return int(query.scalar())


def ticket_seats_held(db: Session, bus_trip_id: int) -> int:
    """Seats held on a bus trip by CONFIRMED and COMPLETED tickets"""
    total = db.query(func.coalesce(func.sum(TicketBooking.seats), 0)).filter(
        TicketBooking.bus_trip_id == bus_trip_id,
        TicketBooking.status.in_(SETTLED_STATUSES),
    ).scalar()
    return int(total)


def ensure_seats(capacity: int, held: int, requested: int) -> int:
    """Raise Conflict unless `requested` seats fit, returning what was available"""
    available = capacity - held
    if available <= 0:
        raise Conflict("This trip is fully booked")
    if requested > available:
        raise Conflict(
            f"Only {available} seat{'s' if available != 1 else ''} available",
            details=[{"field": "seats", "message": f"Requested {requested}, available {available}"}],
        )
    return available


def ensure_lead_time(departure: datetime, min_hours: float, action: str, now: Optional[datetime] = None) -> None:
    """Reject an action on a departed trip or inside the minimum lead window"""
    remaining = hours_until(departure, now)
    if remaining <= 0:
        raise PolicyViolation(f"Cannot {action} a trip that has already departed")
    if remaining < min_hours:
        raise PolicyViolation(
            f"Cannot {action} less than {min_hours:g} hour{'s' if min_hours != 1 else ''} before departure"
        )

import logging
from typing import List

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload, selectinload

from weshare.exceptions import Conflict, Forbidden, NotFound, PolicyViolation
from weshare.ledger import SETTLED_STATUSES, booked_seats, lock_trip
from weshare.models import Booking, Trip, User
from weshare.trips.schemas import TripCreate, TripSearchFilters, TripUpdate
from weshare.utils import departure_at, local_now
from weshare.verification.service import VerificationService

logger = logging.getLogger(__name__)

# Fields a driver may still change once a booking has been confirmed
EDITABLE_WHEN_BOOKED = {"status", "date", "time"}

class TripService:
    """Carpool trips posted by verified drivers"""

    def __init__(self, db: Session):
        self.db = db

    def get_trip(self, trip_id: int) -> Trip:
        trip = (
            self.db.query(Trip)
            .options(joinedload(Trip.driver))
            .filter(Trip.id == trip_id)
            .first()
        )
        if not trip:
            raise NotFound("Trip not found")
        return trip

    def create_trip(self, driver: User, request: TripCreate) -> Trip:
        """Post a trip; requires an approved driver verification"""
        if not VerificationService.is_user_approved(self.db, driver):
            raise PolicyViolation(
                "Driver verification required. Please complete verification before posting trips.",
                code="VERIFICATION_REQUIRED",
            )
        if departure_at(request.date, request.time) <= local_now():
            raise PolicyViolation("Departure must be in the future")

        trip = Trip(driver_id=driver.id, **request.dict())
        self.db.add(trip)
        self.db.commit()
        self.db.refresh(trip)
        logger.info("Driver %s posted trip %s (%s -> %s)", driver.id, trip.id, trip.depart_city, trip.destination_city)
        return trip

    def list_trips(self, filters: TripSearchFilters) -> List[Trip]:
        """Upcoming trips matching the filters, soonest first"""
        query = self.db.query(Trip).options(joinedload(Trip.driver)).filter(Trip.status == filters.status.value)

        if filters.depart_city and filters.depart_city.strip():
            query = query.filter(func.lower(Trip.depart_city).contains(filters.depart_city.strip().lower()))
        if filters.destination_city and filters.destination_city.strip():
            query = query.filter(func.lower(Trip.destination_city).contains(filters.destination_city.strip().lower()))
        if filters.date:
            query = query.filter(Trip.date == filters.date)

        now = local_now()
        trips = query.order_by(Trip.date.asc(), Trip.time.asc()).all()
        return [trip for trip in trips if departure_at(trip.date, trip.time) > now]

    def list_my_trips(self, driver: User) -> List[Trip]:
        return (
            self.db.query(Trip)
            .options(selectinload(Trip.bookings).joinedload(Booking.passenger))
            .filter(Trip.driver_id == driver.id)
            .order_by(Trip.date.desc(), Trip.time.desc())
            .all()
        )

    def _has_settled_bookings(self, trip_id: int) -> bool:
        return self.db.query(Booking.id).filter(
            Booking.trip_id == trip_id,
            Booking.status.in_(SETTLED_STATUSES),
        ).first() is not None

    def update_trip(self, trip_id: int, driver: User, request: TripUpdate) -> Trip:
        changes = {k: v for k, v in request.dict(exclude_unset=True).items() if v is not None}
        trip = lock_trip(self.db, trip_id)
        if trip.driver_id != driver.id:
            raise Forbidden("You can only edit your own trips")

        if self._has_settled_bookings(trip.id):
            restricted = sorted(set(changes) - EDITABLE_WHEN_BOOKED)
            if restricted:
                raise PolicyViolation(
                    "Cannot edit trip details when there are confirmed bookings. "
                    "You can only change status, date, or time.",
                    details=[{"field": field, "message": "Locked by confirmed bookings"} for field in restricted],
                )

        if "date" in changes or "time" in changes:
            departure = departure_at(changes.get("date", trip.date), changes.get("time", trip.time))
            if departure <= local_now():
                raise PolicyViolation("Departure must be in the future")

        new_capacity = changes.get("available_seats")
        if new_capacity is not None:
            held = booked_seats(self.db, trip.id)
            if new_capacity < held:
                raise Conflict(f"Cannot reduce seats below the {held} already booked")

        for field, value in changes.items():
            setattr(trip, field, value.value if field == "status" else value)
        self.db.commit()
        self.db.refresh(trip)
        logger.info("Driver %s updated trip %s: %s", driver.id, trip.id, ", ".join(sorted(changes)))
        return trip

    def delete_trip(self, trip_id: int, driver: User) -> None:
        trip = lock_trip(self.db, trip_id)
        if trip.driver_id != driver.id:
            raise Forbidden("You can only delete your own trips")
        if self._has_settled_bookings(trip.id):
            raise Conflict("Cannot delete a trip with confirmed bookings. Cancel the trip instead.")

        self.db.delete(trip)
        self.db.commit()
        logger.info("Driver %s deleted trip %s", driver.id, trip_id)

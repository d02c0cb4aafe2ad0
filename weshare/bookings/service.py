import logging
from typing import List

from sqlalchemy.orm import Session, joinedload

from weshare.config import settings
from weshare.exceptions import Conflict, Forbidden, NotFound, PolicyViolation
from weshare.ledger import (
    OPEN_STATUSES, BookingStatus, TripStatus, booked_seats, ensure_lead_time, ensure_seats, lock_trip
)
from weshare.models import Booking, Trip, User
from weshare.bookings.schemas import BookingCreate
from weshare.utils import departure_at

logger = logging.getLogger(__name__)

class BookingService:
    """Seat bookings on carpool trips"""

    def __init__(self, db: Session):
        self.db = db

    def _get_booking(self, booking_id: int) -> Booking:
        booking = (
            self.db.query(Booking)
            .filter(Booking.id == booking_id)
            .with_for_update()
            .first()
        )
        if not booking:
            raise NotFound("Booking not found")
        return booking

    def create_booking(self, user: User, request: BookingCreate) -> Booking:
        """Reserve seats as PENDING until the driver confirms"""
        # Serialises seat accounting per trip
        trip = lock_trip(self.db, request.trip_id)

        if trip.driver_id == user.id:
            raise PolicyViolation("Drivers cannot book their own trips")
        if trip.status != TripStatus.ACTIVE.value:
            raise PolicyViolation("Trip is not active")
        ensure_lead_time(departure_at(trip.date, trip.time), settings.BOOKING_MIN_LEAD_HOURS, "book")

        existing = self.db.query(Booking.id).filter(
            Booking.trip_id == trip.id,
            Booking.user_id == user.id,
            Booking.status.in_(OPEN_STATUSES),
        ).first()
        if existing:
            raise Conflict("You already have a booking for this trip")

        overlapping = (
            self.db.query(Booking.id)
            .join(Trip, Booking.trip_id == Trip.id)
            .filter(
                Booking.user_id == user.id,
                Booking.status.in_(OPEN_STATUSES),
                Trip.id != trip.id,
                Trip.date == trip.date,
                Trip.time == trip.time,
            )
            .first()
        )
        if overlapping:
            raise Conflict("You already have a booking for another trip at the same date and time")

        ensure_seats(trip.available_seats, booked_seats(self.db, trip.id), request.seats)

        booking = Booking(
            trip_id=trip.id,
            user_id=user.id,
            seats=request.seats,
            status=BookingStatus.PENDING.value,
        )
        self.db.add(booking)
        self.db.commit()
        self.db.refresh(booking)
        logger.info("User %s booked %s seat(s) on trip %s (booking %s)", user.id, booking.seats, trip.id, booking.id)
        return booking

    def confirm_booking(self, booking_id: int, driver: User) -> Booking:
        """Driver accepts a PENDING booking"""
        booking = self._get_booking(booking_id)
        trip = lock_trip(self.db, booking.trip_id)

        if trip.driver_id != driver.id:
            raise Forbidden("Only the driver can confirm bookings")
        if booking.status != BookingStatus.PENDING.value:
            raise Conflict(f"Booking is {booking.status}, only pending bookings can be confirmed")

        # Same counting rule as creation, without this booking's own seats
        held = booked_seats(self.db, trip.id, exclude_booking_id=booking.id)
        ensure_seats(trip.available_seats, held, booking.seats)

        booking.status = BookingStatus.CONFIRMED.value
        self.db.commit()
        self.db.refresh(booking)
        logger.info("Driver %s confirmed booking %s", driver.id, booking.id)
        return booking

    def cancel_booking(self, booking_id: int, user: User) -> Booking:
        """Passenger cancels a PENDING or CONFIRMED booking"""
        booking = self._get_booking(booking_id)
        if booking.user_id != user.id:
            raise Forbidden("You can only cancel your own bookings")
        if booking.status not in OPEN_STATUSES:
            raise Conflict(f"Booking is already {booking.status.lower()}")

        trip = booking.trip
        ensure_lead_time(departure_at(trip.date, trip.time), settings.BOOKING_CANCEL_MIN_HOURS, "cancel a booking on")

        booking.status = BookingStatus.CANCELLED.value
        self.db.commit()
        self.db.refresh(booking)
        logger.info("User %s cancelled booking %s", user.id, booking.id)
        return booking

    def list_my_bookings(self, user: User) -> List[Booking]:
        return (
            self.db.query(Booking)
            .options(joinedload(Booking.trip).joinedload(Trip.driver), joinedload(Booking.passenger))
            .filter(Booking.user_id == user.id)
            .order_by(Booking.created_at.desc(), Booking.id.desc())
            .all()
        )

import logging
from typing import List

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload, selectinload

from weshare.auth.schemas import UserRole
from weshare.config import settings
from weshare.exceptions import Conflict, Forbidden, NotFound, PolicyViolation
from weshare.ledger import (
    BookingStatus, TripStatus, ensure_lead_time, ensure_seats, lock_bus_trip, ticket_seats_held
)
from weshare.models import BusTrip, TicketBooking, User
from weshare.bus_trips.schemas import BusTripCreate, BusTripSearchFilters, TicketBookingCreate
from weshare.utils import departure_at, hours_until, local_now

logger = logging.getLogger(__name__)

class BusTripService:
    """Agency bus trips and their auto-confirmed tickets"""

    def __init__(self, db: Session):
        self.db = db

    # Bus trips
    def create_bus_trip(self, agency: User, request: BusTripCreate) -> BusTrip:
        if agency.role != UserRole.AGENCY.value:
            raise Forbidden("Only agencies can post bus trips")

        min_days = settings.BUS_TRIP_MIN_POST_DAYS
        if hours_until(departure_at(request.date, request.time)) < min_days * 24:
            raise PolicyViolation(f"Bus trips must be posted at least {min_days} days before departure")

        bus_trip = BusTrip(agency_id=agency.id, **request.dict())
        self.db.add(bus_trip)
        self.db.commit()
        self.db.refresh(bus_trip)
        logger.info("Agency %s posted bus trip %s with %s seats", agency.id, bus_trip.id, bus_trip.total_seats)
        return bus_trip

    def get_bus_trip(self, bus_trip_id: int) -> BusTrip:
        bus_trip = (
            self.db.query(BusTrip)
            .options(joinedload(BusTrip.agency), selectinload(BusTrip.ticket_bookings))
            .filter(BusTrip.id == bus_trip_id)
            .first()
        )
        if not bus_trip:
            raise NotFound("Bus trip not found")
        return bus_trip

    def list_bus_trips(self, filters: BusTripSearchFilters) -> List[BusTrip]:
        query = (
            self.db.query(BusTrip)
            .options(joinedload(BusTrip.agency), selectinload(BusTrip.ticket_bookings))
            .filter(BusTrip.status == filters.status.value)
        )
        if filters.depart_city and filters.depart_city.strip():
            query = query.filter(func.lower(BusTrip.depart_city).contains(filters.depart_city.strip().lower()))
        if filters.destination_city and filters.destination_city.strip():
            query = query.filter(func.lower(BusTrip.destination_city).contains(filters.destination_city.strip().lower()))
        if filters.date:
            query = query.filter(BusTrip.date == filters.date)

        now = local_now()
        bus_trips = query.order_by(BusTrip.date.asc(), BusTrip.time.asc()).all()
        return [trip for trip in bus_trips if departure_at(trip.date, trip.time) > now]

    # Tickets
    def create_ticket_booking(self, user: User, request: TicketBookingCreate) -> TicketBooking:
        """Book and immediately confirm seats on a bus trip"""
        bus_trip = lock_bus_trip(self.db, request.bus_trip_id)

        if bus_trip.status != TripStatus.ACTIVE.value:
            raise PolicyViolation("Bus trip is not active")
        ensure_lead_time(departure_at(bus_trip.date, bus_trip.time), settings.TICKET_MIN_LEAD_HOURS, "book")

        existing = self.db.query(TicketBooking.id).filter(
            TicketBooking.bus_trip_id == bus_trip.id,
            TicketBooking.user_id == user.id,
            TicketBooking.status == BookingStatus.CONFIRMED.value,
        ).first()
        if existing:
            raise Conflict("You already have a ticket for this bus trip")

        overlapping = (
            self.db.query(TicketBooking.id)
            .join(BusTrip, TicketBooking.bus_trip_id == BusTrip.id)
            .filter(
                TicketBooking.user_id == user.id,
                TicketBooking.status == BookingStatus.CONFIRMED.value,
                BusTrip.id != bus_trip.id,
                BusTrip.date == bus_trip.date,
                BusTrip.time == bus_trip.time,
            )
            .first()
        )
        if overlapping:
            raise Conflict("You already have a ticket for another bus trip at the same date and time")

        ensure_seats(bus_trip.total_seats, ticket_seats_held(self.db, bus_trip.id), request.seats)

        ticket = TicketBooking(
            bus_trip_id=bus_trip.id,
            user_id=user.id,
            seats=request.seats,
            status=BookingStatus.CONFIRMED.value,
        )
        self.db.add(ticket)
        self.db.commit()
        self.db.refresh(ticket)
        logger.info("User %s bought %s ticket(s) on bus trip %s", user.id, ticket.seats, bus_trip.id)
        return ticket

    def cancel_ticket_booking(self, ticket_id: int, user: User) -> TicketBooking:
        ticket = self.db.query(TicketBooking).filter(TicketBooking.id == ticket_id).first()
        if not ticket:
            raise NotFound("Ticket booking not found")
        if ticket.user_id != user.id:
            raise Forbidden("You can only cancel your own tickets")

        bus_trip = lock_bus_trip(self.db, ticket.bus_trip_id)
        if ticket.status in (BookingStatus.CANCELLED.value, BookingStatus.COMPLETED.value):
            raise Conflict(f"Ticket is already {ticket.status.lower()}")
        ensure_lead_time(
            departure_at(bus_trip.date, bus_trip.time),
            settings.TICKET_CANCEL_MIN_HOURS,
            "cancel a ticket on",
        )

        ticket.status = BookingStatus.CANCELLED.value
        self.db.commit()
        self.db.refresh(ticket)
        logger.info("User %s cancelled ticket %s", user.id, ticket.id)
        return ticket

    def list_my_tickets(self, user: User) -> List[TicketBooking]:
        return (
            self.db.query(TicketBooking)
            .options(joinedload(TicketBooking.bus_trip).joinedload(BusTrip.agency))
            .filter(TicketBooking.user_id == user.id)
            .order_by(TicketBooking.created_at.desc(), TicketBooking.id.desc())
            .all()
        )

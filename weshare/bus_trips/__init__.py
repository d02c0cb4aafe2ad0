"""
Agency Bus Trips Module

Inter-city bus trips posted by agencies and the tickets passengers buy:

- Only AGENCY accounts post bus trips, at least 2 days before departure
- Tickets are confirmed on purchase, up to 2 hours before departure
- Cancelling is allowed until 24 hours before departure
- Available seats are the capacity minus confirmed and completed tickets

Key Components:
- service.py: BusTripService (bus trips and tickets)
- router.py: endpoints under /bus-trips and /ticket-bookings
- schemas.py: payloads and views
"""

from .router import router, tickets_router
from .service import BusTripService
from .schemas import BusTrip, BusTripCreate, TicketBooking, TicketBookingCreate

__all__ = [
    "router",
    "tickets_router",
    "BusTripService",
    "BusTrip",
    "BusTripCreate",
    "TicketBooking",
    "TicketBookingCreate",
]

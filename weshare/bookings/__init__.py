"""
Carpool Booking Module

Seat reservations on carpool trips:

- Bookings start PENDING and count against the trip's capacity right away
- Only the trip's driver confirms; only the passenger cancels
- A passenger holds at most one open booking per trip and none on another
  trip departing at the same date and time
- Booking closes 1 hour before departure, as does cancelling

Key Components:
- service.py: BookingService (create, confirm, cancel, list)
- router.py: FastAPI endpoints under /bookings
- schemas.py: booking payloads and views
"""

from .router import router
from .service import BookingService
from .schemas import Booking, BookingCreate, BookingDetail

__all__ = [
    "router",
    "BookingService",
    "Booking",
    "BookingCreate",
    "BookingDetail",
]

"""
Carpool Trips Module

Trips posted by verified drivers, searched by passengers:

- Posting requires an approved driver verification
- Search by departure/destination city (case-insensitive, partial) and date;
  departed trips are never listed
- Seat availability is derived from the trip's bookings
- Drivers may only change status, date or time once a booking is confirmed,
  and cannot delete such trips

Key Components:
- service.py: TripService (create, search, update, delete)
- router.py: FastAPI endpoints under /trips
- schemas.py: trip payloads and views
"""

from .router import router
from .service import TripService
from .schemas import Trip, TripCreate, TripUpdate, TripDetail, TripSearchFilters

__all__ = [
    "router",
    "TripService",
    "Trip",
    "TripCreate",
    "TripUpdate",
    "TripDetail",
    "TripSearchFilters",
]

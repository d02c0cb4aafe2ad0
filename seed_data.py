#!/usr/bin/env python3
"""
Demo data for a local WeShare database.

Creates the tables if needed, then a few users of every role, upcoming
carpool trips with bookings and an agency bus trip.

Usage:
    python seed_data.py
"""

from datetime import timedelta

from weshare.database import Base, SessionLocal, engine
from weshare.ledger import BookingStatus, TripStatus
from weshare.models import Booking, BusTrip, TicketBooking, Trip, User
from weshare.utils import local_now


def departure(days: int, hour: int):
    moment = (local_now() + timedelta(days=days)).replace(hour=hour, minute=0)
    return moment.date(), moment.strftime("%H:%M")


def create_seed_data():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    try:
        print("🚀 Creating seed data for WeShare Rwanda...")

        if db.query(User).count():
            print("✅ Users already exist, skipping...")
            return

        print("Creating users...")
        super_admin = User(phone="+250788000000", name="WeShare Super Admin", role="SUPER_ADMIN", phone_verified=True)
        admin = User(phone="+250788000001", name="Verification Desk", role="ADMIN", phone_verified=True)
        drivers = [
            User(phone="+250788100001", name="Jean Bosco Habimana", role="DRIVER",
                 phone_verified=True, driver_verified=True, license_plate="RAB 123 A"),
            User(phone="+250788100002", name="Aline Uwase", role="DRIVER",
                 phone_verified=True, driver_verified=True, license_plate="RAD 456 C"),
            User(phone="+250788100003", name="Eric Nshimiyimana", role="DRIVER", phone_verified=True),
        ]
        passengers = [
            User(phone="+250788200001", name="Claudine Mukamana", role="PASSENGER", phone_verified=True),
            User(phone="+250788200002", name="Patrick Niyonzima", role="PASSENGER", phone_verified=True),
        ]
        agency = User(phone="+250788300001", name="Volcano Express", role="AGENCY", phone_verified=True)
        db.add_all([super_admin, admin, agency] + drivers + passengers)
        db.flush()

        print("Creating carpool trips...")
        routes = [
            ("Kigali", "Nyabugogo", "Musanze", "Bus Park", "Toyota RAV4", 4, 3000),
            ("Kigali", "Kimironko", "Rubavu", "Gisenyi Market", "Suzuki Swift", 3, 5000),
            ("Huye", "Campus", "Kigali", "Remera", "Toyota Corolla", 4, 3500),
        ]
        trips = []
        for day, (driver, route) in enumerate(zip(drivers[:2] + drivers[:1], routes), start=1):
            depart_city, depart_location, destination_city, destination_location, car, seats, price = route
            trip_date, trip_time = departure(day, 7 + day)
            trips.append(Trip(
                driver_id=driver.id,
                depart_city=depart_city,
                depart_location=depart_location,
                destination_city=destination_city,
                destination_location=destination_location,
                date=trip_date,
                time=trip_time,
                available_seats=seats,
                price=price,
                car_model=car,
                status=TripStatus.ACTIVE.value,
            ))
        db.add_all(trips)
        db.flush()

        print("Creating bookings...")
        bookings = [
            Booking(trip_id=trips[0].id, user_id=passengers[0].id, seats=2, status=BookingStatus.CONFIRMED.value),
            Booking(trip_id=trips[0].id, user_id=passengers[1].id, seats=1, status=BookingStatus.PENDING.value),
            Booking(trip_id=trips[1].id, user_id=passengers[1].id, seats=1, status=BookingStatus.PENDING.value),
        ]
        db.add_all(bookings)

        print("Creating bus trips...")
        bus_date, bus_time = departure(3, 6)
        bus_trip = BusTrip(
            agency_id=agency.id,
            depart_city="Kigali",
            destination_city="Huye",
            date=bus_date,
            time=bus_time,
            total_seats=30,
            price=3500,
        )
        db.add(bus_trip)
        db.flush()
        tickets = [
            TicketBooking(bus_trip_id=bus_trip.id, user_id=passengers[0].id, seats=2,
                          status=BookingStatus.CONFIRMED.value),
        ]
        db.add_all(tickets)

        db.commit()

        print("✅ Successfully created seed data for WeShare Rwanda!")
        print("Created:")
        print(f"  - {2 + len(drivers) + len(passengers) + 1} users (log in with any phone above)")
        print(f"  - {len(trips)} carpool trips")
        print(f"  - {len(bookings)} bookings")
        print("  - 1 bus trip")
        print(f"  - {len(tickets)} ticket bookings")

    except Exception as e:
        print(f"❌ Error creating seed data: {e}")
        db.rollback()
        raise
    finally:
        db.close()

if __name__ == "__main__":
    create_seed_data()

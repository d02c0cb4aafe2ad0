import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["DATABASE_URL"] = "sqlite://"

from datetime import timedelta
from itertools import count

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from weshare.auth.utils import create_access_token
from weshare.database import Base, get_db
from weshare.main import app
from weshare.models import Booking, BusTrip, Trip, User
from weshare.storage import LocalBlobStore, get_profile_store, get_verification_store
from weshare.utils import local_now

_phones = count(100001)


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def verification_store(tmp_path):
    return LocalBlobStore(str(tmp_path / "driver-verification"))


@pytest.fixture
def profile_store(tmp_path):
    return LocalBlobStore(str(tmp_path))


@pytest.fixture
def client(db, verification_store, profile_store):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_verification_store] = lambda: verification_store
    app.dependency_overrides[get_profile_store] = lambda: profile_store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def next_phone() -> str:
    return f"+250788{next(_phones):06d}"


def departure_in(hours: float):
    """(date, "HH:MM") for a departure roughly `hours` from now in city time"""
    moment = local_now() + timedelta(hours=hours)
    return moment.date(), moment.strftime("%H:%M")


@pytest.fixture
def make_user(db):
    def _make_user(name="Test User", role="PASSENGER", phone=None, driver_verified=False):
        user = User(
            phone=phone or next_phone(),
            name=name,
            role=role,
            phone_verified=True,
            driver_verified=driver_verified,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make_user


@pytest.fixture
def make_trip(db):
    def _make_trip(driver, hours_ahead=48, seats=4, price=2000, status="ACTIVE", **overrides):
        trip_date, trip_time = departure_in(hours_ahead)
        values = dict(
            driver_id=driver.id,
            depart_city="Kigali",
            depart_location="Nyabugogo",
            destination_city="Musanze",
            destination_location="Bus Park",
            date=trip_date,
            time=trip_time,
            available_seats=seats,
            price=price,
            car_model="Toyota RAV4",
            status=status,
        )
        values.update(overrides)
        trip = Trip(**values)
        db.add(trip)
        db.commit()
        db.refresh(trip)
        return trip
    return _make_trip


@pytest.fixture
def make_booking(db):
    def _make_booking(trip, passenger, seats=1, status="PENDING"):
        booking = Booking(trip_id=trip.id, user_id=passenger.id, seats=seats, status=status)
        db.add(booking)
        db.commit()
        db.refresh(booking)
        return booking
    return _make_booking


@pytest.fixture
def make_bus_trip(db):
    def _make_bus_trip(agency, hours_ahead=72, total_seats=10, price=3000, **overrides):
        trip_date, trip_time = departure_in(hours_ahead)
        values = dict(
            agency_id=agency.id,
            depart_city="Kigali",
            destination_city="Huye",
            date=trip_date,
            time=trip_time,
            total_seats=total_seats,
            price=price,
        )
        values.update(overrides)
        bus_trip = BusTrip(**values)
        db.add(bus_trip)
        db.commit()
        db.refresh(bus_trip)
        return bus_trip
    return _make_bus_trip


@pytest.fixture
def auth_headers():
    def _auth_headers(user):
        token = create_access_token(data={"sub": str(user.id), "role": user.role})
        return {"Authorization": f"Bearer {token}"}
    return _auth_headers

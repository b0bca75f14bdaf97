"""Shared fixtures: in-memory SQLite schema, entity factories and a fake gateway."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ["REMINDER_SCHEDULING_ENABLED"] = "false"

import uuid
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.session import Base
from app.models.booking import Booking
from app.models.email_log import EmailLog  # noqa: F401
from app.models.ride import Ride
from app.models.ride_reminder import RideReminder  # noqa: F401
from app.models.user import User
from tests.helpers import FakeGateway


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def make_user(db):
    def _make(role="passenger", email=None, first_name="Pat", last_name="Rider"):
        n = uuid.uuid4().hex[:10]
        user = User(
            id=str(uuid.uuid4()),
            email=email or f"{role}-{n}@example.com",
            phone_number=f"+1{n}",
            first_name=first_name,
            last_name=last_name,
            role=role,
            is_active=True,
        )
        db.add(user)
        db.commit()
        return user
    return _make


@pytest.fixture
def make_ride(db, make_user):
    def _make(departure, driver=None, seats=4, price="12.50"):
        driver = driver or make_user("driver", first_name="Dana", last_name="Driver")
        ride = Ride(
            id=str(uuid.uuid4()),
            driver_id=driver.id,
            source="Pune",
            destination="Mumbai",
            departure_date=departure,
            total_seats=seats,
            available_seats=seats,
            price_per_seat=Decimal(price),
            vehicle_type="Sedan",
            vehicle_model="City",
            vehicle_color="White",
            vehicle_number="MH12AB1234",
            status="ACTIVE",
        )
        db.add(ride)
        db.commit()
        return ride
    return _make


@pytest.fixture
def make_booking(db, make_user, make_ride):
    def _make(booking_time, ride_time, status="CONFIRMED", passenger=None, ride=None, seats=1):
        ride = ride or make_ride(ride_time)
        passenger = passenger or make_user("passenger")
        booking = Booking(
            id=str(uuid.uuid4()),
            ride_id=ride.id,
            passenger_id=passenger.id,
            seats_booked=seats,
            total_amount=Decimal(ride.price_per_seat) * seats,
            passenger_name=passenger.full_name,
            passenger_phone=passenger.phone_number,
            status=status,
            booking_date=booking_time,
        )
        db.add(booking)
        db.commit()
        return booking
    return _make


@pytest.fixture
def gateway():
    return FakeGateway()

import logging
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from sqlalchemy.orm import Session
from sqlalchemy import select
from app.core.config import settings
from app.core.state_machine import BookingStatus, validate_booking_transition
from app.models.user import User
from app.models.booking import Booking
from app.models.ride import Ride
from app.services.email_service import queue_email
from app.services.reminder_policy import as_utc
from app.services.reminder_service import ReminderSchedulingError, cancel_for_booking, schedule_for_booking

logger = logging.getLogger("smartride.bookings")

# Passengers may not cancel inside this window before departure.
PASSENGER_CANCEL_CUTOFF = timedelta(hours=2)


def _locked_ride(db: Session, ride_id: str) -> Ride:
    ride = db.execute(select(Ride).where(Ride.id == ride_id).with_for_update()).scalar_one_or_none()
    if not ride:
        raise LookupError("ride not found")
    return ride


def _get_booking(db: Session, booking_id: str) -> Booking:
    booking = db.get(Booking, booking_id)
    if not booking:
        raise LookupError("booking not found")
    return booking


def _set_status(booking: Booking, new_status: BookingStatus, now: datetime) -> None:
    validate_booking_transition(booking.status, new_status)
    booking.status = new_status.value
    booking.updated_at = now


def _notify(db: Session, booking_id: str, to_email: str, subject: str, body: str) -> None:
    # The status change is already committed; a mail failure must not stop the reminder hooks.
    try:
        queue_email(db, to_email, subject, body, related_booking_id=booking_id)
    except Exception:
        db.rollback()
        logger.exception("booking_email_failed booking_id=%s subject=%s", booking_id, subject)


def _release_seats(ride: Ride, booking: Booking, now: datetime) -> None:
    ride.available_seats += booking.seats_booked
    if ride.status == "FULL":
        ride.status = "ACTIVE"
    ride.updated_at = now


def book_ride(
    db: Session,
    passenger: User,
    ride_id: str,
    seats: int,
    passenger_name: str,
    passenger_phone: str,
    pickup_point: str | None = None,
    now: datetime | None = None,
) -> Booking:
    if seats < 1:
        raise ValueError("seats must be >= 1")
    now = now or datetime.now(timezone.utc)

    # Transactional lock to prevent overbooking
    ride = _locked_ride(db, ride_id)
    if ride.status != "ACTIVE":
        raise ValueError("this ride is not available for booking")
    if as_utc(ride.departure_date) <= now:
        raise ValueError("cannot book past rides")
    if ride.driver_id == passenger.id:
        raise ValueError("drivers cannot book their own rides")
    if ride.available_seats < seats:
        raise ValueError(f"not enough seats available; only {ride.available_seats} left")

    ride.available_seats -= seats
    if ride.available_seats == 0:
        ride.status = "FULL"
    ride.updated_at = now

    booking = Booking(
        id=str(uuid.uuid4()),
        ride_id=ride.id,
        passenger_id=passenger.id,
        seats_booked=seats,
        total_amount=Decimal(ride.price_per_seat) * seats,
        passenger_name=passenger_name,
        passenger_phone=passenger_phone,
        pickup_point=pickup_point,
        status=BookingStatus.PENDING.value,
        booking_date=now,
        updated_at=now,
    )
    db.add(booking)
    db.commit()
    db.refresh(booking)
    return booking


def confirm_booking(db: Session, driver: User, ride_id: str, booking_id: str, now: datetime | None = None) -> Booking:
    """Driver accepts a pending booking; reminders are scheduled best-effort."""
    now = now or datetime.now(timezone.utc)
    booking = _get_booking(db, booking_id)
    ride = db.get(Ride, booking.ride_id)
    if booking.ride_id != ride_id or ride is None or ride.driver_id != driver.id:
        raise PermissionError("you can only manage bookings for your own rides")
    if booking.status != BookingStatus.PENDING:
        raise ValueError("only pending bookings can be confirmed")

    _set_status(booking, BookingStatus.CONFIRMED, now)
    db.commit()

    passenger = db.get(User, booking.passenger_id)
    if passenger:
        _notify(
            db,
            booking.id,
            passenger.email,
            f"Booking Confirmed - {settings.BRAND_NAME}",
            f"Hi {passenger.full_name or booking.passenger_name},\n\n"
            f"Your booking for {booking.seats_booked} seat(s) from {ride.source} to {ride.destination} "
            f"on {as_utc(ride.departure_date):%Y-%m-%d %H:%M} UTC has been confirmed by {driver.full_name}.",
        )

    # The confirmation stands even if reminders cannot be written.
    try:
        schedule_for_booking(db, booking, now=now)
    except ReminderSchedulingError:
        logger.warning("booking_confirmed_without_reminders booking_id=%s", booking.id)
    return booking


def _cancel(db: Session, booking: Booking, ride: Ride, now: datetime) -> Booking:
    _set_status(booking, BookingStatus.CANCELLED, now)
    _release_seats(ride, booking, now)
    db.commit()

    passenger = db.get(User, booking.passenger_id)
    if passenger:
        _notify(
            db,
            booking.id,
            passenger.email,
            f"Booking Cancelled - {settings.BRAND_NAME}",
            f"Hi {passenger.full_name or booking.passenger_name},\n\n"
            f"Your booking from {ride.source} to {ride.destination} "
            f"on {as_utc(ride.departure_date):%Y-%m-%d %H:%M} UTC has been cancelled.",
        )

    try:
        cancel_for_booking(db, booking.id, now=now)
    except ReminderSchedulingError:
        logger.warning("booking_cancelled_reminders_left booking_id=%s", booking.id)
    return booking


def cancel_booking(db: Session, passenger: User, booking_id: str, now: datetime | None = None) -> Booking:
    now = now or datetime.now(timezone.utc)
    booking = _get_booking(db, booking_id)
    if booking.passenger_id != passenger.id:
        raise PermissionError("you can only cancel your own bookings")
    if booking.status in (BookingStatus.CANCELLED, BookingStatus.COMPLETED):
        raise ValueError(f"booking is already {booking.status.lower()}")
    ride = _locked_ride(db, booking.ride_id)
    if as_utc(ride.departure_date) < now + PASSENGER_CANCEL_CUTOFF:
        raise ValueError("cannot cancel booking less than 2 hours before departure")
    return _cancel(db, booking, ride, now)


def cancel_booking_by_driver(db: Session, driver: User, ride_id: str, booking_id: str, now: datetime | None = None) -> Booking:
    now = now or datetime.now(timezone.utc)
    booking = _get_booking(db, booking_id)
    if booking.ride_id != ride_id:
        raise PermissionError("you can only manage bookings for your own rides")
    ride = _locked_ride(db, ride_id)
    if ride.driver_id != driver.id:
        raise PermissionError("you can only manage bookings for your own rides")
    if booking.status == BookingStatus.COMPLETED:
        raise ValueError("completed bookings cannot be cancelled")
    if booking.status == BookingStatus.CANCELLED:
        raise ValueError("booking is already cancelled")
    return _cancel(db, booking, ride, now)


def mark_booking_paid(db: Session, booking_id: str, now: datetime | None = None) -> Booking:
    """Called by the payment collaborator once settlement is captured."""
    booking = _get_booking(db, booking_id)
    _set_status(booking, BookingStatus.PAID, now or datetime.now(timezone.utc))
    db.commit()
    return booking


def complete_booking(db: Session, booking_id: str, now: datetime | None = None) -> Booking:
    booking = _get_booking(db, booking_id)
    _set_status(booking, BookingStatus.COMPLETED, now or datetime.now(timezone.utc))
    db.commit()
    return booking

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.api.deps import get_current_user, raise_http, require_roles
from app.models.booking import Booking
from app.models.ride import Ride
from app.models.user import User
from app.schemas.booking import BookingCreate, BookingOut
from app.services import booking_service

router = APIRouter(tags=["bookings"])

@router.post("/bookings", response_model=BookingOut)
def create_booking(body: BookingCreate, db: Session = Depends(get_db), passenger: User = Depends(require_roles("passenger"))):
    try:
        booking = booking_service.book_ride(
            db, passenger, body.rideId, body.seatsBooked, body.passengerName, body.passengerPhone, body.pickupPoint
        )
    except (ValueError, LookupError, PermissionError) as e:
        raise_http(e)
    return BookingOut.from_booking(booking)

@router.get("/bookings/{booking_id}", response_model=BookingOut)
def get_booking(booking_id: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    b = db.get(Booking, booking_id)
    if not b:
        raise HTTPException(status_code=404, detail="Not found")
    ride = db.get(Ride, b.ride_id)
    if user.role != "admin" and user.id not in (b.passenger_id, ride.driver_id if ride else None):
        raise HTTPException(status_code=403, detail="Forbidden")
    return BookingOut.from_booking(b)

@router.post("/bookings/{booking_id}/cancel", response_model=BookingOut)
def cancel_booking(booking_id: str, db: Session = Depends(get_db), passenger: User = Depends(require_roles("passenger"))):
    try:
        booking = booking_service.cancel_booking(db, passenger, booking_id)
    except (ValueError, LookupError, PermissionError) as e:
        raise_http(e)
    return BookingOut.from_booking(booking)

@router.post("/driver/rides/{ride_id}/bookings/{booking_id}/confirm", response_model=BookingOut)
def confirm_booking(ride_id: str, booking_id: str, db: Session = Depends(get_db), driver: User = Depends(require_roles("driver"))):
    try:
        booking = booking_service.confirm_booking(db, driver, ride_id, booking_id)
    except (ValueError, LookupError, PermissionError) as e:
        raise_http(e)
    return BookingOut.from_booking(booking)

@router.post("/driver/rides/{ride_id}/bookings/{booking_id}/cancel", response_model=BookingOut)
def driver_cancel_booking(ride_id: str, booking_id: str, db: Session = Depends(get_db), driver: User = Depends(require_roles("driver"))):
    try:
        booking = booking_service.cancel_booking_by_driver(db, driver, ride_id, booking_id)
    except (ValueError, LookupError, PermissionError) as e:
        raise_http(e)
    return BookingOut.from_booking(booking)

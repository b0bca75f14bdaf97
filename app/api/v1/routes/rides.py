import uuid
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.api.deps import require_roles
from app.models.ride import Ride
from app.models.user import User
from app.schemas.ride import RideCreate, RideOut
from app.services.reminder_policy import as_utc

router = APIRouter(tags=["rides"])

@router.post("/rides", response_model=RideOut)
def post_ride(body: RideCreate, db: Session = Depends(get_db), driver: User = Depends(require_roles("driver"))):
    if as_utc(body.departureDate) <= datetime.now(timezone.utc):
        raise HTTPException(status_code=400, detail="departure must be in the future")
    ride = Ride(
        id=str(uuid.uuid4()),
        driver_id=driver.id,
        source=body.source,
        destination=body.destination,
        departure_date=as_utc(body.departureDate),
        total_seats=body.totalSeats,
        available_seats=body.totalSeats,
        price_per_seat=body.pricePerSeat,
        vehicle_type=body.vehicleType,
        vehicle_model=body.vehicleModel,
        vehicle_color=body.vehicleColor,
        vehicle_number=body.vehicleNumber,
        notes=body.notes,
        status="ACTIVE",
    )
    db.add(ride)
    db.commit()
    return RideOut.from_ride(ride)

@router.get("/rides/{ride_id}", response_model=RideOut)
def get_ride(ride_id: str, db: Session = Depends(get_db)):
    ride = db.get(Ride, ride_id)
    if not ride:
        raise HTTPException(status_code=404, detail="Not found")
    return RideOut.from_ride(ride)

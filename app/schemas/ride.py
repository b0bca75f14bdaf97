from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field
from typing import Optional

class RideCreate(BaseModel):
    source: str
    destination: str
    departureDate: datetime
    totalSeats: int = Field(..., ge=1)
    pricePerSeat: Decimal = Field(..., ge=0)
    vehicleType: str = ""
    vehicleModel: str = ""
    vehicleColor: str = ""
    vehicleNumber: str = ""
    notes: Optional[str] = None

class RideOut(BaseModel):
    id: str
    driverId: str
    source: str
    destination: str
    departureDate: datetime
    totalSeats: int
    availableSeats: int
    pricePerSeat: Decimal
    vehicleInfo: str
    status: str

    @classmethod
    def from_ride(cls, r) -> "RideOut":
        return cls(
            id=r.id,
            driverId=r.driver_id,
            source=r.source,
            destination=r.destination,
            departureDate=r.departure_date,
            totalSeats=r.total_seats,
            availableSeats=r.available_seats,
            pricePerSeat=r.price_per_seat,
            vehicleInfo=r.vehicle_info,
            status=r.status,
        )

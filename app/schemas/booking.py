from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field
from typing import Optional

class BookingCreate(BaseModel):
    rideId: str
    seatsBooked: int = Field(1, ge=1)
    passengerName: str
    passengerPhone: str
    pickupPoint: Optional[str] = None

class BookingOut(BaseModel):
    id: str
    rideId: str
    passengerId: str
    seatsBooked: int
    totalAmount: Decimal
    passengerName: str
    passengerPhone: str
    pickupPoint: Optional[str] = None
    status: str
    bookingDate: datetime

    @classmethod
    def from_booking(cls, b) -> "BookingOut":
        return cls(
            id=b.id,
            rideId=b.ride_id,
            passengerId=b.passenger_id,
            seatsBooked=b.seats_booked,
            totalAmount=b.total_amount,
            passengerName=b.passenger_name,
            passengerPhone=b.passenger_phone,
            pickupPoint=b.pickup_point,
            status=b.status,
            bookingDate=b.booking_date,
        )

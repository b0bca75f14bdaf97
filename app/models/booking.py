from decimal import Decimal
from sqlalchemy import String, Integer, DateTime, Numeric, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from app.db.session import Base

class Booking(Base):
    __tablename__ = "bookings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    ride_id: Mapped[str] = mapped_column(ForeignKey("rides.id"), index=True)
    passenger_id: Mapped[str] = mapped_column(String(36), index=True)

    seats_booked: Mapped[int] = mapped_column(Integer, default=1)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2))

    passenger_name: Mapped[str] = mapped_column(String(100))
    passenger_phone: Mapped[str] = mapped_column(String(20))
    pickup_point: Mapped[str | None] = mapped_column(String(200), nullable=True)

    status: Mapped[str] = mapped_column(String(20), default="PENDING", index=True)  # PENDING, CONFIRMED, PAID, CANCELLED, COMPLETED

    booking_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

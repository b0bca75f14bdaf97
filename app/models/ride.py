from decimal import Decimal
from sqlalchemy import String, Integer, DateTime, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from app.db.session import Base

class Ride(Base):
    __tablename__ = "rides"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    driver_id: Mapped[str] = mapped_column(String(36), index=True)

    source: Mapped[str] = mapped_column(String(200))
    destination: Mapped[str] = mapped_column(String(200))
    departure_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)

    total_seats: Mapped[int] = mapped_column(Integer)
    available_seats: Mapped[int] = mapped_column(Integer)
    price_per_seat: Mapped[Decimal] = mapped_column(Numeric(10, 2))

    vehicle_type: Mapped[str] = mapped_column(String(50), default="")
    vehicle_model: Mapped[str] = mapped_column(String(100), default="")
    vehicle_color: Mapped[str] = mapped_column(String(50), default="")
    vehicle_number: Mapped[str] = mapped_column(String(30), default="")
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(String(20), default="ACTIVE", index=True)  # ACTIVE, FULL, CANCELLED, COMPLETED

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    @property
    def vehicle_info(self) -> str:
        return f"{self.vehicle_number} ({self.vehicle_type})"

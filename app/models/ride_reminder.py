from sqlalchemy import String, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from app.db.session import Base

class RideReminder(Base):
    """One scheduled or historical reminder notification for a booking."""

    __tablename__ = "ride_reminders"
    __table_args__ = (
        UniqueConstraint("booking_id", "reminder_type", name="uq_ride_reminder_booking_type"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    booking_id: Mapped[str] = mapped_column(ForeignKey("bookings.id", ondelete="CASCADE"), index=True)

    reminder_type: Mapped[str] = mapped_column(String(40))  # see ReminderType
    scheduled_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    status: Mapped[str] = mapped_column(String(20), default="SCHEDULED", index=True)  # SCHEDULED, SENT, FAILED, CANCELLED

    notification_channel: Mapped[str] = mapped_column(String(20), default="EMAIL")
    # Snapshot taken at schedule time; not re-read at dispatch.
    recipient_email: Mapped[str] = mapped_column(String(320), index=True)
    message: Mapped[str | None] = mapped_column(String(500), nullable=True)

    sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    error_message: Mapped[str | None] = mapped_column(String(500), nullable=True)

    attempt_count: Mapped[int] = mapped_column(Integer, default=0)
    max_attempts: Mapped[int] = mapped_column(Integer, default=3)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

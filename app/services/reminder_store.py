"""Data access for ride reminder records. No scheduling policy lives here."""

from datetime import datetime

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from app.core.state_machine import ReminderStatus, validate_reminder_transition
from app.models.booking import Booking
from app.models.ride import Ride
from app.models.ride_reminder import RideReminder

ERROR_MESSAGE_MAX = 500


def get_reminder(db: Session, reminder_id: str) -> RideReminder | None:
    return db.get(RideReminder, reminder_id)


def list_for_booking(db: Session, booking_id: str) -> list[RideReminder]:
    stmt = (
        select(RideReminder)
        .where(RideReminder.booking_id == booking_id)
        .order_by(RideReminder.scheduled_time.asc())
    )
    return list(db.execute(stmt).scalars())


def list_for_recipient(db: Session, email: str) -> list[RideReminder]:
    stmt = (
        select(RideReminder)
        .where(RideReminder.recipient_email == email)
        .order_by(RideReminder.scheduled_time.desc())
    )
    return list(db.execute(stmt).scalars())


def list_for_passenger(db: Session, passenger_id: str) -> list[RideReminder]:
    stmt = (
        select(RideReminder)
        .join(Booking, Booking.id == RideReminder.booking_id)
        .where(Booking.passenger_id == passenger_id)
        .order_by(RideReminder.scheduled_time.desc())
    )
    return list(db.execute(stmt).scalars())


def list_for_driver(db: Session, driver_id: str) -> list[RideReminder]:
    stmt = (
        select(RideReminder)
        .join(Booking, Booking.id == RideReminder.booking_id)
        .join(Ride, Ride.id == Booking.ride_id)
        .where(Ride.driver_id == driver_id)
        .order_by(RideReminder.scheduled_time.desc())
    )
    return list(db.execute(stmt).scalars())


def list_scheduled_between(db: Session, start: datetime, end: datetime) -> list[RideReminder]:
    stmt = (
        select(RideReminder)
        .where(RideReminder.scheduled_time.between(start, end))
        .order_by(RideReminder.scheduled_time.asc())
    )
    return list(db.execute(stmt).scalars())


def find_due(db: Session, now: datetime, limit: int = 500) -> list[RideReminder]:
    """SCHEDULED reminders whose fire time has arrived, oldest first."""
    stmt = (
        select(RideReminder)
        .where(RideReminder.status == ReminderStatus.SCHEDULED.value)
        .where(RideReminder.scheduled_time <= now)
        .order_by(RideReminder.scheduled_time.asc())
        .limit(limit)
    )
    return list(db.execute(stmt).scalars())


def find_overdue(db: Session, now: datetime) -> list[RideReminder]:
    stmt = (
        select(RideReminder)
        .where(RideReminder.status == ReminderStatus.SCHEDULED.value)
        .where(RideReminder.scheduled_time < now)
        .order_by(RideReminder.scheduled_time.asc())
    )
    return list(db.execute(stmt).scalars())


def find_retryable(db: Session, limit: int = 500) -> list[RideReminder]:
    """FAILED reminders that still have attempts left."""
    stmt = (
        select(RideReminder)
        .where(RideReminder.status == ReminderStatus.FAILED.value)
        .where(RideReminder.attempt_count < RideReminder.max_attempts)
        .order_by(RideReminder.scheduled_time.asc())
        .limit(limit)
    )
    return list(db.execute(stmt).scalars())


def exists_for_booking_and_type(db: Session, booking_id: str, reminder_type: str) -> bool:
    stmt = select(RideReminder.id).where(
        RideReminder.booking_id == booking_id,
        RideReminder.reminder_type == str(getattr(reminder_type, "value", reminder_type)),
    )
    return db.execute(stmt.limit(1)).first() is not None


def count_by_status(db: Session) -> dict[str, int]:
    rows = db.execute(
        select(RideReminder.status, func.count()).group_by(RideReminder.status)
    ).all()
    counts = {status.value.lower(): 0 for status in ReminderStatus}
    for status, n in rows:
        counts[str(status).lower()] = int(n)
    counts["exhausted"] = int(
        db.execute(
            select(func.count())
            .select_from(RideReminder)
            .where(
                RideReminder.status == ReminderStatus.FAILED.value,
                RideReminder.attempt_count >= RideReminder.max_attempts,
            )
        ).scalar_one()
    )
    return counts


def delete_for_booking(db: Session, booking_id: str) -> int:
    result = db.execute(delete(RideReminder).where(RideReminder.booking_id == booking_id))
    return result.rowcount or 0


def transition(
    db: Session,
    reminder: RideReminder,
    new_status: ReminderStatus,
    now: datetime,
    error: str | None = None,
) -> bool:
    """Compare-and-set one reminder's status. Does not commit.

    The write only lands if the row still has the status and attempt count
    this caller read; returns False when a concurrent writer got there first
    (or the row was deleted by a re-schedule).
    """

    validate_reminder_transition(reminder.status, new_status)
    values: dict = {"status": new_status.value, "updated_at": now}
    if new_status == ReminderStatus.SENT:
        values["sent_at"] = now
        values["error_message"] = None
    elif new_status == ReminderStatus.FAILED:
        values["error_message"] = (error or "unknown error")[:ERROR_MESSAGE_MAX]
        values["attempt_count"] = reminder.attempt_count + 1

    result = db.execute(
        update(RideReminder)
        .where(
            RideReminder.id == reminder.id,
            RideReminder.status == reminder.status,
            RideReminder.attempt_count == reminder.attempt_count,
        )
        .values(**values)
    )
    if result.rowcount != 1:
        # In-memory copy may have been updated optimistically; reload on next access.
        db.expire(reminder)
        return False
    return True

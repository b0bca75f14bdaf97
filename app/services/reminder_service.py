"""Keeps a booking's reminder records in line with its current state.

Scheduling always clears every existing record for the booking and writes the
freshly planned set in the same transaction, so repeated calls converge on
the same rows instead of accumulating stale kinds.
"""

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.logging import booking_id_ctx
from app.core.metrics import reminders_cancelled_total, reminders_scheduled_total
from app.core.state_machine import BookingStatus, ReminderStatus
from app.models.booking import Booking
from app.models.ride import Ride
from app.models.ride_reminder import RideReminder
from app.models.user import User
from app.services import reminder_store
from app.services.reminder_policy import notice_hours, plan_reminders, reminder_message

logger = logging.getLogger("smartride.reminders")


class ReminderSchedulingError(RuntimeError):
    """Reminder records could not be written for a booking."""


def _lock_booking(db: Session, booking_id: str) -> str | None:
    return db.execute(
        select(Booking.status).where(Booking.id == booking_id).with_for_update()
    ).scalar_one_or_none()


def schedule_for_booking(db: Session, booking: Booking, now: datetime | None = None) -> list[RideReminder]:
    """Replace the booking's reminders with the set the policy plans right now.

    Bookings that are not CONFIRMED are left alone and get an empty list.
    """

    if booking.status != BookingStatus.CONFIRMED:
        logger.debug("reminder_schedule_skipped booking_id=%s status=%s", booking.id, booking.status)
        return []

    now = now or datetime.now(timezone.utc)
    token = booking_id_ctx.set(booking.id)
    try:
        ride = db.get(Ride, booking.ride_id)
        passenger = db.get(User, booking.passenger_id)
        if ride is None or passenger is None:
            raise ReminderSchedulingError(f"booking {booking.id} has no ride or passenger")

        candidates = plan_reminders(booking.booking_date, ride.departure_date, now)
        logger.info(
            "reminder_schedule booking_id=%s notice_hours=%s ride_time=%s now=%s candidates=%s",
            booking.id,
            notice_hours(booking.booking_date, ride.departure_date),
            ride.departure_date,
            now,
            [c.reminder_type.value for c in candidates],
        )

        try:
            # Row lock on the booking serialises concurrent re-schedules and cancels;
            # the status read under it wins over the caller's copy.
            status = _lock_booking(db, booking.id)
            if status != BookingStatus.CONFIRMED:
                db.rollback()
                logger.info("reminder_schedule_skipped booking_id=%s status=%s reason=changed", booking.id, status)
                return []
            reminder_store.delete_for_booking(db, booking.id)
            reminders = [
                RideReminder(
                    id=str(uuid.uuid4()),
                    booking_id=booking.id,
                    reminder_type=c.reminder_type.value,
                    scheduled_time=c.scheduled_time,
                    status=ReminderStatus.SCHEDULED.value,
                    notification_channel=settings.REMINDER_CHANNEL,
                    recipient_email=passenger.email,
                    message=reminder_message(c.reminder_type, ride.source, ride.destination),
                    attempt_count=0,
                    max_attempts=settings.REMINDER_MAX_ATTEMPTS,
                    created_at=now,
                    updated_at=now,
                )
                for c in candidates
            ]
            db.add_all(reminders)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("reminder_schedule_failed booking_id=%s", booking.id)
            raise ReminderSchedulingError(f"failed to schedule reminders for booking {booking.id}") from exc

        if reminders:
            reminders_scheduled_total.inc(len(reminders))
            logger.info("reminders_created booking_id=%s count=%s", booking.id, len(reminders))
        else:
            logger.info("reminders_not_needed booking_id=%s reason=ride_too_soon", booking.id)
        return reminders
    finally:
        booking_id_ctx.reset(token)


def cancel_for_booking(db: Session, booking_id: str, now: datetime | None = None) -> int:
    """Move the booking's SCHEDULED reminders to CANCELLED. Returns how many moved.

    SENT, FAILED and already CANCELLED records are left as they are.
    """

    now = now or datetime.now(timezone.utc)
    token = booking_id_ctx.set(booking_id)
    try:
        cancelled = 0
        try:
            _lock_booking(db, booking_id)
            for reminder in reminder_store.list_for_booking(db, booking_id):
                if reminder.status != ReminderStatus.SCHEDULED:
                    continue
                if reminder_store.transition(db, reminder, ReminderStatus.CANCELLED, now=now):
                    cancelled += 1
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("reminder_cancel_failed booking_id=%s", booking_id)
            raise ReminderSchedulingError(f"failed to cancel reminders for booking {booking_id}") from exc

        if cancelled:
            reminders_cancelled_total.inc(cancelled)
        logger.info("reminders_cancelled booking_id=%s count=%s", booking_id, cancelled)
        return cancelled
    finally:
        booking_id_ctx.reset(token)


def reminder_statistics(db: Session) -> dict[str, int]:
    return reminder_store.count_by_status(db)


def log_reminder_statistics(db: Session) -> dict[str, int]:
    stats = reminder_store.count_by_status(db)
    logger.info(
        "reminder_statistics scheduled=%s sent=%s failed=%s cancelled=%s exhausted=%s",
        stats["scheduled"],
        stats["sent"],
        stats["failed"],
        stats["cancelled"],
        stats["exhausted"],
    )
    return stats

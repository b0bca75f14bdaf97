"""Sends due ride reminders and retries failed ones.

Each record is delivered and recorded on its own: a gateway error or a lost
status write for one reminder never stops the rest of the batch, and never
propagates to the caller. Status writes are committed per record so a crash
mid-batch does not re-send reminders that already went out.
"""

import logging
from datetime import datetime, timezone
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.logging import booking_id_ctx
from app.core.metrics import reminders_failed_total, reminders_sent_total
from app.core.state_machine import ReminderStatus, can_retry
from app.models.booking import Booking
from app.models.ride import Ride
from app.models.ride_reminder import RideReminder
from app.models.user import User
from app.services import reminder_store
from app.services.reminder_policy import ReminderType, as_utc, reminder_subject

logger = logging.getLogger("smartride.reminders")


class NotificationGateway(Protocol):
    def send(self, recipient: str, subject: str, body: str) -> None: ...


def render_reminder_body(db: Session, reminder: RideReminder) -> str:
    """Plain-text email body from the reminder plus current booking/ride/driver data."""

    booking = db.get(Booking, reminder.booking_id)
    if booking is None:
        raise LookupError(f"booking {reminder.booking_id} not found")
    ride = db.get(Ride, booking.ride_id)
    if ride is None:
        raise LookupError(f"ride {booking.ride_id} not found")
    passenger = db.get(User, booking.passenger_id)
    driver = db.get(User, ride.driver_id)

    departure = as_utc(ride.departure_date)
    passenger_name = (passenger.full_name if passenger else "") or booking.passenger_name
    lines = [
        f"Dear {passenger_name},",
        "",
        reminder.message or "",
        "",
        "Ride Details:",
        f"From: {ride.source}",
        f"To: {ride.destination}",
        f"Date: {departure.strftime('%Y-%m-%d')}",
        f"Time: {departure.strftime('%H:%M')} UTC",
        f"Seats: {booking.seats_booked}",
    ]
    if booking.pickup_point:
        lines.append(f"Pickup: {booking.pickup_point}")
    lines += ["", "Driver Details:"]
    if driver:
        lines += [
            f"Name: {driver.full_name}",
            f"Phone: {driver.phone_number}",
        ]
    lines += [
        f"Vehicle: {ride.vehicle_info}",
        "",
        f"Thank you for using {settings.BRAND_NAME}!",
        "Safe travels!",
    ]
    return "\n".join(lines)


def _describe(exc: Exception) -> str:
    message = str(exc)
    return f"{exc.__class__.__name__}: {message}" if message else exc.__class__.__name__


class ReminderDispatcher:
    """Delivers reminders through a notification gateway."""

    def __init__(self, session_factory, gateway: NotificationGateway, batch_size: int = 500) -> None:
        self.session_factory = session_factory
        self.gateway = gateway
        self.batch_size = batch_size

    def process_due(self, now: datetime | None = None) -> dict:
        """Attempt every SCHEDULED reminder whose fire time is at or before `now`."""

        now = now or datetime.now(timezone.utc)
        return self._run("due", lambda db: reminder_store.find_due(db, now, limit=self.batch_size), now)

    def retry_failed(self, now: datetime | None = None) -> dict:
        """Re-attempt FAILED reminders that have attempts left."""

        now = now or datetime.now(timezone.utc)
        return self._run("retry", lambda db: reminder_store.find_retryable(db, limit=self.batch_size), now)

    def _run(self, phase: str, select_batch, now: datetime) -> dict:
        counts = {"processed": 0, "sent": 0, "failed": 0, "skipped": 0}
        with self.session_factory() as db:
            batch = select_batch(db)
            logger.info("reminder_batch phase=%s found=%s", phase, len(batch))
            for reminder in batch:
                token = booking_id_ctx.set(reminder.booking_id)
                try:
                    outcome = self._dispatch_one(db, reminder, phase, now)
                finally:
                    booking_id_ctx.reset(token)
                counts["processed"] += 1
                counts[outcome] += 1
        logger.info(
            "reminder_batch_done phase=%s processed=%s sent=%s failed=%s skipped=%s",
            phase,
            counts["processed"],
            counts["sent"],
            counts["failed"],
            counts["skipped"],
        )
        return counts

    def _dispatch_one(self, db: Session, reminder: RideReminder, phase: str, now: datetime) -> str:
        reminder_id = reminder.id
        booking_id = reminder.booking_id
        attempt = reminder.attempt_count + 1
        try:
            subject = reminder_subject(ReminderType(reminder.reminder_type), settings.BRAND_NAME)
            body = render_reminder_body(db, reminder)
            self.gateway.send(reminder.recipient_email, subject, body)
        except Exception as exc:
            if isinstance(exc, SQLAlchemyError):
                db.rollback()
            logger.warning(
                "reminder_send_failed id=%s booking_id=%s phase=%s attempt=%s error=%s",
                reminder_id,
                booking_id,
                phase,
                attempt,
                exc,
            )
            return self._record(db, reminder, ReminderStatus.FAILED, phase, now, error=_describe(exc))
        return self._record(db, reminder, ReminderStatus.SENT, phase, now)

    def _record(
        self,
        db: Session,
        reminder: RideReminder,
        status: ReminderStatus,
        phase: str,
        now: datetime,
        error: str | None = None,
    ) -> str:
        reminder_id = reminder.id
        try:
            applied = reminder_store.transition(db, reminder, status, now=now, error=error)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception("reminder_status_write_failed id=%s status=%s", reminder_id, status.value)
            return "skipped"
        if not applied:
            logger.warning("reminder_changed_concurrently id=%s wanted=%s", reminder_id, status.value)
            return "skipped"

        if status == ReminderStatus.SENT:
            reminders_sent_total.labels(phase=phase).inc()
            logger.info("reminder_sent id=%s booking_id=%s phase=%s", reminder_id, reminder.booking_id, phase)
            return "sent"
        reminders_failed_total.labels(phase=phase).inc()
        if not can_retry(reminder.status, reminder.attempt_count, reminder.max_attempts):
            logger.error(
                "reminder_attempts_exhausted id=%s booking_id=%s attempts=%s",
                reminder_id,
                reminder.booking_id,
                reminder.attempt_count,
            )
        return "failed"

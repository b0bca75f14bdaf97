"""Decides which ride reminders a booking gets and when each one fires.

Everything here is a pure function of its arguments: no database access and no
clock reads, so callers always pass ``now`` explicitly.

The branch is picked from how much notice the passenger gave (booking time to
departure), not from how far away departure is when the rule is evaluated:

* under 1 hour of notice: one reminder 30 minutes before departure
* 1 to 24 hours: one reminder 1 hour before departure
* over 24 hours: one reminder 24 hours before and a final one 1 hour before

Notice is measured in whole hours, truncated toward zero, so 24h59m still
counts as 24. A candidate whose fire time has already passed is dropped rather
than sent late. The sub-hour branch alone tolerates a fire time up to five
minutes in the past, which covers a booking made right at the 30 minute mark.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum


class ReminderType(str, Enum):
    THIRTY_MINUTES_BEFORE = "THIRTY_MINUTES_BEFORE"
    ONE_HOUR_BEFORE = "ONE_HOUR_BEFORE"
    TWENTY_FOUR_HOURS_BEFORE = "TWENTY_FOUR_HOURS_BEFORE"
    ONE_HOUR_BEFORE_FINAL = "ONE_HOUR_BEFORE_FINAL"


SHORT_NOTICE_GRACE = timedelta(minutes=5)

# reminder type -> (lead time before departure, subject line, "scheduled ..." phrase)
_REMINDER_TABLE: dict[ReminderType, tuple[timedelta, str, str]] = {
    ReminderType.THIRTY_MINUTES_BEFORE: (
        timedelta(minutes=30),
        "Ride Reminder: Your ride starts in 30 minutes",
        "in 30 minutes",
    ),
    ReminderType.ONE_HOUR_BEFORE: (
        timedelta(hours=1),
        "Ride Reminder: Your ride starts in 1 hour",
        "in 1 hour",
    ),
    ReminderType.TWENTY_FOUR_HOURS_BEFORE: (
        timedelta(hours=24),
        "Ride Reminder: Your ride is tomorrow",
        "in 24 hours",
    ),
    ReminderType.ONE_HOUR_BEFORE_FINAL: (
        timedelta(hours=1),
        "Final Reminder: Your ride starts in 1 hour",
        "in 1 hour",
    ),
}


@dataclass(frozen=True)
class ReminderCandidate:
    reminder_type: ReminderType
    scheduled_time: datetime


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (e.g. read back from SQLite) as UTC."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def notice_hours(booking_time: datetime, ride_time: datetime) -> int:
    """Whole hours between booking and departure, truncated toward zero."""

    delta = as_utc(ride_time) - as_utc(booking_time)
    hours = abs(delta) // timedelta(hours=1)
    return hours if delta >= timedelta(0) else -hours


def reminder_types_for_notice(hours: int) -> tuple[ReminderType, ...]:
    if hours < 1:
        return (ReminderType.THIRTY_MINUTES_BEFORE,)
    if hours <= 24:
        return (ReminderType.ONE_HOUR_BEFORE,)
    return (ReminderType.TWENTY_FOUR_HOURS_BEFORE, ReminderType.ONE_HOUR_BEFORE_FINAL)


def plan_reminders(booking_time: datetime, ride_time: datetime, now: datetime) -> list[ReminderCandidate]:
    """Return the reminders to create for a booking, possibly none."""

    ride_time = as_utc(ride_time)
    now = as_utc(now)
    hours = notice_hours(booking_time, ride_time)

    earliest = now - SHORT_NOTICE_GRACE if hours < 1 else now
    candidates = []
    for reminder_type in reminder_types_for_notice(hours):
        scheduled_time = ride_time - reminder_lead_time(reminder_type)
        if scheduled_time > earliest:
            candidates.append(ReminderCandidate(reminder_type, scheduled_time))
    return candidates


def reminder_lead_time(reminder_type: ReminderType) -> timedelta:
    return _REMINDER_TABLE[ReminderType(reminder_type)][0]


def reminder_subject(reminder_type: ReminderType, brand: str) -> str:
    return f"{_REMINDER_TABLE[ReminderType(reminder_type)][1]} - {brand}"


def reminder_message(reminder_type: ReminderType, source: str, destination: str) -> str:
    phrase = _REMINDER_TABLE[ReminderType(reminder_type)][2]
    return f"Your ride from {source} to {destination} is scheduled {phrase}. Please be ready!"

"""Booking and reminder status values and the transitions allowed between them."""

from enum import Enum


class BookingStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PAID = "PAID"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class ReminderStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    SENT = "SENT"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


BOOKING_TRANSITIONS: dict[str, set[str]] = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.PAID, BookingStatus.CANCELLED, BookingStatus.COMPLETED},
    BookingStatus.PAID: {BookingStatus.COMPLETED, BookingStatus.CANCELLED},
    BookingStatus.CANCELLED: set(),
    BookingStatus.COMPLETED: set(),
}

# FAILED -> FAILED is a further unsuccessful retry.
REMINDER_TRANSITIONS: dict[str, set[str]] = {
    ReminderStatus.SCHEDULED: {ReminderStatus.SENT, ReminderStatus.FAILED, ReminderStatus.CANCELLED},
    ReminderStatus.FAILED: {ReminderStatus.SENT, ReminderStatus.FAILED},
    ReminderStatus.SENT: set(),
    ReminderStatus.CANCELLED: set(),
}


class InvalidBookingTransition(ValueError):
    pass


class InvalidReminderTransition(ValueError):
    pass


def validate_booking_transition(current: str, new: str) -> None:
    """Raise when a booking may not move from `current` to `new`."""

    if new not in BOOKING_TRANSITIONS.get(current, set()):
        raise InvalidBookingTransition(f"Invalid booking transition: {current} -> {new}")


def validate_reminder_transition(current: str, new: str) -> None:
    """Raise when a reminder may not move from `current` to `new`."""

    if new not in REMINDER_TRANSITIONS.get(current, set()):
        raise InvalidReminderTransition(f"Invalid reminder transition: {current} -> {new}")


def can_retry(status: str, attempt_count: int, max_attempts: int) -> bool:
    return status == ReminderStatus.FAILED and attempt_count < max_attempts

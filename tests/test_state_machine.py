"""Allowed status transitions for bookings and reminders."""

import pytest

from app.core.state_machine import (
    BookingStatus,
    InvalidBookingTransition,
    InvalidReminderTransition,
    ReminderStatus,
    can_retry,
    validate_booking_transition,
    validate_reminder_transition,
)


@pytest.mark.parametrize(
    "current, new",
    [
        ("PENDING", "CONFIRMED"),
        ("PENDING", "CANCELLED"),
        ("CONFIRMED", "PAID"),
        ("CONFIRMED", "CANCELLED"),
        ("PAID", "COMPLETED"),
    ],
)
def test_booking_transitions_allowed(current, new):
    validate_booking_transition(current, new)


@pytest.mark.parametrize(
    "current, new",
    [
        ("PENDING", "PAID"),
        ("CANCELLED", "CONFIRMED"),
        ("COMPLETED", "CANCELLED"),
    ],
)
def test_booking_transitions_rejected(current, new):
    with pytest.raises(InvalidBookingTransition):
        validate_booking_transition(current, new)


def test_reminder_scheduled_can_reach_every_outcome():
    for new in (ReminderStatus.SENT, ReminderStatus.FAILED, ReminderStatus.CANCELLED):
        validate_reminder_transition(ReminderStatus.SCHEDULED, new)


def test_failed_reminder_can_be_retried_but_not_cancelled():
    validate_reminder_transition("FAILED", "SENT")
    validate_reminder_transition("FAILED", "FAILED")
    with pytest.raises(InvalidReminderTransition):
        validate_reminder_transition("FAILED", "CANCELLED")


@pytest.mark.parametrize("terminal", ["SENT", "CANCELLED"])
def test_terminal_reminder_states(terminal):
    for new in ReminderStatus:
        with pytest.raises(InvalidReminderTransition):
            validate_reminder_transition(terminal, new)


def test_invalid_transitions_are_value_errors():
    """Route handlers map ValueError to 400."""
    with pytest.raises(ValueError):
        validate_booking_transition(BookingStatus.CANCELLED, BookingStatus.PAID)


def test_can_retry():
    assert can_retry("FAILED", 1, 3)
    assert not can_retry("FAILED", 3, 3)
    assert not can_retry("SCHEDULED", 0, 3)
    assert not can_retry("SENT", 1, 3)

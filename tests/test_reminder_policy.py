"""Reminder planning: notice branches, boundaries and the past-time filter."""

from datetime import datetime, timedelta, timezone

import pytest

from app.services.reminder_policy import (
    ReminderType,
    SHORT_NOTICE_GRACE,
    notice_hours,
    plan_reminders,
    reminder_lead_time,
    reminder_message,
    reminder_subject,
    reminder_types_for_notice,
)

T = datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc)


def _plan(notice: timedelta, now: datetime = T):
    return [(c.reminder_type, c.scheduled_time) for c in plan_reminders(T, T + notice, now)]


def test_under_one_hour_notice_gets_thirty_minute_reminder():
    """45 minutes of notice: a single reminder 30 minutes before departure."""
    assert _plan(timedelta(minutes=45)) == [
        (ReminderType.THIRTY_MINUTES_BEFORE, T + timedelta(minutes=15)),
    ]


def test_same_day_notice_gets_one_hour_reminder():
    assert _plan(timedelta(hours=5)) == [(ReminderType.ONE_HOUR_BEFORE, T + timedelta(hours=4))]


def test_long_notice_gets_day_before_and_final_reminders():
    """48 hours of notice produces both reminders, earliest first."""
    assert _plan(timedelta(hours=48)) == [
        (ReminderType.TWENTY_FOUR_HOURS_BEFORE, T + timedelta(hours=24)),
        (ReminderType.ONE_HOUR_BEFORE_FINAL, T + timedelta(hours=47)),
    ]


@pytest.mark.parametrize(
    "notice, expected",
    [
        (timedelta(minutes=59), 0),
        (timedelta(hours=1), 1),
        (timedelta(hours=24), 24),
        (timedelta(hours=24, minutes=59), 24),
        (timedelta(hours=25), 25),
        (timedelta(minutes=-90), -1),
    ],
)
def test_notice_hours_truncates_toward_zero(notice, expected):
    assert notice_hours(T, T + notice) == expected


@pytest.mark.parametrize(
    "hours, expected",
    [
        (-3, (ReminderType.THIRTY_MINUTES_BEFORE,)),
        (0, (ReminderType.THIRTY_MINUTES_BEFORE,)),
        (1, (ReminderType.ONE_HOUR_BEFORE,)),
        (24, (ReminderType.ONE_HOUR_BEFORE,)),
        (25, (ReminderType.TWENTY_FOUR_HOURS_BEFORE, ReminderType.ONE_HOUR_BEFORE_FINAL)),
    ],
)
def test_branch_boundaries(hours, expected):
    assert reminder_types_for_notice(hours) == expected


def test_exactly_24_hours_is_a_single_reminder():
    assert _plan(timedelta(hours=24)) == [(ReminderType.ONE_HOUR_BEFORE, T + timedelta(hours=23))]


def test_24_hours_59_minutes_is_still_a_single_reminder():
    planned = _plan(timedelta(hours=24, minutes=59))
    assert [kind for kind, _ in planned] == [ReminderType.ONE_HOUR_BEFORE]


def test_25_hours_gets_two_reminders():
    planned = _plan(timedelta(hours=25))
    assert [kind for kind, _ in planned] == [
        ReminderType.TWENTY_FOUR_HOURS_BEFORE,
        ReminderType.ONE_HOUR_BEFORE_FINAL,
    ]


def test_exactly_one_hour_notice_fires_now_and_is_dropped():
    """The 1h reminder would fire at the booking instant, which is not strictly in the future."""
    assert _plan(timedelta(hours=1)) == []


def test_reminders_already_in_the_past_are_dropped():
    """20h of notice re-evaluated 40 minutes before departure: the 1h mark has passed."""
    ride = T + timedelta(hours=20)
    assert plan_reminders(T, ride, ride - timedelta(minutes=40)) == []


def test_long_notice_keeps_only_the_remaining_reminder():
    ride = T + timedelta(hours=48)
    planned = plan_reminders(T, ride, ride - timedelta(hours=2))
    assert [(c.reminder_type, c.scheduled_time) for c in planned] == [
        (ReminderType.ONE_HOUR_BEFORE_FINAL, ride - timedelta(hours=1)),
    ]


def test_short_notice_tolerates_a_recently_passed_fire_time():
    """Booked right at the 30 minute mark and evaluated a few minutes later."""
    ride = T + timedelta(minutes=30)
    planned = plan_reminders(T, ride, T + timedelta(minutes=4))
    assert [(c.reminder_type, c.scheduled_time) for c in planned] == [
        (ReminderType.THIRTY_MINUTES_BEFORE, T),
    ]


def test_short_notice_grace_window_is_exclusive():
    ride = T + timedelta(minutes=30)
    assert plan_reminders(T, ride, T + SHORT_NOTICE_GRACE) == []


def test_same_day_branch_has_no_grace_window():
    ride = T + timedelta(hours=3)
    assert plan_reminders(T, ride, ride - timedelta(hours=1) + timedelta(minutes=1)) == []


def test_ride_before_booking_time_falls_into_short_branch_and_is_filtered():
    assert plan_reminders(T, T - timedelta(hours=2), T) == []


def test_naive_datetimes_are_read_as_utc():
    naive_booking = T.replace(tzinfo=None)
    naive_ride = (T + timedelta(hours=5)).replace(tzinfo=None)
    planned = plan_reminders(naive_booking, naive_ride, T)
    assert planned[0].scheduled_time == T + timedelta(hours=4)
    assert planned[0].scheduled_time.tzinfo is not None


def test_other_offsets_are_normalised():
    ist = timezone(timedelta(hours=5, minutes=30))
    ride = (T + timedelta(hours=5)).astimezone(ist)
    planned = plan_reminders(T.astimezone(ist), ride, T)
    assert planned[0].scheduled_time == T + timedelta(hours=4)


@pytest.mark.parametrize("reminder_type", list(ReminderType))
def test_every_type_has_lead_subject_and_message(reminder_type):
    assert reminder_lead_time(reminder_type) > timedelta(0)
    assert reminder_subject(reminder_type, "SmartRide").endswith(" - SmartRide")
    message = reminder_message(reminder_type, "Pune", "Mumbai")
    assert message.startswith("Your ride from Pune to Mumbai is scheduled in ")
    assert message.endswith("Please be ready!")


def test_subject_and_message_wording():
    assert reminder_subject(ReminderType.TWENTY_FOUR_HOURS_BEFORE, "SmartRide") == (
        "Ride Reminder: Your ride is tomorrow - SmartRide"
    )
    assert reminder_subject(ReminderType.ONE_HOUR_BEFORE_FINAL, "SmartRide") == (
        "Final Reminder: Your ride starts in 1 hour - SmartRide"
    )
    assert reminder_message(ReminderType.THIRTY_MINUTES_BEFORE, "A", "B") == (
        "Your ride from A to B is scheduled in 30 minutes. Please be ready!"
    )


def test_reminder_type_accepts_stored_string_value():
    assert reminder_lead_time("ONE_HOUR_BEFORE_FINAL") == timedelta(hours=1)


def test_booking_thirty_minutes_before_departure_gets_immediate_reminder():
    assert _plan(timedelta(minutes=30)) == [(ReminderType.THIRTY_MINUTES_BEFORE, T)]


def test_booking_two_hours_before_departure():
    assert _plan(timedelta(hours=2)) == [(ReminderType.ONE_HOUR_BEFORE, T + timedelta(hours=1))]

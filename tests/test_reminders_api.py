"""HTTP surface: booking confirmation through to reminder queries and admin actions."""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_reminder_dispatcher
from app.db.session import get_db
from app.main import app
from app.services import email_service
from app.services.reminder_dispatcher import ReminderDispatcher
from tests.helpers import FakeGateway, access_token


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def client(session_factory, gateway, monkeypatch):
    monkeypatch.setattr(email_service, "send_email", lambda to, subject, body: None)

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_reminder_dispatcher] = lambda: ReminderDispatcher(session_factory, gateway)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def _auth(user):
    return {"Authorization": f"Bearer {access_token(user.id)}"}


@pytest.fixture
def people(make_user):
    return {
        "driver": make_user("driver", first_name="Dana", last_name="Driver"),
        "passenger": make_user("passenger", email="pat@example.com"),
        "admin": make_user("admin"),
        "other": make_user("passenger"),
    }


def _confirmed_booking(client, people, departure):
    ride = client.post(
        "/api/v1/rides",
        json={
            "source": "Pune",
            "destination": "Mumbai",
            "departureDate": departure.isoformat(),
            "totalSeats": 3,
            "pricePerSeat": "10.00",
            "vehicleType": "Sedan",
            "vehicleNumber": "MH12AB1234",
        },
        headers=_auth(people["driver"]),
    )
    assert ride.status_code == 200, ride.text
    ride_id = ride.json()["id"]

    booking = client.post(
        "/api/v1/bookings",
        json={"rideId": ride_id, "seatsBooked": 1, "passengerName": "Pat Rider", "passengerPhone": "+15550001"},
        headers=_auth(people["passenger"]),
    )
    assert booking.status_code == 200, booking.text
    booking_id = booking.json()["id"]

    confirmed = client.post(
        f"/api/v1/driver/rides/{ride_id}/bookings/{booking_id}/confirm",
        headers=_auth(people["driver"]),
    )
    assert confirmed.status_code == 200, confirmed.text
    assert confirmed.json()["status"] == "CONFIRMED"
    return ride_id, booking_id


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_requires_token(client):
    assert client.get("/api/v1/reminders/statistics").status_code == 401


def test_confirmed_booking_has_reminders(client, people):
    _, booking_id = _confirmed_booking(client, people, datetime.now(timezone.utc) + timedelta(days=2))

    r = client.get(f"/api/v1/reminders/booking/{booking_id}", headers=_auth(people["passenger"]))

    assert r.status_code == 200
    body = r.json()
    assert body["count"] == 2
    assert [x["reminderType"] for x in body["reminders"]] == ["TWENTY_FOUR_HOURS_BEFORE", "ONE_HOUR_BEFORE_FINAL"]
    assert all(x["status"] == "SCHEDULED" and x["recipientEmail"] == "pat@example.com" for x in body["reminders"])


def test_other_passengers_cannot_see_reminders(client, people):
    _, booking_id = _confirmed_booking(client, people, datetime.now(timezone.utc) + timedelta(days=2))

    r = client.get(f"/api/v1/reminders/booking/{booking_id}", headers=_auth(people["other"]))

    assert r.status_code == 403


def test_driver_and_passenger_listings(client, people):
    _confirmed_booking(client, people, datetime.now(timezone.utc) + timedelta(hours=5))

    mine = client.get(f"/api/v1/reminders/passenger/{people['passenger'].id}", headers=_auth(people["passenger"]))
    driven = client.get(f"/api/v1/reminders/driver/{people['driver'].id}", headers=_auth(people["driver"]))
    nosy = client.get(f"/api/v1/reminders/passenger/{people['passenger'].id}", headers=_auth(people["other"]))

    assert mine.json()["count"] == 1
    assert driven.json()["count"] == 1
    assert nosy.status_code == 403


def test_cancel_endpoint_and_statistics(client, people):
    _, booking_id = _confirmed_booking(client, people, datetime.now(timezone.utc) + timedelta(days=2))

    r = client.delete(f"/api/v1/reminders/booking/{booking_id}", headers=_auth(people["passenger"]))
    assert r.json() == {"bookingId": booking_id, "cancelled": 2}

    stats = client.get("/api/v1/reminders/statistics", headers=_auth(people["admin"]))
    assert stats.json() == {"scheduled": 0, "sent": 0, "failed": 0, "cancelled": 2, "exhausted": 0}


def test_statistics_are_admin_only(client, people):
    r = client.get("/api/v1/reminders/statistics", headers=_auth(people["passenger"]))
    assert r.status_code == 403


def test_passenger_cancelling_booking_cancels_reminders(client, people):
    _, booking_id = _confirmed_booking(client, people, datetime.now(timezone.utc) + timedelta(days=2))

    r = client.post(f"/api/v1/bookings/{booking_id}/cancel", headers=_auth(people["passenger"]))
    assert r.json()["status"] == "CANCELLED"

    listed = client.get(f"/api/v1/reminders/booking/{booking_id}", headers=_auth(people["admin"])).json()
    assert {x["status"] for x in listed["reminders"]} == {"CANCELLED"}


def test_manual_reschedule_is_idempotent(client, people):
    _, booking_id = _confirmed_booking(client, people, datetime.now(timezone.utc) + timedelta(days=2))

    r = client.post(f"/api/v1/reminders/schedule/{booking_id}", headers=_auth(people["admin"]))

    assert r.status_code == 200
    assert r.json()["count"] == 2
    listed = client.get(f"/api/v1/reminders/booking/{booking_id}", headers=_auth(people["admin"])).json()
    assert listed["count"] == 2


def test_admin_can_trigger_processing(client, people, gateway):
    _confirmed_booking(client, people, datetime.now(timezone.utc) + timedelta(days=2))

    due = client.post("/api/v1/reminders/process-due", headers=_auth(people["admin"]))
    retry = client.post("/api/v1/reminders/retry-failed", headers=_auth(people["admin"]))

    assert due.json() == {"processed": 0, "sent": 0, "failed": 0, "skipped": 0}
    assert retry.json()["processed"] == 0
    assert gateway.attempts == []
    assert client.post("/api/v1/reminders/process-due", headers=_auth(people["driver"])).status_code == 403


def test_recipient_lookup(client, people):
    _confirmed_booking(client, people, datetime.now(timezone.utc) + timedelta(hours=5))

    r = client.get("/api/v1/reminders/recipient", params={"email": "pat@example.com"}, headers=_auth(people["admin"]))

    assert r.json()["count"] == 1
    assert r.json()["reminders"][0]["reminderType"] == "ONE_HOUR_BEFORE"


def test_send_test_email(client, people, monkeypatch):
    from app.api.v1.routes import reminders as reminder_routes

    sent = []
    monkeypatch.setattr(reminder_routes, "send_email", lambda to, subject, body: sent.append(to))

    r = client.post("/api/v1/reminders/test-email", json={"to": "ops@smartride.local"}, headers=_auth(people["admin"]))

    assert r.json() == {"success": True, "to": "ops@smartride.local"}
    assert sent == ["ops@smartride.local"]


def test_unknown_booking_is_404(client, people):
    r = client.get("/api/v1/reminders/booking/missing", headers=_auth(people["admin"]))
    assert r.status_code == 404


def test_only_admins_can_reschedule(client, people):
    """Rescheduling replaces sent history, so booking parties may not trigger it."""
    _, booking_id = _confirmed_booking(client, people, datetime.now(timezone.utc) + timedelta(minutes=30))

    for who in ("passenger", "driver"):
        r = client.post(f"/api/v1/reminders/schedule/{booking_id}", headers=_auth(people[who]))
        assert r.status_code == 403

    listed = client.get(f"/api/v1/reminders/booking/{booking_id}", headers=_auth(people["admin"])).json()
    assert listed["count"] == 1


def test_reminder_exists(client, people):
    _, booking_id = _confirmed_booking(client, people, datetime.now(timezone.utc) + timedelta(hours=5))
    url = f"/api/v1/reminders/booking/{booking_id}/exists"

    yes = client.get(url, params={"reminderType": "ONE_HOUR_BEFORE"}, headers=_auth(people["passenger"]))
    no = client.get(url, params={"reminderType": "TWENTY_FOUR_HOURS_BEFORE"}, headers=_auth(people["passenger"]))
    bad = client.get(url, params={"reminderType": "WEEK_BEFORE"}, headers=_auth(people["passenger"]))

    assert yes.json() == {"bookingId": booking_id, "reminderType": "ONE_HOUR_BEFORE", "exists": True}
    assert no.json()["exists"] is False
    assert bad.status_code == 422


def test_window_and_overdue_are_admin_queries(client, people):
    now = datetime.now(timezone.utc)
    _confirmed_booking(client, people, now + timedelta(hours=5))
    admin = _auth(people["admin"])

    inside = client.get(
        "/api/v1/reminders/window",
        params={"start": (now + timedelta(hours=3)).isoformat(), "end": (now + timedelta(hours=5)).isoformat()},
        headers=admin,
    )
    outside = client.get(
        "/api/v1/reminders/window",
        params={"start": (now + timedelta(hours=5)).isoformat(), "end": (now + timedelta(hours=6)).isoformat()},
        headers=admin,
    )
    backwards = client.get(
        "/api/v1/reminders/window",
        params={"start": (now + timedelta(hours=6)).isoformat(), "end": now.isoformat()},
        headers=admin,
    )

    assert inside.json()["count"] == 1
    assert outside.json()["count"] == 0
    assert backwards.status_code == 400
    assert client.get("/api/v1/reminders/overdue", headers=admin).json()["count"] == 0
    assert client.get("/api/v1/reminders/overdue", headers=_auth(people["passenger"])).status_code == 403

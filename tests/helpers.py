"""Test doubles and time helpers shared by the test modules."""

from datetime import datetime, timedelta, timezone

from jose import jwt

from app.core.config import settings
from app.core.security import ALGO

T0 = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def hours(n: float) -> timedelta:
    return timedelta(hours=n)


def access_token(user_id: str, minutes: int = 30) -> str:
    """Bearer token shaped like the ones the identity service issues."""
    exp = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    return jwt.encode({"sub": user_id, "type": "access", "exp": exp}, settings.SECRET_KEY, algorithm=ALGO)


class FakeGateway:
    """Records deliveries; raises for recipients listed in `fail_for` (or all, with fail_all)."""

    def __init__(self, fail_for=(), fail_all=False, error=None):
        self.fail_for = set(fail_for)
        self.fail_all = fail_all
        self.error = error or ConnectionError("smtp down")
        self.sent = []
        self.attempts = []

    def send(self, recipient, subject, body):
        self.attempts.append(recipient)
        if self.fail_all or recipient in self.fail_for:
            raise self.error
        self.sent.append((recipient, subject, body))

"""Prometheus counters for the reminder engine."""

from prometheus_client import Counter, generate_latest
from starlette.responses import Response


reminders_scheduled_total = Counter("reminders_scheduled_total", "Reminder records created by scheduling")
reminders_cancelled_total = Counter("reminders_cancelled_total", "Reminder records moved to CANCELLED")
reminders_sent_total = Counter("reminders_sent_total", "Reminders delivered", ["phase"])
reminders_failed_total = Counter("reminders_failed_total", "Reminder delivery failures", ["phase"])
reminder_trigger_errors_total = Counter(
    "reminder_trigger_errors_total",
    "Periodic reminder job cycles that raised",
    ["job"],
)


def metrics_response() -> Response:
    """Expose all registered Prometheus metrics in text format."""

    return Response(content=generate_latest(), media_type="text/plain")

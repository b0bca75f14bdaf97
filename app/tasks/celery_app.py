from urllib.parse import urlparse, urlunparse, parse_qs, urlencode

from celery import Celery
from celery.signals import setup_logging
from app.core.config import settings


def _redis_url_for_celery(url: str) -> str:
    """Celery requires ssl_cert_reqs for rediss:// (e.g. Upstash TLS)."""
    if not url or not url.strip().lower().startswith("rediss://"):
        return url
    parsed = urlparse(url)
    qs = parse_qs(parsed.query)
    if "ssl_cert_reqs" not in qs:
        qs["ssl_cert_reqs"] = ["CERT_NONE"]
        new_query = urlencode(qs, doseq=True)
        return urlunparse(parsed._replace(query=new_query))
    return url


_redis_url = _redis_url_for_celery(settings.REDIS_URL)

celery = Celery(
    "smartride",
    broker=_redis_url,
    backend=_redis_url,
    include=["app.tasks.jobs"],
)

celery.conf.timezone = "UTC"


@setup_logging.connect
def on_setup_logging(**kwargs):
    from app.core.logging import configure_logging
    configure_logging()


def build_beat_schedule() -> dict:
    schedule = {
        "process-email-queue-every-2-minutes": {
            "task": "app.tasks.jobs.process_email_queue",
            "schedule": 120.0,
            "kwargs": {"limit": 50},
        },
    }
    # Only one runner may own the reminder jobs; the API process owns them in "inprocess" mode.
    if settings.REMINDER_SCHEDULING_ENABLED and settings.REMINDER_TRIGGER == "celery":
        schedule.update({
            "process-due-reminders": {
                "task": "app.tasks.jobs.process_due_reminders",
                "schedule": settings.REMINDER_DUE_INTERVAL_SECONDS,
            },
            "retry-failed-reminders": {
                "task": "app.tasks.jobs.retry_failed_reminders",
                "schedule": settings.REMINDER_RETRY_INTERVAL_SECONDS,
            },
            "log-reminder-statistics": {
                "task": "app.tasks.jobs.log_reminder_statistics",
                "schedule": settings.REMINDER_STATS_INTERVAL_SECONDS,
            },
        })
    return schedule


celery.conf.beat_schedule = build_beat_schedule()

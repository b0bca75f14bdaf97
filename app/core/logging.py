"""Structured JSON logging with booking context."""

import logging
import sys
from contextvars import ContextVar

from pythonjsonlogger.json import JsonFormatter

from app.core.config import settings


booking_id_ctx: ContextVar[str] = ContextVar("booking_id", default="")


class ContextFilter(logging.Filter):
    """Stamp every record with the app name and the booking being worked on."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.service_name = settings.APP_NAME
        record.booking_id = booking_id_ctx.get()
        return True


def configure_logging() -> None:
    """Configure the root logger once per process (API, worker or beat)."""

    handler = logging.StreamHandler(sys.stdout)
    context_filter = ContextFilter()
    handler.addFilter(context_filter)
    handler.setFormatter(
        JsonFormatter("%(asctime)s %(levelname)s %(name)s %(service_name)s %(booking_id)s %(message)s")
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(settings.LOG_LEVEL)


logger = logging.getLogger("smartride")

"""In-process periodic runner for the reminder jobs.

Each job gets its own daemon thread and fixed-rate schedule, so a slow retry
pass never delays due-reminder delivery. Exceptions from a job are logged and
counted; the loop keeps going on its next tick.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable

from app.core.metrics import reminder_trigger_errors_total

logger = logging.getLogger("smartride.trigger")


@dataclass(frozen=True)
class PeriodicJob:
    name: str
    func: Callable[[], object]
    interval: float


class ReminderTrigger:
    def __init__(
        self,
        dispatcher,
        due_interval: float = 300.0,
        retry_interval: float = 1800.0,
        stats_job: Callable[[], object] | None = None,
        stats_interval: float = 3600.0,
    ) -> None:
        self.jobs = [
            PeriodicJob("process_due", dispatcher.process_due, due_interval),
            PeriodicJob("retry_failed", dispatcher.retry_failed, retry_interval),
        ]
        if stats_job is not None:
            self.jobs.append(PeriodicJob("reminder_statistics", stats_job, stats_interval))
        self._stop = threading.Event()
        self._threads: list[threading.Thread] = []

    @property
    def running(self) -> bool:
        return any(t.is_alive() for t in self._threads)

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._threads = [
            threading.Thread(target=self._loop, args=(job,), name=f"reminder-{job.name}", daemon=True)
            for job in self.jobs
        ]
        for t in self._threads:
            t.start()
        logger.info("reminder_trigger_started jobs=%s", {job.name: job.interval for job in self.jobs})

    def stop(self, timeout: float = 10.0) -> None:
        self._stop.set()
        for t in self._threads:
            t.join(timeout)
        self._threads = []
        logger.info("reminder_trigger_stopped")

    def run_once(self, job: PeriodicJob) -> None:
        try:
            result = job.func()
            logger.debug("reminder_job_done job=%s result=%s", job.name, result)
        except Exception:
            reminder_trigger_errors_total.labels(job=job.name).inc()
            logger.exception("reminder_job_failed job=%s", job.name)

    def _loop(self, job: PeriodicJob) -> None:
        next_run = time.monotonic()
        while not self._stop.is_set():
            self.run_once(job)
            next_run += job.interval
            delay = next_run - time.monotonic()
            if delay < 0:
                # Overran a whole interval; start counting again from now.
                next_run = time.monotonic()
                delay = 0
            if self._stop.wait(delay):
                break


def build_reminder_trigger() -> ReminderTrigger:
    from app.core.config import settings
    from app.db.session import SessionLocal
    from app.services.email_service import EmailGateway
    from app.services.reminder_dispatcher import ReminderDispatcher
    from app.tasks.worker_jobs import log_reminder_statistics

    return ReminderTrigger(
        ReminderDispatcher(SessionLocal, EmailGateway()),
        due_interval=settings.REMINDER_DUE_INTERVAL_SECONDS,
        retry_interval=settings.REMINDER_RETRY_INTERVAL_SECONDS,
        stats_job=log_reminder_statistics,
        stats_interval=settings.REMINDER_STATS_INTERVAL_SECONDS,
    )

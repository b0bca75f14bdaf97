from sqlalchemy.orm import Session
from sqlalchemy.exc import ProgrammingError
from app.db.session import SessionLocal
from app.services.email_service import EmailGateway, process_pending_emails
from app.services.reminder_dispatcher import ReminderDispatcher
from app.services.reminder_service import log_reminder_statistics as _log_stats


def _dispatcher() -> ReminderDispatcher:
    return ReminderDispatcher(SessionLocal, EmailGateway())


def process_due_reminders() -> dict:
    try:
        return _dispatcher().process_due()
    except ProgrammingError:
        # DB not migrated yet; don't crash the worker.
        return {"skipped": True, "reason": "missing_tables"}


def retry_failed_reminders() -> dict:
    try:
        return _dispatcher().retry_failed()
    except ProgrammingError:
        return {"skipped": True, "reason": "missing_tables"}


def log_reminder_statistics() -> dict:
    db: Session = SessionLocal()
    try:
        try:
            return _log_stats(db)
        except ProgrammingError:
            db.rollback()
            return {"skipped": True, "reason": "missing_tables"}
    finally:
        db.close()


def process_email_queue(limit: int = 50) -> dict:
    """Process queued/failed booking emails (retry send). Run periodically via Celery beat."""
    db: Session = SessionLocal()
    try:
        try:
            return process_pending_emails(db, limit=limit)
        except ProgrammingError:
            db.rollback()
            return {"skipped": True, "reason": "missing_tables"}
    finally:
        db.close()

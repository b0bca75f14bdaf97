from app.tasks.celery_app import celery
from app.tasks import worker_jobs

@celery.task(name="app.tasks.jobs.process_due_reminders")
def process_due_reminders():
    return worker_jobs.process_due_reminders()

@celery.task(name="app.tasks.jobs.retry_failed_reminders")
def retry_failed_reminders():
    return worker_jobs.retry_failed_reminders()

@celery.task(name="app.tasks.jobs.log_reminder_statistics")
def log_reminder_statistics():
    return worker_jobs.log_reminder_statistics()


@celery.task(name="app.tasks.jobs.process_email_queue")
def process_email_queue(limit: int = 50):
    return worker_jobs.process_email_queue(limit=limit)

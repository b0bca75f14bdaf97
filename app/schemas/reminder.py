from datetime import datetime
from pydantic import BaseModel
from typing import List, Optional

class ReminderOut(BaseModel):
    id: str
    bookingId: str
    reminderType: str
    scheduledTime: datetime
    status: str
    channel: str
    recipientEmail: str
    message: Optional[str] = None
    sentAt: Optional[datetime] = None
    errorMessage: Optional[str] = None
    attemptCount: int
    maxAttempts: int

    @classmethod
    def from_reminder(cls, r) -> "ReminderOut":
        return cls(
            id=r.id,
            bookingId=r.booking_id,
            reminderType=r.reminder_type,
            scheduledTime=r.scheduled_time,
            status=r.status,
            channel=r.notification_channel,
            recipientEmail=r.recipient_email,
            message=r.message,
            sentAt=r.sent_at,
            errorMessage=r.error_message,
            attemptCount=r.attempt_count,
            maxAttempts=r.max_attempts,
        )

class ReminderList(BaseModel):
    reminders: List[ReminderOut]
    count: int

class ReminderStatistics(BaseModel):
    scheduled: int
    sent: int
    failed: int
    cancelled: int
    exhausted: int

class TestEmailRequest(BaseModel):
    to: str  # plain str to allow .local and other dev domains
    subject: str = "SmartRide test email"
    content: str = "This is a test email from the ride reminder service."

from datetime import datetime, timezone
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.api.deps import get_current_user, get_reminder_dispatcher, require_roles
from app.models.booking import Booking
from app.models.ride import Ride
from app.models.user import User
from app.schemas.reminder import ReminderList, ReminderOut, ReminderStatistics, TestEmailRequest
from app.services import reminder_store
from app.services.email_service import send_email
from app.services.reminder_policy import ReminderType, as_utc
from app.services.reminder_service import ReminderSchedulingError, cancel_for_booking, reminder_statistics, schedule_for_booking

router = APIRouter(prefix="/reminders", tags=["reminders"])

def _as_list(reminders) -> ReminderList:
    return ReminderList(reminders=[ReminderOut.from_reminder(r) for r in reminders], count=len(reminders))

def _booking_for(db: Session, booking_id: str, user: User) -> Booking:
    b = db.get(Booking, booking_id)
    if not b:
        raise HTTPException(status_code=404, detail="Booking not found")
    if user.role == "admin":
        return b
    ride = db.get(Ride, b.ride_id)
    if user.id not in (b.passenger_id, ride.driver_id if ride else None):
        raise HTTPException(status_code=403, detail="Forbidden")
    return b

@router.post("/schedule/{booking_id}", response_model=ReminderList)
def schedule_reminders(booking_id: str, db: Session = Depends(get_db), admin: User = Depends(require_roles("admin"))):
    # Replaces the booking's history too, so it is an operator action only.
    booking = _booking_for(db, booking_id, admin)
    try:
        reminders = schedule_for_booking(db, booking)
    except ReminderSchedulingError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return _as_list(reminders)

@router.get("/booking/{booking_id}", response_model=ReminderList)
def reminders_for_booking(booking_id: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    _booking_for(db, booking_id, user)
    return _as_list(reminder_store.list_for_booking(db, booking_id))

@router.delete("/booking/{booking_id}")
def cancel_reminders(booking_id: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    _booking_for(db, booking_id, user)
    try:
        cancelled = cancel_for_booking(db, booking_id)
    except ReminderSchedulingError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"bookingId": booking_id, "cancelled": cancelled}

@router.get("/passenger/{passenger_id}", response_model=ReminderList)
def reminders_for_passenger(passenger_id: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    if user.role != "admin" and user.id != passenger_id:
        raise HTTPException(status_code=403, detail="Forbidden")
    return _as_list(reminder_store.list_for_passenger(db, passenger_id))

@router.get("/driver/{driver_id}", response_model=ReminderList)
def reminders_for_driver(driver_id: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    if user.role != "admin" and user.id != driver_id:
        raise HTTPException(status_code=403, detail="Forbidden")
    return _as_list(reminder_store.list_for_driver(db, driver_id))

@router.get("/recipient", response_model=ReminderList)
def reminders_for_recipient(email: str, db: Session = Depends(get_db), _: User = Depends(require_roles("admin"))):
    return _as_list(reminder_store.list_for_recipient(db, email))

@router.get("/booking/{booking_id}/exists")
def reminder_exists(booking_id: str, reminderType: ReminderType, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    _booking_for(db, booking_id, user)
    return {"bookingId": booking_id, "reminderType": reminderType.value, "exists": reminder_store.exists_for_booking_and_type(db, booking_id, reminderType)}

@router.get("/overdue", response_model=ReminderList)
def overdue_reminders(db: Session = Depends(get_db), _: User = Depends(require_roles("admin"))):
    return _as_list(reminder_store.find_overdue(db, datetime.now(timezone.utc)))

@router.get("/window", response_model=ReminderList)
def reminders_in_window(start: datetime, end: datetime, db: Session = Depends(get_db), _: User = Depends(require_roles("admin"))):
    if as_utc(end) < as_utc(start):
        raise HTTPException(status_code=400, detail="end must not be before start")
    return _as_list(reminder_store.list_scheduled_between(db, as_utc(start), as_utc(end)))

@router.get("/statistics", response_model=ReminderStatistics)
def statistics(db: Session = Depends(get_db), _: User = Depends(require_roles("admin"))):
    return ReminderStatistics(**reminder_statistics(db))

@router.post("/process-due")
def process_due(dispatcher=Depends(get_reminder_dispatcher), _: User = Depends(require_roles("admin"))):
    return dispatcher.process_due()

@router.post("/retry-failed")
def retry_failed(dispatcher=Depends(get_reminder_dispatcher), _: User = Depends(require_roles("admin"))):
    return dispatcher.retry_failed()

@router.post("/test-email")
def test_email(body: TestEmailRequest, _: User = Depends(require_roles("admin"))):
    try:
        send_email(body.to, body.subject, body.content)
    except Exception as e:
        raise HTTPException(status_code=502, detail=f"Failed to send test email: {e}")
    return {"success": True, "to": body.to}

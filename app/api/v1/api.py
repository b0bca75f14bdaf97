from fastapi import APIRouter
from app.api.v1.routes.rides import router as rides_router
from app.api.v1.routes.bookings import router as bookings_router
from app.api.v1.routes.reminders import router as reminders_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(rides_router)
api_router.include_router(bookings_router)
api_router.include_router(reminders_router)

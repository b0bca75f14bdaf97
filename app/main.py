from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.logging import configure_logging, logger
from app.core.metrics import metrics_response
from app.api.v1.api import api_router

configure_logging()


@asynccontextmanager
async def lifespan(_: FastAPI):
    """Own the reminder trigger for the lifetime of the API process when configured to."""

    trigger = None
    if settings.REMINDER_SCHEDULING_ENABLED and settings.REMINDER_TRIGGER == "inprocess":
        from app.tasks.trigger import build_reminder_trigger

        trigger = build_reminder_trigger()
        trigger.start()
    else:
        logger.info("reminder_trigger_disabled mode=%s enabled=%s", settings.REMINDER_TRIGGER, settings.REMINDER_SCHEDULING_ENABLED)
    yield
    if trigger is not None:
        trigger.stop()


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# CORS: use CORS_ORIGINS from env in production; default to localhost for dev
_default_origins = [
    "http://127.0.0.1:3000", "http://localhost:3000",
    "http://127.0.0.1:5173", "http://localhost:5173",
]
_origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()] if settings.CORS_ORIGINS else _default_origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/metrics")
def metrics():
    return metrics_response()

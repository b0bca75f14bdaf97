from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "local"
    APP_NAME: str = "SmartRide API"
    BRAND_NAME: str = "SmartRide"
    # Comma-separated origins for CORS. If empty, uses localhost defaults.
    CORS_ORIGINS: str = ""
    LOG_LEVEL: str = "INFO"

    SECRET_KEY: str

    DATABASE_URL: str

    @field_validator("DATABASE_URL", mode="after")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """Render and others give postgres://; SQLAlchemy expects postgresql+psycopg2://."""
        if v and v.startswith("postgres://"):
            return "postgresql+psycopg2://" + v[11:]
        return v
    REDIS_URL: str = "redis://localhost:6379/0"

    SMTP_HOST: str = "localhost"
    SMTP_PORT: int = 25
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_FROM: str = "no-reply@smartride.local"

    SENDGRID_API_KEY: str = ""
    SENDGRID_FROM_EMAIL: str = ""

    # Upper bound on a single gateway call; a timeout counts as a failed delivery.
    NOTIFICATION_TIMEOUT_SECONDS: float = 5.0

    # Ride reminders
    REMINDER_SCHEDULING_ENABLED: bool = True
    REMINDER_TRIGGER: str = "inprocess"  # inprocess|celery
    REMINDER_DUE_INTERVAL_SECONDS: float = 300.0
    REMINDER_RETRY_INTERVAL_SECONDS: float = 1800.0
    REMINDER_STATS_INTERVAL_SECONDS: float = 3600.0
    REMINDER_MAX_ATTEMPTS: int = 3
    REMINDER_CHANNEL: str = "EMAIL"

    @field_validator("REMINDER_TRIGGER", mode="after")
    @classmethod
    def check_reminder_trigger(cls, v: str) -> str:
        v = (v or "").strip().lower()
        if v not in ("inprocess", "celery"):
            raise ValueError("REMINDER_TRIGGER must be 'inprocess' or 'celery'")
        return v


settings = Settings()

import json
from datetime import time
from typing import Annotated, Any

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application configuration using Pydantic BaseSettings.
    Loaded from environment variables and the .env file.
    """

    # API Configuration
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Clinic Scheduling API"
    PROJECT_DESCRIPTION: str = "Appointment scheduling and virtual meeting rooms for healthcare teams"
    VERSION: str = "0.1.0"
    CORS_ORIGINS: Annotated[list[str], NoDecode] = Field(default=["*"], description="Allowed CORS origins")

    # PostgreSQL Database Settings
    DB_HOST: str = Field("localhost", description="PostgreSQL host")
    DB_PORT: int = Field(5432, description="PostgreSQL port")
    DB_NAME: str = Field("scheduling", description="Database name")
    DB_USER: str = Field("postgres", description="PostgreSQL user")
    DB_PASSWORD: str | None = Field(None, description="PostgreSQL password")
    DB_ECHO: bool = Field(False, description="Log SQL queries (debug only)")
    DB_AUTO_CREATE: bool = Field(False, description="Create missing tables on startup")

    # Database connection pool settings
    DB_POOL_SIZE: int = Field(20, description="Connection pool size")
    DB_MAX_OVERFLOW: int = Field(30, description="Maximum pool overflow")
    DB_POOL_RECYCLE: int = Field(3600, description="Recycle connections every X seconds")
    DB_POOL_TIMEOUT: int = Field(30, description="Timeout to acquire a pooled connection")

    # Redis Settings
    REDIS_HOST: str = Field("localhost", description="Redis host")
    REDIS_PORT: int = Field(6379, description="Redis port")
    REDIS_DB: int = Field(0, description="Redis database")
    REDIS_PASSWORD: str | None = Field(None, description="Redis password")
    REALTIME_REDIS_ENABLED: bool = Field(
        False, description="Relay realtime events through Redis pub/sub so every worker can deliver them"
    )
    REALTIME_REDIS_CHANNEL: str = Field("scheduling:realtime", description="Redis pub/sub channel for realtime events")

    # JWT Settings
    JWT_SECRET_KEY: str = Field(..., description="Secret key for JWT")
    JWT_ALGORITHM: str = Field("HS256", description="JWT signing algorithm")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(30, description="Access token lifetime in minutes")

    # Scheduling
    SCHEDULING_WORKDAY_START: time = Field(time(9, 0), description="Start of the bookable working day")
    SCHEDULING_WORKDAY_END: time = Field(time(18, 0), description="End of the bookable working day")
    SCHEDULING_SLOT_STEP_MINUTES: int = Field(30, description="Distance between candidate slot starts")
    SCHEDULING_DEFAULT_SLOT_MINUTES: int = Field(60, description="Slot length when no duration is requested")
    SCHEDULING_CLIP_SLOTS_TO_CLOSE: bool = Field(False, description="Drop slots that would end after closing time")
    SCHEDULING_TIMEZONE: str = Field("UTC", description="Time zone in which working hours are interpreted")

    # Meetings
    MEETING_BASE_URL: str = Field("http://localhost:3000", description="Base URL for meeting room links")
    MEETING_RESTART_RESETS_STARTED_AT: bool = Field(
        True, description="A repeated start overwrites the room's started_at timestamp"
    )
    MEETING_CHAT_REQUIRES_PRESENCE: bool = Field(
        False, description="Only participants currently in the room may send chat messages"
    )
    MEETING_MAX_PARTICIPANTS: int = Field(100, description="Maximum concurrently present participants per room")

    # E-mail notifications
    EMAIL_ENABLED: bool = Field(False, description="Send e-mail notifications")
    SMTP_SERVER: str = Field("localhost", description="SMTP server host")
    SMTP_PORT: int = Field(587, description="SMTP server port")
    SMTP_USERNAME: str | None = Field(None, description="SMTP user")
    SMTP_PASSWORD: str | None = Field(None, description="SMTP password")
    SMTP_FROM_EMAIL: str = Field("no-reply@localhost", description="Sender address for notifications")
    FRONTEND_URL: str = Field("http://localhost:3000", description="Frontend base URL used in e-mail links")

    # External calendar
    GOOGLE_CALENDAR_ENABLED: bool = Field(False, description="Mirror appointments into the doctor's Google Calendar")
    GOOGLE_CALENDAR_API_URL: str = Field(
        "https://www.googleapis.com/calendar/v3", description="Google Calendar REST base URL"
    )
    GOOGLE_CALENDAR_TIMEOUT: int = Field(15, description="Timeout for calendar requests in seconds")

    # Reminders
    REMINDERS_ENABLED: bool = Field(True, description="Run the background reminder loop")
    REMINDER_LEAD_MINUTES: int = Field(60, description="Remind participants this many minutes before start")
    REMINDER_CHECK_INTERVAL_SECONDS: int = Field(300, description="Seconds between reminder sweeps")

    # Application Settings
    DEBUG: bool = Field(False, description="Debug mode")
    ENVIRONMENT: str = Field("production", description="Runtime environment")

    # Sentry Configuration
    SENTRY_DSN: str | None = Field(default=None, description="Sentry DSN for error tracking")

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def __init__(self, **data: Any):
        super().__init__(**data)

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, value):
        if isinstance(value, str):
            if value.strip().startswith("["):
                return json.loads(value)
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("SCHEDULING_SLOT_STEP_MINUTES", "SCHEDULING_DEFAULT_SLOT_MINUTES", "MEETING_MAX_PARTICIPANTS")
    @classmethod
    def validate_positive(cls, v):
        if v < 1:
            raise ValueError("Value must be at least 1")
        return v

    @field_validator("DB_POOL_SIZE")
    @classmethod
    def validate_pool_size(cls, v):
        if v < 1:
            raise ValueError("DB_POOL_SIZE must be at least 1")
        if v > 100:
            raise ValueError("DB_POOL_SIZE should not exceed 100")
        return v

    @field_validator("DB_MAX_OVERFLOW")
    @classmethod
    def validate_max_overflow(cls, v):
        if v < 0:
            raise ValueError("DB_MAX_OVERFLOW must be 0 or greater")
        if v > 200:
            raise ValueError("DB_MAX_OVERFLOW should not exceed 200")
        return v

    @computed_field
    @property
    def async_database_url(self) -> str:
        """PostgreSQL connection URL for the asyncpg driver"""
        credentials = f"{self.DB_USER}:{self.DB_PASSWORD}" if self.DB_PASSWORD else self.DB_USER
        return f"postgresql+asyncpg://{credentials}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @computed_field
    @property
    def redis_url(self) -> str:
        """Redis connection URL"""
        if self.REDIS_PASSWORD:
            return f"redis://:{self.REDIS_PASSWORD}@{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    @computed_field
    @property
    def is_development(self) -> bool:
        """True when running in a development environment"""
        return self.DEBUG or self.ENVIRONMENT.lower() in ["development", "dev", "local"]


# Singleton for configuration
_settings_instance = None


def get_settings() -> Settings:
    """
    Return a cached Settings instance so the environment is read once.
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance

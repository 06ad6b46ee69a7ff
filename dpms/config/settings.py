from typing import Any
from urllib.parse import quote_plus

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables and `.env`.
    """

    # API Configuration
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Digital Prescription Management API"
    PROJECT_DESCRIPTION: str = "Prescription visibility, scannable payloads and medication reminders"
    VERSION: str = "0.1.0"

    # Application Settings
    DEBUG: bool = Field(False, description="Debug mode")
    ENVIRONMENT: str = Field("production", description="Runtime environment")

    # Server
    HOST: str = Field("0.0.0.0", description="Bind address for uvicorn")
    PORT: int = Field(8000, description="Bind port for uvicorn")
    CORS_ORIGINS: list[str] = Field(default_factory=lambda: ["*"], description="Allowed CORS origins")

    # Error tracking
    SENTRY_DSN: str | None = Field(None, description="Sentry DSN; error tracking is off when unset")

    # PostgreSQL Database Settings
    DB_HOST: str = Field("localhost", description="PostgreSQL host")
    DB_PORT: int = Field(5432, description="PostgreSQL port")
    DB_NAME: str = Field("dpms", description="Database name")
    DB_USER: str = Field("postgres", description="PostgreSQL user")
    DB_PASSWORD: str | None = Field(None, description="PostgreSQL password")
    DB_ECHO: bool = Field(False, description="Log SQL queries (debug only)")

    # Database connection pool settings
    DB_POOL_SIZE: int = Field(10, description="Connection pool size")
    DB_MAX_OVERFLOW: int = Field(20, description="Maximum pool overflow")
    DB_POOL_RECYCLE: int = Field(3600, description="Recycle connections every X seconds")
    DB_POOL_TIMEOUT: int = Field(30, description="Timeout for acquiring a pooled connection")

    # SMTP Delivery Channel
    SMTP_HOST: str = Field("smtp.gmail.com", description="SMTP relay host")
    SMTP_PORT: int = Field(587, description="SMTP relay port (465 = implicit TLS)")
    SMTP_USERNAME: str | None = Field(None, description="SMTP login user, also used as sender address")
    SMTP_PASSWORD: str | None = Field(None, description="SMTP login password")
    SMTP_FROM_NAME: str = Field("Digital Prescription System", description="Display name of the sender")
    SMTP_CONNECT_TIMEOUT: float = Field(10.0, description="Seconds to wait for the TCP connection")
    SMTP_GREETING_TIMEOUT: float = Field(10.0, description="Seconds to wait for the server greeting")
    SMTP_SOCKET_TIMEOUT: float = Field(10.0, description="Seconds of socket inactivity before failing")

    # Medication Reminder Scheduler
    REMINDER_SCHEDULER_ENABLED: bool = Field(True, description="Start the reminder scheduler on startup")
    REMINDER_TIMEZONE: str | None = Field(
        None, description="Timezone of the 08:00/14:00/20:00 triggers; the host local zone when unset"
    )
    REMINDER_MAX_AGE_DAYS: int = Field(90, description="Prescriptions older than this get no reminders")

    # Logging
    LOG_LEVEL: str = Field("INFO", description="Root log level")
    LOG_FORMAT: str = Field("colored", description="Console log format: colored, json or plain")
    LOG_FILE: str | None = Field(None, description="Optional JSON log file")

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def __init__(self, **data: Any):
        super().__init__(**data)

    @field_validator("SMTP_USERNAME", "SMTP_PASSWORD", "REMINDER_TIMEZONE", mode="before")
    @classmethod
    def blank_values_are_missing(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("SMTP_PORT", "DB_PORT")
    @classmethod
    def validate_port(cls, v):
        if not 0 < v < 65536:
            raise ValueError("Port must be between 1 and 65535")
        return v

    @field_validator("REMINDER_MAX_AGE_DAYS")
    @classmethod
    def validate_max_age(cls, v):
        if v < 1:
            raise ValueError("REMINDER_MAX_AGE_DAYS must be at least 1")
        return v

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v):
        if v not in ("colored", "json", "plain"):
            raise ValueError("LOG_FORMAT must be 'colored', 'json' or 'plain'")
        return v

    @field_validator("DB_POOL_SIZE")
    @classmethod
    def validate_pool_size(cls, v):
        if v < 1:
            raise ValueError("DB_POOL_SIZE must be at least 1")
        if v > 100:
            raise ValueError("DB_POOL_SIZE should not exceed 100")
        return v

    @computed_field
    @property
    def database_url(self) -> str:
        """Synchronous PostgreSQL URL (used by alembic)."""
        if self.DB_PASSWORD:
            return f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        return f"postgresql://{self.DB_USER}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @computed_field
    @property
    def async_database_url(self) -> str:
        """PostgreSQL URL for the asyncpg driver, credentials URL-escaped."""
        user = quote_plus(self.DB_USER)
        if self.DB_PASSWORD:
            credentials = f"{user}:{quote_plus(self.DB_PASSWORD)}"
        else:
            credentials = user
        return f"postgresql+asyncpg://{credentials}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @computed_field
    @property
    def smtp_configured(self) -> bool:
        """Both SMTP credentials are present."""
        return bool(self.SMTP_USERNAME and self.SMTP_PASSWORD)

    @computed_field
    @property
    def is_development(self) -> bool:
        return self.DEBUG or self.ENVIRONMENT.lower() in ["development", "dev", "local"]


_settings_instance = None


def get_settings() -> Settings:
    """
    Return the cached settings instance so the environment is read once.
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance

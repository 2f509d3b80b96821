"""Application configuration via environment variables."""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """App settings loaded from .env or environment."""

    DATABASE_URL: str = "sqlite:///./volunteer_slots.db"
    CORS_ORIGINS: str = "http://localhost:3000"
    SITE_URL: str = "http://localhost:3000"
    LOG_LEVEL: str = "INFO"

    # Scheduling
    DEFAULT_TIMEZONE: str = "UTC"  # IANA tz used when a project has none
    CANCELLATION_GUARD_HOURS: int = 24

    # Anonymous confirmation; 0 disables expiry
    ANONYMOUS_CONFIRMATION_TTL_HOURS: int = 72

    # Background status reconciliation; 0 disables the loop
    RECONCILE_INTERVAL_SECONDS: int = 60

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()

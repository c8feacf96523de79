"""Application settings and logging setup"""
import logging
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Booking settings, overridable through BOOKING_* environment variables"""

    model_config = SettingsConfigDict(env_prefix="BOOKING_", env_file=".env", extra="ignore")

    app_name: str = "Restaurant Booking API"
    version: str = "1.0.0"
    log_level: str = "INFO"

    # Scheduling policy
    reservation_duration_hours: int = 3
    minimum_lead_time_hours: int = 1

    # Contact validation rules
    email_pattern: str = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
    phone_pattern: str = r"^(\+\d{1,3}[\s-]?)?(\(?\d{1,4}\)?[\s-]?)?[\d\s-]{6,}$"


@lru_cache()
def get_settings() -> Settings:
    return Settings()


def configure_logging(settings: Settings = None) -> None:
    """Apply the configured log level to the root logger"""
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

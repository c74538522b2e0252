import json
from typing import Annotated, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode


class Settings(BaseSettings):
    """Application settings."""

    # Basic settings
    PROJECT_NAME: str = "SalonPro Booking"
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    # Security
    SECRET_KEY: str
    ALGORITHM: str = "HS256"

    # Database
    DATABASE_URL: str

    # Redis (rate limiting and booking locks are disabled when unset)
    REDIS_URL: Optional[str] = None

    # CORS, comma separated or a JSON list in the environment
    ALLOWED_ORIGINS: Annotated[list[str], NoDecode] = [
        "http://localhost:3000",
        "http://localhost:8080",
    ]

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v):
        if isinstance(v, str):
            if v.strip().startswith("["):
                return json.loads(v)
            return [i.strip() for i in v.split(",") if i.strip()]
        return v

    # Booking link host; falls back to the request base URL
    PUBLIC_BASE_URL: Optional[str] = None

    # Booking
    BOOKING_TIMEZONE: Optional[str] = None  # None means server local time
    SLOT_INTERVAL_MINUTES: int = 30
    BOOKING_LOCK_SECONDS: int = 10
    BOOKING_RATE_LIMIT: int = 10
    BOOKING_RATE_WINDOW_SECONDS: int = 60

    @field_validator("BOOKING_TIMEZONE")
    @classmethod
    def validate_booking_timezone(cls, v):
        if v is None:
            return v
        import pytz

        try:
            pytz.timezone(v)
        except pytz.UnknownTimeZoneError:
            raise ValueError(f"Invalid timezone: {v}")
        return v

    # Logging
    LOG_LEVEL: str = "INFO"

    model_config = {"env_file": ".env", "case_sensitive": True}


# Global settings instance
settings = Settings()

"""Configuration settings for the Cinema Booking Platform."""

from decimal import Decimal
from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Remote catalog / reservation service
    catalog_base_url: str = "http://localhost:4000/api"
    catalog_timeout_seconds: float = 10.0
    catalog_cache_ttl_seconds: int = 300

    # Pricing Configuration
    premium_seat_min: int = 5
    premium_seat_max: int = 8
    premium_seat_price: Decimal = Decimal("25")
    standard_seat_price: Decimal = Decimal("15")

    # Show date picker
    max_displayed_dates: int = 7

    # Reservation Configuration
    missing_reservation_id: str = "N/A"

    # Ticket code rendering
    ticket_qr_box_size: int = 10
    ticket_qr_border: int = 4

    # Session Configuration
    session_ttl_minutes: int = 30
    max_sessions: int = 10000

    # Application Configuration
    debug: bool = False
    environment: str = "development"

    # CORS Configuration
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["GET", "POST", "DELETE", "OPTIONS"]
    cors_allow_headers: list[str] = ["*"]
    cors_expose_headers: list[str] = ["X-Request-ID", "X-Process-Time"]

    # Logging Configuration
    log_level: str = "INFO"
    enable_json_logging: bool = False
    enable_request_logging: bool = True

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8"
    }


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Module-level settings instance
settings = get_settings()

import os

from dotenv import load_dotenv


load_dotenv()


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if not value:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]

APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./patientcare.db")
CORS_ALLOW_ORIGINS = _get_list(os.getenv("CORS_ALLOW_ORIGINS"), ["http://localhost:4200"])

DEFAULT_SLOT_DURATION_MINUTES = int(os.getenv("DEFAULT_SLOT_DURATION_MINUTES", "30"))
MIN_WINDOW_MINUTES = int(os.getenv("MIN_WINDOW_MINUTES", "30"))

# Legacy expansion emitted a trailing slot even when it ran past the window end.
ALLOW_PARTIAL_TRAILING_SLOT = _get_bool(os.getenv("ALLOW_PARTIAL_TRAILING_SLOT"), default=False)
PENDING_RESERVES_SLOT = _get_bool(os.getenv("PENDING_RESERVES_SLOT"), default=False)
BOOKING_REQUIRES_AVAILABILITY = _get_bool(os.getenv("BOOKING_REQUIRES_AVAILABILITY"), default=True)

MAX_APPOINTMENT_NOTES_LENGTH = int(os.getenv("MAX_APPOINTMENT_NOTES_LENGTH", "600"))
STORE_WRITE_RETRIES = int(os.getenv("STORE_WRITE_RETRIES", "3"))


def validate_runtime_config() -> None:
    if DEFAULT_SLOT_DURATION_MINUTES <= 0:
        raise RuntimeError("DEFAULT_SLOT_DURATION_MINUTES must be positive.")
    if MIN_WINDOW_MINUTES <= 0:
        raise RuntimeError("MIN_WINDOW_MINUTES must be positive.")
    if STORE_WRITE_RETRIES < 0:
        raise RuntimeError("STORE_WRITE_RETRIES cannot be negative.")
    if APP_ENV.lower() == "production" and DATABASE_URL.startswith("sqlite"):
        raise RuntimeError("DATABASE_URL must point at Postgres in production.")

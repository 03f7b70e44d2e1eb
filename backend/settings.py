import os
from decimal import Decimal, InvalidOperation
from pathlib import Path

# Basic settings helper to read environment configuration.

BASE_DIR = Path(__file__).resolve().parent

DEFAULT_PROXY_PREFIXES = (
    "https://firebasestorage.googleapis.com/",
    "https://storage.googleapis.com/",
)


def _as_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.lower() in ("1", "true", "yes", "on")


def _as_decimal(val: str | None) -> Decimal | None:
    if not val:
        return None
    try:
        return Decimal(val)
    except InvalidOperation:
        return None


def _as_list(val: str | None, default: tuple[str, ...]) -> tuple[str, ...]:
    if not val:
        return default
    return tuple(part.strip() for part in val.split(",") if part.strip())


class Settings:
    def __init__(self) -> None:
        self.DATABASE_URL: str = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR / 'app.db'}")
        self.MEDIA_ROOT: str = os.getenv("MEDIA_ROOT", "media")
        self.MEDIA_PUBLIC_BASE_URL: str = os.getenv("MEDIA_PUBLIC_BASE_URL", "/media").rstrip("/")
        self.MAPBOX_TOKEN: str | None = os.getenv("MAPBOX_TOKEN") or None
        self.MAPBOX_STYLE: str = os.getenv("MAPBOX_STYLE", "mapbox/streets-v12")
        self.WEATHER_API_URL: str = os.getenv(
            "WEATHER_API_URL", "https://api.open-meteo.com/v1/forecast"
        )
        self.HTTP_TIMEOUT: float = float(os.getenv("HTTP_TIMEOUT", "10"))
        self.MEDIA_PROXY_ALLOWED_PREFIXES: tuple[str, ...] = _as_list(
            os.getenv("MEDIA_PROXY_ALLOWED_PREFIXES"), DEFAULT_PROXY_PREFIXES
        )
        self.DEFAULT_HOURLY_RATE: Decimal | None = _as_decimal(os.getenv("DEFAULT_HOURLY_RATE"))
        self.RECAP_FONT_PATH: str = os.getenv("RECAP_FONT_PATH", "DejaVuSans.ttf")
        self.RECAP_BOLD_FONT_PATH: str = os.getenv("RECAP_BOLD_FONT_PATH", "DejaVuSans-Bold.ttf")
        self.TIMEZONE: str = os.getenv("TIMEZONE", "UTC")
        self.SQL_ECHO: bool = _as_bool(os.getenv("SQL_ECHO"), False)


settings = Settings()

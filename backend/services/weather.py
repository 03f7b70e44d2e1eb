"""Current-weather lookup using the Open-Meteo forecast API.

Open-Meteo reports Celsius and a WMO weather code; both are turned into the
short Fahrenheit/summary pair stored on a walk.
"""

from __future__ import annotations

import logging
import math
from typing import Any

import requests

from domain.models import WeatherNow
from settings import settings

logger = logging.getLogger(__name__)
_session = requests.Session()


class WeatherError(Exception):
    """Base class for weather lookup failures."""


class WeatherUpstreamError(WeatherError):
    """The weather API could not be reached or returned an error status."""


class WeatherResponseError(WeatherError):
    """The weather API answered with an unexpected payload."""


def weather_code_to_summary(code: float) -> str:
    """Condensed WMO weather-code mapping; non-integer codes fall through to "Weather"."""
    if code == 0:
        return "Clear"
    if code in (1, 2):
        return "Partly cloudy"
    if code == 3:
        return "Overcast"
    if code in (45, 48):
        return "Fog"
    if 51 <= code <= 57:
        return "Drizzle"
    if 61 <= code <= 67:
        return "Rain"
    if 71 <= code <= 77:
        return "Snow"
    if 80 <= code <= 82:
        return "Rain showers"
    if 85 <= code <= 86:
        return "Snow showers"
    if code == 95:
        return "Thunderstorm"
    if code in (96, 99):
        return "Thunderstorm (hail)"
    return "Weather"


def c_to_f(celsius: float) -> float:
    return celsius * 9 / 5 + 32


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def fetch_current_weather(lat: float, lng: float, timeout: float | None = None) -> WeatherNow:
    """
    Fetch current conditions for a coordinate.

    Raises:
        WeatherUpstreamError: transport failure or non-2xx response
        WeatherResponseError: temperature or weather code missing/non-numeric
    """
    params = {
        "latitude": lat,
        "longitude": lng,
        "current": "temperature_2m,weather_code",
        "temperature_unit": "celsius",
    }
    try:
        resp = _session.get(
            settings.WEATHER_API_URL,
            params=params,
            timeout=timeout or settings.HTTP_TIMEOUT,
        )
        resp.raise_for_status()
    except requests.RequestException as exc:
        logger.warning("[weather] fetch failed for (%s, %s): %s", lat, lng, exc)
        raise WeatherUpstreamError("Weather fetch failed") from exc

    try:
        data = resp.json()
    except ValueError as exc:
        raise WeatherResponseError("Unexpected weather response") from exc

    current = data.get("current") if isinstance(data, dict) else None
    current = current if isinstance(current, dict) else {}
    temp_c = current.get("temperature_2m")
    code = current.get("weather_code")
    if not _is_number(temp_c) or not _is_number(code):
        logger.warning("[weather] unexpected payload keys=%s", sorted(current))
        raise WeatherResponseError("Unexpected weather response")

    return WeatherNow(
        temperature_f=int(math.floor(c_to_f(temp_c) + 0.5)),
        summary=weather_code_to_summary(code),
    )

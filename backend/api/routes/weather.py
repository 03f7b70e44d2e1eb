"""
Weather API route: current conditions for the walk form.
"""
from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from services.weather import WeatherError, fetch_current_weather

router = APIRouter()


class WeatherResponse(BaseModel):
    temperatureF: Optional[int] = None
    summary: str


@router.get("/weather", response_model=WeatherResponse)
def get_weather(lat: Optional[float] = None, lng: Optional[float] = None):
    if lat is None or lng is None:
        raise HTTPException(status_code=400, detail="Missing lat/lng")
    try:
        now = fetch_current_weather(lat, lng)
    except WeatherError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return WeatherResponse(temperatureF=now.temperature_f, summary=now.summary)

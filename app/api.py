"""HTTP API for the CWA forecast proxy."""

import hmac
from datetime import datetime, timezone
from typing import Optional
from fastapi import APIRouter, Depends, Header, HTTPException, status
from pydantic import BaseModel

from .config import settings
from .data_sources import build_data_source
from .forecast_service import CityForecast, ForecastPeriod, get_short_range_forecast, get_weekly_forecast
from .locations import resolve_location
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="app/api")


def require_api_key(x_api_key: str | None = Header(default=None)):
    """
    Validate the X-API-Key header against the static service_api_key setting.
    """
    # No key configured: open access (dev/default mode).
    if not settings.service_api_key:
        return

    if not x_api_key:
        logger.debug("No API key provided")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing API key")

    if hmac.compare_digest(str(x_api_key), str(settings.service_api_key)):
        return

    logger.warning("Invalid API key provided")
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")


router = APIRouter()
DATA_SOURCE = build_data_source(settings)


class ForecastRecord(BaseModel):
    """Serialized forecast period."""
    date: str
    startTime: str
    endTime: Optional[str] = None
    weather: str
    rain: str
    minTemp: str
    maxTemp: str
    avgTemp: str
    comfort: str
    windSpeed: str


class CityWeather(BaseModel):
    """Forecast payload for one city or county."""
    city: str
    cityCode: str
    updateTime: Optional[str] = None
    current: Optional[ForecastRecord] = None
    forecasts: list[ForecastRecord]


class WeatherResponse(BaseModel):
    """Success envelope."""
    success: bool = True
    data: CityWeather


class HealthResponse(BaseModel):
    status: str
    timestamp: str


def _record(period: Optional[ForecastPeriod]) -> Optional[ForecastRecord]:
    return ForecastRecord(**period.to_dict()) if period else None


def _to_response(forecast: CityForecast) -> WeatherResponse:
    """Convert a CityForecast into the API envelope."""
    return WeatherResponse(
        success=True,
        data=CityWeather(
            city=forecast.city,
            cityCode=forecast.city_code,
            updateTime=forecast.update_time,
            current=_record(forecast.current),
            forecasts=[_record(p) for p in forecast.forecasts],
        ),
    )


@router.get("/health", response_model=HealthResponse)
def health():
    """Liveness check."""
    return HealthResponse(status="OK", timestamp=datetime.now(tz=timezone.utc).isoformat())


@router.get("/weather/{city}", response_model=WeatherResponse, dependencies=[Depends(require_api_key)])
def get_city_weather(city: str):
    """Daily forecast for a county/city: today plus the next few days."""
    location = resolve_location(city)
    logger.info(f"Weekly forecast requested for {location.code}")
    forecast = get_weekly_forecast(location, data_source=DATA_SOURCE, settings=settings)
    return _to_response(forecast)


@router.get("/weather/{city}/36h", response_model=WeatherResponse, dependencies=[Depends(require_api_key)])
def get_city_weather_36h(city: str):
    """Every period of the 36-hour forecast for a county/city."""
    location = resolve_location(city)
    logger.info(f"36-hour forecast requested for {location.code}")
    forecast = get_short_range_forecast(location, data_source=DATA_SOURCE, settings=settings)
    return _to_response(forecast)

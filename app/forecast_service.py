"""Flatten CWA element time series into per-period forecast records."""
from __future__ import annotations

import datetime as dt
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from app.config import Settings, settings as default_settings
from app.data_sources import ForecastDataSource
from app.data_sources.cwa_client import ElementSeries, LocationForecast, SeriesEntry, extract_location
from app.errors import DataShapeError, ElementNotFoundError
from app.locations import Location
from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="app/forecast_service")

PLACEHOLDER = "--"
RAIN_DEFAULT = "0"

# Output field -> element codes that may carry it, in preference order.
FIELD_CODES: Dict[str, Tuple[str, ...]] = {
    "weather": ("Wx",),
    "rain": ("PoP12h", "PoP", "PoP6h"),
    "min_temp": ("MinT",),
    "max_temp": ("MaxT",),
    "avg_temp": ("T",),
    "comfort": ("CI",),
    "wind_speed": ("WS",),
}


@dataclass
class ForecastPeriod:
    """One flattened forecast record."""
    date: str
    start_time: str
    end_time: Optional[str]
    weather: str = PLACEHOLDER
    rain: str = PLACEHOLDER
    min_temp: str = PLACEHOLDER
    max_temp: str = PLACEHOLDER
    avg_temp: str = PLACEHOLDER
    comfort: str = PLACEHOLDER
    wind_speed: str = PLACEHOLDER

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "weather": self.weather,
            "rain": self.rain,
            "minTemp": self.min_temp,
            "maxTemp": self.max_temp,
            "avgTemp": self.avg_temp,
            "comfort": self.comfort,
            "windSpeed": self.wind_speed,
        }


@dataclass
class CityForecast:
    """Normalized forecast for one location, ready for serialization."""
    city: str
    city_code: str
    update_time: Optional[str]
    current: Optional[ForecastPeriod]
    forecasts: List[ForecastPeriod] = field(default_factory=list)


def _parse_start(value: str) -> dt.datetime:
    """Parse a CWA timestamp ("2024-05-01 06:00:00" or ISO 8601 with offset)."""
    try:
        return dt.datetime.fromisoformat(value.strip())
    except (AttributeError, ValueError) as exc:
        raise DataShapeError(f"Unreadable forecast timestamp: {value!r}") from exc


def _date_key(start_time: str) -> str:
    return _parse_start(start_time).date().isoformat()


def _same_day(start_time: str, date_key: str) -> bool:
    try:
        return _date_key(start_time) == date_key
    except DataShapeError:
        return False


def _clean(value: Optional[str], default: str) -> str:
    """Absent -> placeholder; blank/whitespace -> ``default``; else stripped text."""
    if value is None:
        return PLACEHOLDER
    text = str(value).strip()
    return text if text else default


def average_temperature(min_temp: Optional[str], max_temp: Optional[str]) -> Optional[str]:
    """Mean of min/max rounded half-up to an integer string, or None if either is not a finite number."""
    try:
        low = float(min_temp)
        high = float(max_temp)
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(low) and math.isfinite(high)):
        return None
    return str(int(math.floor((low + high) / 2 + 0.5)))


class _SiblingIndex:
    """Looks up a sibling series' value for a driver period."""

    def __init__(self, series: ElementSeries):
        self.series = series
        self.by_start: Dict[str, SeriesEntry] = {}
        for entry in series.entries:
            self.by_start.setdefault(entry.start_time, entry)

    def value_for(self, index: int, start_time: str, date_key: str) -> Optional[str]:
        entry = self.by_start.get(start_time)
        if entry is None and 0 <= index < len(self.series.entries):
            # Fall back to position, but never across a date boundary.
            candidate = self.series.entries[index]
            if _same_day(candidate.start_time, date_key):
                entry = candidate
        return entry.value if entry is not None else None


def normalize_forecast(
    elements: Sequence[ElementSeries],
    *,
    driver_code: str = "Wx",
    codes: Optional[Sequence[str]] = None,
    one_per_day: bool = True,
) -> List[ForecastPeriod]:
    """
    Flatten a location's element series into ordered forecast records.

    The driver series decides which periods exist. Its entries are visited
    in chronological order; with ``one_per_day`` only the first period of
    each calendar day is kept. Sibling values are matched by start time,
    then by position when the positional entry falls on the same day, and
    are otherwise treated as absent.

    Raises ElementNotFoundError when the driver (or any code in ``codes``)
    is missing, DataShapeError when the driver has no periods or a
    timestamp cannot be read.
    """
    available = {series.code: series for series in elements}
    driver = available.get(driver_code)
    if driver is None:
        logger.error(f"Driver element {driver_code} missing; available: {list(available)}")
        raise ElementNotFoundError(driver_code, list(available))
    if not driver.entries:
        logger.error(f"Driver element {driver_code} has no periods")
        raise DataShapeError(f"Weather element '{driver_code}' has no time periods")

    if codes is not None:
        for code in codes:
            if code not in available:
                logger.error(f"Requested element {code} missing; available: {list(available)}")
                raise ElementNotFoundError(code, list(available))
        selected = [available[code] for code in codes if code != driver_code]
    else:
        selected = [series for code, series in available.items() if code != driver_code]
    siblings = {series.code: _SiblingIndex(series) for series in selected}

    ordered = sorted(
        enumerate(driver.entries),
        key=lambda pair: _parse_start(pair[1].start_time).replace(tzinfo=None),
    )

    seen: set[str] = set()
    periods: List[ForecastPeriod] = []
    for index, entry in ordered:
        date_key = _date_key(entry.start_time)
        if one_per_day and date_key in seen:
            continue

        raw: Dict[str, Optional[str]] = {}
        for field_name, aliases in FIELD_CODES.items():
            value = None
            for code in aliases:
                if code == driver_code:
                    value = entry.value
                    break
                if code in siblings:
                    value = siblings[code].value_for(index, entry.start_time, date_key)
                    break
            raw[field_name] = value

        period = ForecastPeriod(
            date=date_key,
            start_time=entry.start_time,
            end_time=entry.end_time,
            weather=_clean(raw["weather"], PLACEHOLDER),
            rain=_clean(raw["rain"], RAIN_DEFAULT),
            min_temp=_clean(raw["min_temp"], PLACEHOLDER),
            max_temp=_clean(raw["max_temp"], PLACEHOLDER),
            avg_temp=_clean(raw["avg_temp"], PLACEHOLDER),
            comfort=_clean(raw["comfort"], PLACEHOLDER),
            wind_speed=_clean(raw["wind_speed"], PLACEHOLDER),
        )
        if period.avg_temp == PLACEHOLDER:
            period.avg_temp = average_temperature(period.min_temp, period.max_temp) or PLACEHOLDER

        seen.add(date_key)
        periods.append(period)

    logger.debug(f"Normalized {len(driver.entries)} {driver_code} periods into {len(periods)} records")
    return periods


def split_current_and_future(
    periods: Sequence[ForecastPeriod],
    future_days: int,
) -> Tuple[Optional[ForecastPeriod], List[ForecastPeriod]]:
    """First record as "current", then at most ``future_days`` following records."""
    if not periods:
        return None, []
    return periods[0], list(periods[1:1 + max(future_days, 0)])


def _load_location(
    location: Location,
    dataset_id: str,
    codes: Sequence[str],
    data_source: ForecastDataSource,
) -> LocationForecast:
    names = location.query_names()
    logger.info(f"Fetching {dataset_id} for {location.code} ({location.name})")
    payload = data_source.fetch_forecast(dataset_id, names, codes)
    return extract_location(payload, names)


def get_weekly_forecast(
    location: Location,
    *,
    data_source: ForecastDataSource,
    settings: Settings | None = None,
) -> CityForecast:
    """One record per day from the weekly dataset: today plus ``future_days`` days."""
    settings = settings or default_settings
    codes = settings.element_codes("weekly")
    loc = _load_location(location, settings.weekly_dataset, codes, data_source)
    periods = normalize_forecast(loc.elements, driver_code=settings.driver_element, codes=codes or None)
    current, future = split_current_and_future(periods, settings.future_days)
    return CityForecast(
        city=loc.name,
        city_code=location.code,
        update_time=loc.update_time,
        current=current,
        forecasts=future,
    )


def get_short_range_forecast(
    location: Location,
    *,
    data_source: ForecastDataSource,
    settings: Settings | None = None,
) -> CityForecast:
    """Every period of the 36-hour dataset, without per-day de-duplication."""
    settings = settings or default_settings
    codes = settings.element_codes("short_range")
    loc = _load_location(location, settings.short_range_dataset, codes, data_source)
    periods = normalize_forecast(
        loc.elements,
        driver_code=settings.driver_element,
        codes=codes or None,
        one_per_day=False,
    )
    return CityForecast(
        city=loc.name,
        city_code=location.code,
        update_time=loc.update_time,
        current=periods[0] if periods else None,
        forecasts=periods,
    )

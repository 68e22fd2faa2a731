"""Helpers for fetching county forecasts from the CWA open-data API."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple
import requests

from app.errors import DataShapeError, LocationNotFoundError, UpstreamError
from utils.logging_utils import get_tagged_logger, mask_url
logger = get_tagged_logger(__name__, tag='cwa_client')

session = requests.Session()

CWA_DATASTORE_PATH = "/v1/rest/datastore"

# F-D0047 township/county datasets name their elements in Chinese and keep
# each value under a named ElementValue key; F-C0032 still uses short codes.
NAMED_ELEMENT_DATASET_PREFIX = "F-D0047-"

# Upstream element name -> (element code, ElementValue key).
NAMED_ELEMENTS: Dict[str, Tuple[str, str]] = {
    "天氣現象": ("Wx", "Weather"),
    "12小時降雨機率": ("PoP12h", "ProbabilityOfPrecipitation"),
    "3小時降雨機率": ("PoP6h", "ProbabilityOfPrecipitation"),
    "最低溫度": ("MinT", "MinTemperature"),
    "最高溫度": ("MaxT", "MaxTemperature"),
    "平均溫度": ("T", "Temperature"),
    "溫度": ("T", "Temperature"),
    "最大舒適度指數": ("CI", "MaxComfortIndexDescription"),
    "舒適度指數": ("CI", "ComfortIndexDescription"),
    "最小舒適度指數": ("MinCI", "MinComfortIndexDescription"),
    "風速": ("WS", "WindSpeed"),
    "風向": ("Wd", "WindDirection"),
    "平均相對濕度": ("RH", "RelativeHumidity"),
    "天氣預報綜合描述": ("WeatherDescription", "WeatherDescription"),
}

# Element code -> name used in the elementName query of F-D0047 datasets.
CODE_TO_ELEMENT_NAME: Dict[str, str] = {
    "Wx": "天氣現象",
    "PoP12h": "12小時降雨機率",
    "PoP6h": "3小時降雨機率",
    "MinT": "最低溫度",
    "MaxT": "最高溫度",
    "T": "平均溫度",
    "CI": "最大舒適度指數",
    "MinCI": "最小舒適度指數",
    "WS": "風速",
    "Wd": "風向",
    "RH": "平均相對濕度",
    "WeatherDescription": "天氣預報綜合描述",
}


@dataclass
class SeriesEntry:
    """One time-stamped value of a weather element."""
    start_time: str
    end_time: Optional[str]
    value: Optional[str]


@dataclass
class ElementSeries:
    """Upstream time series for one element code (Wx, MinT, ...)."""
    code: str
    entries: List[SeriesEntry] = field(default_factory=list)


@dataclass
class LocationForecast:
    """All element series returned for a single location."""
    name: str
    update_time: Optional[str]
    elements: List[ElementSeries]

    def element_codes(self) -> List[str]:
        return [series.code for series in self.elements]


def upstream_element_names(dataset_id: str, element_codes: Sequence[str]) -> List[str]:
    """Element names to put in the query; F-D0047 datasets want their Chinese names."""
    if not dataset_id.startswith(NAMED_ELEMENT_DATASET_PREFIX):
        return list(element_codes)
    return [CODE_TO_ELEMENT_NAME.get(code, code) for code in element_codes]


def fetch_dataset(dataset_id: str,
                  location_names: Sequence[str],
                  element_codes: Sequence[str],
                  *,
                  api_key: str,
                  base_url: str,
                  timeout: float = 10.0,
                  ) -> dict:
    """Fetch the raw JSON payload of a CWA forecast dataset."""
    url = f"{base_url}{CWA_DATASTORE_PATH}/{dataset_id}"
    params = {
        "Authorization": api_key,
        "locationName": ",".join(location_names),
        "format": "JSON",
    }
    if element_codes:
        params["elementName"] = ",".join(upstream_element_names(dataset_id, element_codes))

    try:
        resp = session.get(url, params=params, timeout=timeout)
    except requests.exceptions.Timeout as exc:
        logger.error(f"CWA request for {dataset_id} timed out: {exc}")
        raise UpstreamError("CWA API did not respond in time", status_code=504) from exc
    except requests.exceptions.RequestException as exc:
        logger.error(f"CWA request for {dataset_id} failed: {exc}")
        raise UpstreamError("Unable to reach the CWA API", status_code=502) from exc

    logger.info(f"GET {mask_url(getattr(resp, 'url', None) or url)} -> {resp.status_code}")

    try:
        resp.raise_for_status()
    except requests.exceptions.HTTPError as exc:
        body = _safe_json(resp)
        message = body.get("message") if isinstance(body, dict) else None
        logger.error(f"CWA API returned {resp.status_code} for {dataset_id}: {message or exc}")
        raise UpstreamError(
            message or "Unable to fetch weather data",
            status_code=resp.status_code,
            details=body if body is not None else getattr(resp, "text", None),
        ) from exc

    data = _safe_json(resp)
    if not isinstance(data, dict):
        logger.error(f"CWA API returned a non-JSON body for {dataset_id}")
        raise UpstreamError("CWA API returned an unreadable response")

    # The datastore reports logical failures as HTTP 200 with success="false".
    if str(data.get("success", "true")).lower() == "false":
        logger.error(f"CWA API reported failure for {dataset_id}: {data.get('message')}")
        raise UpstreamError(
            data.get("message") or "CWA API reported a failure",
            details=data.get("result"),
        )
    return data


def _safe_json(resp) -> Any:
    """Return the decoded JSON body or None."""
    try:
        return resp.json()
    except ValueError:
        return None


def _pick(mapping: dict, *keys: str) -> Any:
    """First present key among spelling variants (camelCase vs. PascalCase)."""
    for key in keys:
        if key in mapping:
            return mapping[key]
    return None


def _entry_value(entry: dict, value_key: Optional[str]) -> Optional[str]:
    """Read the scalar of a time entry in any of the dataset layouts."""
    parameter = entry.get("parameter")
    if isinstance(parameter, dict):
        value = parameter.get("parameterName")
        return None if value is None else str(value)

    values = _pick(entry, "elementValue", "ElementValue")
    if isinstance(values, list) and values:
        first = values[0]
        if isinstance(first, dict):
            keys = (value_key, "value", "Value") if value_key else ("value", "Value")
            value = _pick(first, *keys)
            return None if value is None else str(value)
    return None


def _parse_series(raw: dict) -> ElementSeries:
    name = _pick(raw, "elementName", "ElementName")
    if not name:
        raise DataShapeError("Weather element without a name in CWA response")
    code, value_key = NAMED_ELEMENTS.get(str(name), (str(name), None))

    times = _pick(raw, "time", "Time")
    if not isinstance(times, list):
        raise DataShapeError(f"Weather element '{name}' has no time array")

    entries: List[SeriesEntry] = []
    for entry in times:
        if not isinstance(entry, dict):
            continue
        start = _pick(entry, "startTime", "StartTime", "dataTime", "DataTime")
        if not start:
            logger.debug(f"Skipping {code} time entry without a start time")
            continue
        entries.append(SeriesEntry(
            start_time=str(start),
            end_time=_pick(entry, "endTime", "EndTime"),
            value=_entry_value(entry, value_key),
        ))
    return ElementSeries(code=code, entries=entries)


def _location_list(records: dict) -> tuple[list, Optional[str]]:
    """Return (locations, dataset description) for either payload layout."""
    if "location" in records:
        return records.get("location") or [], records.get("datasetDescription")

    groups = _pick(records, "locations", "Locations")
    if isinstance(groups, list):
        if not groups or not isinstance(groups[0], dict):
            return [], None
        group = groups[0]
        description = _pick(group, "datasetDescription", "DatasetDescription") \
            or records.get("datasetDescription")
        return _pick(group, "location", "Location") or [], description

    raise DataShapeError("CWA response has no location list")


def extract_location(payload: dict, names: Sequence[str]) -> LocationForecast:
    """
    Pull one location's element series out of a CWA dataset payload.

    Handles the 36-hour layout (``records.location[]`` with ``parameter``
    values) and the weekly layouts (``records.locations[0].location[]`` with
    ``elementValue[0].value``, or ``records.Locations[0].Location[]`` with
    Chinese element names and named ``ElementValue`` keys). Element names are
    mapped to their short codes. The first location whose name matches
    ``names`` wins; otherwise the first location returned is used.
    """
    records = payload.get("records") if isinstance(payload, dict) else None
    if not isinstance(records, dict) or not records:
        raise DataShapeError("CWA response is missing 'records'")

    locations, description = _location_list(records)
    if not locations:
        raise LocationNotFoundError(f"No weather data available for {names[0] if names else 'location'}")

    chosen = None
    for wanted in names:
        chosen = next(
            (loc for loc in locations if _pick(loc, "locationName", "LocationName") == wanted),
            None,
        )
        if chosen is not None:
            break
    if chosen is None:
        chosen = locations[0]
        logger.warning(
            f"Requested location {list(names)} not matched by name; "
            f"using {_pick(chosen, 'locationName', 'LocationName')}"
        )

    raw_elements = _pick(chosen, "weatherElement", "WeatherElement")
    if not isinstance(raw_elements, list) or not raw_elements:
        raise DataShapeError("CWA response has no weather elements for the location")

    return LocationForecast(
        name=_pick(chosen, "locationName", "LocationName") or (names[0] if names else ""),
        update_time=description,
        elements=[_parse_series(raw) for raw in raw_elements if isinstance(raw, dict)],
    )

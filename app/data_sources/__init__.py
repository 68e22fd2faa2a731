"""Data source factories for plugging different forecast backends."""

from .base import CwaForecastDataSource, ForecastDataSource
from .factory import build_data_source
from .file_source import FileForecastDataSource
from .cwa_client import (
    ElementSeries,
    LocationForecast,
    SeriesEntry,
    extract_location,
    fetch_dataset,
)

__all__ = [
    "build_data_source",
    "CwaForecastDataSource",
    "FileForecastDataSource",
    "ForecastDataSource",
    "ElementSeries",
    "LocationForecast",
    "SeriesEntry",
    "extract_location",
    "fetch_dataset",
]

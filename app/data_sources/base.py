"""Interfaces and adapters for forecast data sources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

from app.data_sources.cwa_client import fetch_dataset
from app.errors import ConfigurationError
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="data_sources/base")


class ForecastDataSource(Protocol):
    """Interface for anything that can return a raw CWA dataset payload."""

    def fetch_forecast(
        self,
        dataset_id: str,
        location_names: Sequence[str],
        element_codes: Sequence[str],
    ) -> dict:
        """Return the dataset payload for the given locations and elements."""
        ...


@dataclass
class CwaForecastDataSource(ForecastDataSource):
    """Live CWA datastore, bound to an API key and base URL."""

    api_key: str | None
    base_url: str
    timeout: float = 10.0

    def fetch_forecast(self, dataset_id, location_names, element_codes) -> dict:
        """Call the CWA API; the key is checked per request, not at startup."""
        if not self.api_key:
            logger.error("CWA API key is not configured (set CWA_API_KEY)")
            raise ConfigurationError("Set CWA_API_KEY in the environment or .env file")
        return fetch_dataset(
            dataset_id,
            location_names,
            element_codes,
            api_key=self.api_key,
            base_url=self.base_url,
            timeout=self.timeout,
        )

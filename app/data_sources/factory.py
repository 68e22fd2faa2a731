"""Factory helpers for choosing a forecast data source at startup."""

from __future__ import annotations

from app import config
from app.data_sources.base import CwaForecastDataSource, ForecastDataSource
from utils.logging_utils import get_tagged_logger, mask_url

logger = get_tagged_logger(__name__, tag="data_sources/factory")


DEFAULT_SOURCE_NAME = "cwa"


def build_data_source(settings: config.Settings | None = None) -> ForecastDataSource:
    """Instantiate the configured forecast data source."""
    settings = settings or config.settings
    source = (settings.forecast_source or DEFAULT_SOURCE_NAME).lower()

    if source == "cwa":
        logger.info(f"Using CWA data source at {mask_url(settings.api_base_url)}")
        if not settings.api_key:
            logger.warning("CWA_API_KEY is not set; weather requests will fail until it is configured")
        return CwaForecastDataSource(
            api_key=settings.api_key,
            base_url=settings.api_base_url,
            timeout=settings.request_timeout_seconds,
        )

    if source == "file":
        from .file_source import FileForecastDataSource

        if not settings.fixture_dir:
            raise ValueError("fixture_dir must be set for the file data source")
        logger.info(f"Using file data source from {settings.fixture_dir}")
        return FileForecastDataSource(settings.fixture_dir)

    raise ValueError(f"Unknown forecast source '{source}'")

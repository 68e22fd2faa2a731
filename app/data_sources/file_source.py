"""Offline data source that serves saved CWA payloads from disk."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Sequence

from app.data_sources.base import ForecastDataSource
from app.errors import UpstreamError
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="data_sources/file")


class FileForecastDataSource(ForecastDataSource):
    """Reads ``<fixture_dir>/<dataset_id>.json``; useful for local development and demos."""

    def __init__(self, fixture_dir: str | Path):
        self.fixture_dir = Path(fixture_dir)

    def fetch_forecast(self, dataset_id: str, location_names: Sequence[str], element_codes: Sequence[str]) -> dict:
        path = self.fixture_dir / f"{dataset_id}.json"
        logger.debug(f"Loading fixture {path} for {list(location_names)}")
        try:
            with path.open(encoding="utf-8") as fh:
                return json.load(fh)
        except FileNotFoundError as exc:
            logger.error(f"Fixture not found: {path}")
            raise UpstreamError(f"No saved payload for dataset {dataset_id}", status_code=503) from exc
        except json.JSONDecodeError as exc:
            logger.error(f"Fixture {path} is not valid JSON: {exc}")
            raise UpstreamError(f"Saved payload for dataset {dataset_id} is unreadable") from exc

import json
import tempfile
import unittest
from pathlib import Path

from app.data_sources.base import CwaForecastDataSource
from app.data_sources.factory import DEFAULT_SOURCE_NAME, build_data_source
from app.data_sources.file_source import FileForecastDataSource
from app.errors import ConfigurationError, UpstreamError


class DummySettings:
    def __init__(self, **kwargs):
        self.forecast_source = DEFAULT_SOURCE_NAME
        self.fixture_dir = None
        self.api_key = "CWA-KEY"
        self.api_base_url = "https://example.test/api"
        self.request_timeout_seconds = 3.0
        for k, v in kwargs.items():
            setattr(self, k, v)


class TestDataSourceFactory(unittest.TestCase):
    def test_build_cwa_default(self):
        ds = build_data_source(DummySettings())
        self.assertIsInstance(ds, CwaForecastDataSource)
        self.assertEqual(ds.base_url, "https://example.test/api")
        self.assertEqual(ds.timeout, 3.0)

    def test_unknown_source_raises(self):
        with self.assertRaises(ValueError):
            build_data_source(DummySettings(forecast_source="unknown-source"))

    def test_file_source_requires_dir(self):
        with self.assertRaises(ValueError):
            build_data_source(DummySettings(forecast_source="file"))

    def test_file_source_reads_dataset_json(self):
        with tempfile.TemporaryDirectory() as tmp:
            Path(tmp, "F-C0032-001.json").write_text(json.dumps({"records": {"location": []}}), encoding="utf-8")
            ds = build_data_source(DummySettings(forecast_source="file", fixture_dir=tmp))
            self.assertIsInstance(ds, FileForecastDataSource)
            self.assertEqual(ds.fetch_forecast("F-C0032-001", ["臺北市"], ["Wx"]), {"records": {"location": []}})
            with self.assertRaises(UpstreamError) as ctx:
                ds.fetch_forecast("F-D0047-091", ["臺北市"], ["Wx"])
            self.assertEqual(ctx.exception.status_code, 503)

    def test_cwa_source_without_key_raises_configuration_error(self):
        ds = build_data_source(DummySettings(api_key=None))
        with self.assertRaises(ConfigurationError):
            ds.fetch_forecast("F-C0032-001", ["臺北市"], ["Wx"])


if __name__ == "__main__":
    unittest.main()
